"""Catalog endpoints — the collection (``/movies``) and the watch list (``/towatch``).

Both lists share one router shape, built per namespace.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from movie_catalog.api.deps import (
    AUTH_REQUIRED, get_omdb, get_store, get_trailer_finder, optional_user, require_user, respond,
)
from movie_catalog.clients.omdb import OmdbClient, extract_imdb_id
from movie_catalog.clients.trailers import TrailerFinder
from movie_catalog.config import settings
from movie_catalog.errors import InvalidInput, NotConfigured, NotFound, Unauthorized
from movie_catalog.models.schemas import CatalogEntryIn, ImportRequest, PosterUpdate, TrailerUpdate
from movie_catalog.services.catalog import CatalogService, mark_as_watched, resolve_slug
from movie_catalog.services.enrichment import EnrichmentService
from movie_catalog.store.base import MOVIE_NAMESPACE, TOWATCH_NAMESPACE, KeyValueStore
from movie_catalog.utils import timed

logger = logging.getLogger(__name__)


def build_catalog_router(namespace: str) -> APIRouter:
    router = APIRouter()

    def get_catalog(store: KeyValueStore = Depends(get_store)) -> CatalogService:
        return CatalogService(store, namespace)

    def get_enrichment(
        catalog: CatalogService = Depends(get_catalog),
        omdb: Optional[OmdbClient] = Depends(get_omdb),
        trailers: TrailerFinder = Depends(get_trailer_finder),
    ) -> EnrichmentService:
        return EnrichmentService(catalog, omdb, trailers, delay_seconds=settings.enrichment_delay_seconds)

    # ── Listing & writes ─────────────────────────────────────────

    @router.get("")
    @timed
    async def list_entries(request: Request, catalog: CatalogService = Depends(get_catalog)):
        """All entries, in store order."""
        return await respond(request, {"movies": await catalog.list_entries()})

    @router.post("")
    async def upsert_entry(
        request: Request,
        entry: CatalogEntryIn,
        user: Optional[dict] = Depends(optional_user),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Create an entry, or overwrite one by its id (signed-in users only)."""
        if user is None and await catalog.exists(entry.id):
            raise Unauthorized(AUTH_REQUIRED)
        saved = await catalog.upsert(entry.to_record())
        return await respond(request, {"movie": saved})

    @router.post("/import")
    async def import_entry(
        request: Request,
        body: ImportRequest,
        catalog: CatalogService = Depends(get_catalog),
        omdb: Optional[OmdbClient] = Depends(get_omdb),
    ):
        """Create an entry from an IMDb URL using OMDb metadata."""
        imdb_id = extract_imdb_id(body.imdb_url)
        if imdb_id is None:
            raise InvalidInput("Invalid IMDb URL or movie not found.")
        if omdb is None:
            raise NotConfigured("OMDb API key is not configured")
        meta = await omdb.lookup_by_imdb_id(imdb_id, full_plot=True)
        if meta is None:
            raise NotFound("Invalid IMDb URL or movie not found.")
        created = await catalog.create_from_metadata(meta)
        logger.info(f"Imported '{created['title']}' as {namespace} #{created['id']}")
        return await respond(request, {"movie": created})

    # ── Batch jobs ───────────────────────────────────────────────

    @router.post("/fetch-all-trailers")
    async def fetch_all_trailers(
        request: Request,
        limit: int = Query(settings.enrichment_batch_limit, ge=1, le=100),
        force: bool = False,
        user: dict = Depends(require_user),
        enrichment: EnrichmentService = Depends(get_enrichment),
    ):
        result = await enrichment.backfill_trailers(limit, force=force, should_stop=request.is_disconnected)
        return await respond(request, result)

    @router.post("/fetch-plots")
    async def fetch_plots(
        request: Request,
        limit: int = Query(settings.enrichment_batch_limit, ge=1, le=100),
        user: dict = Depends(require_user),
        enrichment: EnrichmentService = Depends(get_enrichment),
    ):
        result = await enrichment.backfill_plots(limit, should_stop=request.is_disconnected)
        return await respond(request, result)

    @router.post("/fetch-runtimes")
    async def fetch_runtimes(
        request: Request,
        limit: int = Query(settings.enrichment_batch_limit, ge=1, le=100),
        user: dict = Depends(require_user),
        enrichment: EnrichmentService = Depends(get_enrichment),
    ):
        result = await enrichment.backfill_runtimes(limit, should_stop=request.is_disconnected)
        return await respond(request, result)

    @router.post("/migrate-date-added")
    async def migrate_date_added(
        request: Request, user: dict = Depends(require_user), catalog: CatalogService = Depends(get_catalog),
    ):
        updated = await catalog.migrate_date_added()
        return await respond(request, {"updated": updated})

    # ── Single entry ─────────────────────────────────────────────

    @router.patch("/{entry_id}")
    async def update_entry(
        request: Request,
        entry_id: int,
        updates: dict[str, Any] = Body(...),
        user: dict = Depends(require_user),
        catalog: CatalogService = Depends(get_catalog),
    ):
        """Merge the given fields into the entry."""
        return await respond(request, {"movie": await catalog.merge(entry_id, updates)})

    @router.delete("/{entry_id}")
    async def delete_entry(
        request: Request,
        entry_id: int,
        user: dict = Depends(require_user),
        catalog: CatalogService = Depends(get_catalog),
    ):
        await catalog.delete(entry_id)
        logger.info(f"{user['username']} deleted {namespace} #{entry_id}")
        return await respond(request)

    @router.patch("/{entry_id}/poster")
    async def update_poster(
        request: Request,
        entry_id: int,
        body: PosterUpdate,
        user: dict = Depends(require_user),
        catalog: CatalogService = Depends(get_catalog),
    ):
        return await respond(request, {"movie": await catalog.merge(entry_id, {"image": body.image})})

    @router.patch("/{entry_id}/trailer")
    async def update_trailer(
        request: Request,
        entry_id: int,
        body: TrailerUpdate,
        user: dict = Depends(require_user),
        catalog: CatalogService = Depends(get_catalog),
    ):
        updated = await catalog.merge(entry_id, {"trailer": body.trailer})
        logger.info(f"Updated trailer for: {updated.get('title')}")
        return await respond(request, {"movie": updated})

    @router.post("/{entry_id}/fetch-trailer")
    async def fetch_trailer(
        request: Request,
        entry_id: int,
        user: dict = Depends(require_user),
        enrichment: EnrichmentService = Depends(get_enrichment),
    ):
        return await respond(request, await enrichment.fetch_trailer(entry_id))

    if namespace == MOVIE_NAMESPACE:
        @router.get("/slug/{slug}")
        async def get_by_slug(request: Request, slug: str, store: KeyValueStore = Depends(get_store)):
            """Detail-page lookup across the collection and the watch list."""
            entry = await resolve_slug(store, slug)
            if entry is None:
                raise NotFound("Movie not found")
            return await respond(request, {"movie": entry})

    if namespace == TOWATCH_NAMESPACE:
        @router.post("/{entry_id}/watched")
        async def watched(
            request: Request,
            entry_id: int,
            user: dict = Depends(require_user),
            store: KeyValueStore = Depends(get_store),
        ):
            """Move the entry into the collection under a new id."""
            return await respond(request, {"movie": await mark_as_watched(store, entry_id)})

    return router


movies_router = build_catalog_router(MOVIE_NAMESPACE)
towatch_router = build_catalog_router(TOWATCH_NAMESPACE)
