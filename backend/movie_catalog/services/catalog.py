"""Catalog entries — CRUD over one store namespace plus the cross-list moves.

``movie`` holds the watched collection, ``towatch`` the watch list. Both
namespaces share the same entry shape and id space rules: ids are only unique
within a namespace and new ids are ``max(existing) + 1``.
"""

import logging
from typing import Any, Optional

from movie_catalog.clients.omdb import MetadataResult
from movie_catalog.errors import Conflict, InvalidInput, NotFound
from movie_catalog.services import slugs
from movie_catalog.services.catalog_query import SortKey, sort_entries
from movie_catalog.store.base import (
    MOVIE_NAMESPACE, TOWATCH_NAMESPACE, KeyValueStore, entry_key,
)
from movie_catalog.utils import now_ms

logger = logging.getLogger(__name__)

DEFAULT_GENRE = "Drama"
DEFAULT_RATING = 7.0
DEFAULT_DESCRIPTION = "No description available."

# Posters used when OMDb has none, keyed by the entry's genre string.
GENRE_POSTERS = {
    "Action": "https://images.unsplash.com/photo-1765510296004-614b6cc204da?fit=max&w=1080",
    "Comedy": "https://images.unsplash.com/photo-1587042285747-583b4d4d73b7?fit=max&w=1080",
    "Drama": "https://images.unsplash.com/photo-1765510296004-614b6cc204da?fit=max&w=1080",
    "Horror": "https://images.unsplash.com/photo-1767048264833-5b65aacd1039?fit=max&w=1080",
    "Romance": "https://images.unsplash.com/photo-1765510296004-614b6cc204da?fit=max&w=1080",
    "Thriller": "https://images.unsplash.com/photo-1765510296004-614b6cc204da?fit=max&w=1080",
    "Sci-Fi": "https://images.unsplash.com/photo-1759267960211-5f445be05c93?fit=max&w=1080",
    "Animation": "https://images.unsplash.com/photo-1759267960211-5f445be05c93?fit=max&w=1080",
}


class CatalogService:
    """Entries stored under ``<namespace>:<id>``."""

    def __init__(self, store: KeyValueStore, namespace: str = MOVIE_NAMESPACE):
        self.store = store
        self.namespace = namespace

    def _key(self, entry_id: int | str) -> str:
        return entry_key(self.namespace, entry_id)

    async def list_entries(self) -> list[dict]:
        return await self.store.get_by_prefix(f"{self.namespace}:")

    async def get(self, entry_id: int) -> dict:
        entry = await self.store.get(self._key(entry_id))
        if entry is None:
            raise NotFound("Movie not found")
        return entry

    async def next_id(self, entries: Optional[list[dict]] = None) -> int:
        if entries is None:
            entries = await self.list_entries()
        ids = [e["id"] for e in entries if isinstance(e.get("id"), int)]
        return max(ids) + 1 if ids else 1

    async def exists(self, entry_id: int) -> bool:
        return await self.store.get(self._key(entry_id)) is not None

    async def _check_slug(self, entry_id: int, title: str) -> None:
        clash = slugs.slug_collision(await self.list_entries(), title, exclude_id=entry_id)
        if clash is not None:
            raise Conflict(
                f"'{title}' has the same URL as existing entry #{clash.get('id')} "
                f"('{clash.get('title')}')"
            )

    async def upsert(self, record: dict) -> dict:
        """Write an entry by id. A new or renamed title must not collide on slug."""
        entry_id = record["id"]
        existing = await self.store.get(self._key(entry_id))
        if existing is None or existing.get("title") != record["title"]:
            await self._check_slug(entry_id, record["title"])
        await self.store.set(self._key(entry_id), record)
        return record

    async def merge(self, entry_id: int, updates: dict[str, Any]) -> dict:
        """Shallow-merge ``updates`` into the stored entry. The id is not changeable."""
        entry = await self.get(entry_id)
        updated = {**entry, **{k: v for k, v in updates.items() if k != "id"}}
        if updated.get("title") != entry.get("title"):
            if not isinstance(updated.get("title"), str) or not updated["title"]:
                raise InvalidInput("Title is required")
            await self._check_slug(entry_id, updated["title"])
        await self.store.set(self._key(entry_id), updated)
        return updated

    async def delete(self, entry_id: int) -> None:
        await self.store.delete(self._key(entry_id))

    async def create_from_metadata(self, meta: MetadataResult) -> dict:
        """New entry from an OMDb lookup; duplicate titles are rejected."""
        entries = await self.list_entries()
        title = meta.title or "Unknown Title"
        duplicate = next((e for e in entries if str(e.get("title", "")).lower() == title.lower()), None)
        if duplicate is not None:
            raise Conflict(f"This movie already exists in your collection (ID: #{duplicate.get('id')}).")

        genre = meta.genre or DEFAULT_GENRE
        entry = {
            "id": await self.next_id(entries),
            "title": title,
            "year": meta.year,
            "genre": genre,
            "rating": meta.rating or DEFAULT_RATING,
            "image": meta.poster or GENRE_POSTERS.get(genre) or GENRE_POSTERS["Action"],
            "description": meta.plot or DEFAULT_DESCRIPTION,
            "runtime": meta.runtime,
            "imdbId": meta.imdb_id,
            "imdbRating": meta.rating,
            "director": meta.director,
            "cast": meta.cast or None,
            "plot": meta.plot,
            "dateAdded": now_ms(),
        }
        entry = {k: v for k, v in entry.items() if v is not None}
        return await self.upsert(entry)

    async def migrate_date_added(self) -> int:
        """Stamp ``dateAdded`` on entries created before the field existed."""
        updated = 0
        for entry in await self.list_entries():
            if entry.get("dateAdded"):
                continue
            entry["dateAdded"] = now_ms()
            await self.store.set(self._key(entry["id"]), entry)
            updated += 1
        logger.info(f"dateAdded migration on '{self.namespace}': {updated} entries updated")
        return updated


async def mark_as_watched(store: KeyValueStore, towatch_id: int) -> dict:
    """Move a to-watch entry into the collection under a fresh id.

    Two writes without a transaction: if the delete fails the entry is in both lists.
    """
    towatch = CatalogService(store, TOWATCH_NAMESPACE)
    movies = CatalogService(store, MOVIE_NAMESPACE)

    entry = await towatch.get(towatch_id)
    watched = {**entry, "id": await movies.next_id(), "dateAdded": now_ms()}
    await store.set(entry_key(MOVIE_NAMESPACE, watched["id"]), watched)
    await towatch.delete(towatch_id)
    logger.info(f"Marked '{entry.get('title')}' as watched: towatch #{towatch_id} -> movie #{watched['id']}")
    return watched


async def resolve_slug(store: KeyValueStore, slug: str) -> Optional[dict]:
    """Look a slug up across the collection first, then the watch list.

    Within a list the oldest entry (lowest id) wins a slug collision.
    """
    entries = [
        *sort_entries(await CatalogService(store, MOVIE_NAMESPACE).list_entries(), SortKey.DATE_ADDED_LATEST),
        *sort_entries(await CatalogService(store, TOWATCH_NAMESPACE).list_entries(), SortKey.DATE_ADDED_LATEST),
    ]
    return slugs.resolve(entries, slug)
