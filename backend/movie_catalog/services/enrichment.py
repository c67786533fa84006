"""Metadata backfill jobs — plots, trailers and runtimes.

Each call processes at most ``limit`` entries that still need the field and
reports how many remain, so a client can loop until ``hasMore`` is false.
Calls are spaced by a fixed delay; there is no backoff. If ``should_stop``
reports the client went away the job stops before the next entry. Entries
already written stay written.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from movie_catalog.clients.omdb import OmdbClient
from movie_catalog.clients.trailers import TrailerFinder
from movie_catalog.errors import NotConfigured
from movie_catalog.services.catalog import CatalogService

logger = logging.getLogger(__name__)

StopCheck = Callable[[], Awaitable[bool]]

MIN_PLOT_LENGTH = 100


async def _never_stop() -> bool:
    return False


def needs_plot(entry: dict) -> bool:
    plot = entry.get("plot")
    return bool(entry.get("imdbId")) and (not plot or plot == "N/A" or len(plot) < MIN_PLOT_LENGTH)


def needs_trailer(entry: dict) -> bool:
    trailer = entry.get("trailer")
    return not trailer or not str(trailer).strip()


def needs_runtime(entry: dict) -> bool:
    runtime = entry.get("runtime")
    return not runtime or not str(runtime).strip()


class EnrichmentService:
    """Fills in missing entry fields from OMDb and IMDb/YouTube."""

    def __init__(
        self,
        catalog: CatalogService,
        omdb: Optional[OmdbClient],
        trailers: TrailerFinder,
        delay_seconds: float = 0.2,
    ):
        self.catalog = catalog
        self.omdb = omdb
        self.trailers = trailers
        self.delay_seconds = delay_seconds

    def _require_omdb(self) -> OmdbClient:
        if self.omdb is None:
            raise NotConfigured("OMDb API key is not configured")
        return self.omdb

    # ── Trailers ─────────────────────────────────────────────────

    async def fetch_trailer(self, entry_id: int) -> dict:
        entry = await self.catalog.get(entry_id)
        result = await self.trailers.find(entry["title"], entry.get("year"), entry.get("imdbId"))
        await self.catalog.merge(entry_id, {"trailer": result.url})
        logger.info(f"Trailer for '{entry['title']}': {result.url} ({result.source})")
        return {"trailerUrl": result.url, "source": result.source, "title": entry["title"]}

    async def backfill_trailers(
        self, limit: int, force: bool = False, should_stop: StopCheck = _never_stop,
    ) -> dict:
        entries = await self.catalog.list_entries()
        batch = [e for e in entries if force or needs_trailer(e)][:limit]
        logger.info(f"Trailer backfill: {len(batch)} of {len(entries)} entries (force={force})")

        updated = errors = processed = 0
        results = []
        for entry in batch:
            if await should_stop():
                logger.info("Client disconnected during trailer backfill")
                break
            processed += 1
            try:
                result = await self.trailers.find(entry["title"], entry.get("year"), entry.get("imdbId"))
                await self.catalog.merge(entry["id"], {"trailer": result.url})
                updated += 1
                results.append({
                    "movieId": entry["id"],
                    "title": entry["title"],
                    "status": "success",
                    "trailerUrl": result.url,
                    "source": result.source,
                })
            except Exception as e:
                logger.warning(f"Trailer lookup failed for '{entry.get('title')}': {e}")
                errors += 1
                results.append({
                    "movieId": entry.get("id"),
                    "title": entry.get("title"),
                    "status": "error",
                    "error": str(e),
                })
            await asyncio.sleep(self.delay_seconds)

        missing = sum(1 for e in entries if needs_trailer(e))
        summary = {
            "total": len(entries),
            "processed": processed,
            "updated": updated,
            "errors": errors,
            "skipped": 0,
            "remaining": max(0, missing - len(batch)),
        }
        logger.info(f"Trailer backfill summary: {summary}")
        return {"summary": summary, "results": results}

    # ── Plots ────────────────────────────────────────────────────

    async def backfill_plots(self, limit: int, should_stop: StopCheck = _never_stop) -> dict:
        omdb = self._require_omdb()
        entries = await self.catalog.list_entries()
        pending = [e for e in entries if needs_plot(e)]
        batch = pending[:limit]
        logger.info(f"Plot backfill: {len(batch)} of {len(pending)} entries needing a plot")

        updated = errors = skipped = 0
        for entry in batch:
            if await should_stop():
                logger.info("Client disconnected during plot backfill")
                break
            try:
                meta = await omdb.lookup_by_imdb_id(entry["imdbId"], full_plot=True)
                if meta and meta.plot:
                    await self.catalog.merge(entry["id"], {"plot": meta.plot})
                    updated += 1
                else:
                    logger.info(f"No plot available for '{entry['title']}'")
                    skipped += 1
            except Exception as e:
                logger.warning(f"Plot lookup failed for '{entry.get('title')}': {e}")
                errors += 1
            await asyncio.sleep(self.delay_seconds)

        logger.info(f"Plot backfill: {updated} updated, {errors} errors, {skipped} skipped")
        return {
            "updated": updated,
            "errors": errors,
            "skipped": skipped,
            "remaining": len(pending) - len(batch),
            "hasMore": len(pending) > len(batch),
        }

    # ── Runtimes ─────────────────────────────────────────────────

    async def backfill_runtimes(self, limit: int, should_stop: StopCheck = _never_stop) -> dict:
        """Runtime for films, ``"<n> Season(s)"`` for series; unknown ids are searched by title/year."""
        omdb = self._require_omdb()
        entries = await self.catalog.list_entries()
        pending = [e for e in entries if needs_runtime(e)]
        batch = pending[:limit]
        logger.info(f"Runtime backfill: {len(batch)} of {len(pending)} entries without runtime")

        updated = errors = skipped = 0
        for entry in batch:
            if await should_stop():
                logger.info("Client disconnected during runtime backfill")
                break
            try:
                imdb_id = entry.get("imdbId")
                if not imdb_id:
                    found = await omdb.lookup_by_title_year(entry["title"], entry.get("year"))
                    if found is None:
                        logger.info(f"'{entry['title']}' ({entry.get('year')}) not found on OMDb")
                        skipped += 1
                        continue
                    imdb_id = found.imdb_id

                meta = await omdb.lookup_by_imdb_id(imdb_id, full_plot=False)
                if meta and meta.runtime:
                    await self.catalog.merge(entry["id"], {"runtime": meta.runtime, "imdbId": imdb_id})
                    updated += 1
                else:
                    skipped += 1
            except Exception as e:
                logger.warning(f"Runtime lookup failed for '{entry.get('title')}': {e}")
                errors += 1
            finally:
                await asyncio.sleep(self.delay_seconds)

        return {
            "updated": updated,
            "errors": errors,
            "skipped": skipped,
            "remaining": len(pending) - len(batch),
            "hasMore": len(pending) > len(batch),
        }
