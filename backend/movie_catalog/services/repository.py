"""Client-side catalog repository: remote API first, local JSON cache as fallback.

Sync policy ``PREFER_REMOTE``:
- reads try the API; on success the result overwrites the cached copy, on any
  ``httpx.HTTPError`` the cached copy is returned instead;
- writes update the cache and then the API; an API failure is logged and the
  cached write stands;
- nothing is ever merged. Whichever tier answered last wins.

``LOCAL_ONLY`` never touches the API.
"""

import json
import logging
import secrets
import string
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import httpx

from movie_catalog.clients.base import LocalPort, RemotePort
from movie_catalog.services.catalog_query import attach_ratings
from movie_catalog.services.ratings import summarize
from movie_catalog.utils import now_ms

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_lowercase
ANONYMOUS_ID_KEY = "anonymousUserId"


class SyncPolicy(str, Enum):
    PREFER_REMOTE = "preferRemote"
    LOCAL_ONLY = "localOnly"


def anonymous_identifier() -> str:
    """``anon_<epoch ms>_<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(BASE36) for _ in range(9))
    return f"anon_{now_ms()}_{suffix}"


class LocalCache(LocalPort):
    """All documents in one JSON file, rewritten on every save."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Local cache {self.path} is corrupt, starting empty")
            return {}

    def load(self, name: str) -> Optional[Any]:
        return self._read_all().get(name)

    def save(self, name: str, value: Any) -> None:
        documents = self._read_all()
        documents[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(documents, indent=2), encoding="utf-8")


class CatalogRepository:

    def __init__(
        self,
        remote: Optional[RemotePort],
        local: LocalPort,
        policy: SyncPolicy = SyncPolicy.PREFER_REMOTE,
    ):
        self.remote = remote
        self.local = local
        self.policy = policy if remote is not None else SyncPolicy.LOCAL_ONLY

    @property
    def remote_enabled(self) -> bool:
        return self.policy == SyncPolicy.PREFER_REMOTE

    async def _read(self, name: str, fetch, default: Any) -> Any:
        if self.remote_enabled:
            try:
                value = await fetch()
                self.local.save(name, value)
                return value
            except httpx.HTTPError as e:
                logger.warning(f"Remote read of {name} failed, using local cache: {e}")
        cached = self.local.load(name)
        return default if cached is None else cached

    async def _write(self, description: str, push) -> Optional[Any]:
        if not self.remote_enabled:
            return None
        try:
            return await push()
        except httpx.HTTPError as e:
            logger.warning(f"Remote {description} failed, kept locally: {e}")
            return None

    # ── Identity ─────────────────────────────────────────────────

    def anonymous_user_id(self) -> str:
        """Stable per-cache anonymous identifier, created on first use."""
        existing = self.local.load(ANONYMOUS_ID_KEY)
        if existing:
            return existing
        identifier = anonymous_identifier()
        self.local.save(ANONYMOUS_ID_KEY, identifier)
        return identifier

    # ── Entries ──────────────────────────────────────────────────

    async def load_entries(self, namespace: str) -> list[dict]:
        return await self._read(namespace, lambda: self.remote.list_entries(namespace), [])

    async def save_entry(self, namespace: str, entry: dict) -> dict:
        entries = [e for e in (self.local.load(namespace) or []) if e.get("id") != entry["id"]]
        entries.append(entry)
        self.local.save(namespace, entries)
        saved = await self._write(f"save of {namespace} #{entry['id']}", lambda: self.remote.save_entry(namespace, entry))
        return saved or entry

    async def delete_entry(self, namespace: str, entry_id: int) -> None:
        entries = self.local.load(namespace) or []
        self.local.save(namespace, [e for e in entries if e.get("id") != entry_id])
        await self._write(f"delete of {namespace} #{entry_id}", lambda: self.remote.delete_entry(namespace, entry_id))

    async def mark_watched(self, entry_id: int) -> Optional[dict]:
        """Move a to-watch entry into the collection.

        The API assigns the new id when it is reachable; otherwise the local
        copy gets ``max(movie ids) + 1``.
        """
        towatch = self.local.load("towatch") or []
        entry = next((e for e in towatch if e.get("id") == entry_id), None)
        moved = await self._write(f"mark-watched of #{entry_id}", lambda: self.remote.mark_watched(entry_id))

        movies = self.local.load("movies") or []
        if moved is None:
            if entry is None:
                return None
            next_id = max((m.get("id", 0) for m in movies), default=0) + 1
            moved = {**entry, "id": next_id, "dateAdded": now_ms()}
        self.local.save("movies", [m for m in movies if m.get("id") != moved["id"]] + [moved])
        self.local.save("towatch", [e for e in towatch if e.get("id") != entry_id])
        return moved

    # ── Comments ─────────────────────────────────────────────────

    async def load_comments(self, movie_id: int) -> list[dict]:
        comments = await self._read(f"comments:{movie_id}", lambda: self.remote.list_comments(movie_id), [])
        return sorted(comments, key=lambda c: c.get("timestamp", 0))

    async def add_comment(self, movie_id: int, username: str, text: str) -> dict:
        comment = await self._write(
            f"comment on #{movie_id}", lambda: self.remote.add_comment(movie_id, username, text),
        )
        if comment is None:
            comment = {
                "id": f"local_{now_ms()}",
                "movieId": movie_id,
                "username": username,
                "text": text,
                "timestamp": now_ms(),
            }
        name = f"comments:{movie_id}"
        self.local.save(name, (self.local.load(name) or []) + [comment])
        return comment

    # ── Ratings ──────────────────────────────────────────────────

    async def rate(self, movie_id: int, rating: int, user_identifier: Optional[str] = None) -> dict:
        """Record a rating under the given identifier, or the anonymous one."""
        identifier = user_identifier or self.anonymous_user_id()
        record = {"movieId": movie_id, "rating": rating, "userIdentifier": identifier, "timestamp": now_ms()}

        local_ratings = [
            r for r in (self.local.load("ratings") or [])
            if not (r.get("movieId") == movie_id and r.get("userIdentifier") == identifier)
        ]
        self.local.save("ratings", local_ratings + [record])
        saved = await self._write(
            f"rating of #{movie_id}", lambda: self.remote.submit_rating(movie_id, rating, identifier),
        )
        return saved or record

    def _local_averages(self) -> dict[str, dict]:
        grouped: dict[str, list[dict]] = {}
        for r in self.local.load("ratings") or []:
            grouped.setdefault(str(r.get("movieId")), []).append(r)
        return {movie_id: summarize(ratings) for movie_id, ratings in grouped.items()}

    def _local_user_ratings(self, identifier: str) -> dict[str, int]:
        return {
            str(r.get("movieId")): r.get("rating")
            for r in self.local.load("ratings") or []
            if r.get("userIdentifier") == identifier
        }

    async def load_catalog_with_ratings(
        self, namespace: str = "movies", user_identifier: Optional[str] = None,
    ) -> list[dict]:
        """Entries with ``communityRating``/``ratingCount``/``userRating`` filled in."""
        identifier = user_identifier or self.anonymous_user_id()
        entries = await self.load_entries(namespace)

        averages = user_ratings = None
        if self.remote_enabled:
            try:
                averages = await self.remote.rating_averages()
                user_ratings = await self.remote.user_ratings(identifier)
            except httpx.HTTPError as e:
                logger.warning(f"Remote ratings unavailable, using local ratings: {e}")
                averages = user_ratings = None
        if averages is None:
            averages = self._local_averages()
            user_ratings = self._local_user_ratings(identifier)
        return attach_ratings(entries, averages, user_ratings)
