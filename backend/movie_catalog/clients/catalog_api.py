"""HTTP client for the catalog API."""

import logging
from typing import Any, Optional

import httpx

from movie_catalog.clients.base import RemotePort

logger = logging.getLogger(__name__)


class CatalogApiError(httpx.HTTPError):
    """The API answered but reported ``success: false``."""


class CatalogApiClient(RemotePort):
    """Async client for ``/api/v1``. ``auth`` is sent as HTTP Basic on every call."""

    def __init__(
        self,
        base_url: str,
        auth: Optional[tuple[str, str]] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout
        self._transport = transport

    async def _request(self, method: str, path: str, json: Any = None) -> dict:
        async with httpx.AsyncClient(
            base_url=self.base_url, auth=self.auth, timeout=self.timeout, transport=self._transport,
        ) as client:
            resp = await client.request(method, path, json=json)
            resp.raise_for_status()
            data = resp.json()
        if not data.get("success"):
            raise CatalogApiError(data.get("error") or f"{method} {path} failed")
        return data

    # ── Entries ──────────────────────────────────────────────────

    async def list_entries(self, namespace: str) -> list[dict]:
        data = await self._request("GET", f"/{namespace}")
        return data.get("movies", [])

    async def save_entry(self, namespace: str, entry: dict) -> dict:
        data = await self._request("POST", f"/{namespace}", json=entry)
        return data["movie"]

    async def delete_entry(self, namespace: str, entry_id: int) -> None:
        await self._request("DELETE", f"/{namespace}/{entry_id}")

    async def mark_watched(self, entry_id: int) -> dict:
        data = await self._request("POST", f"/towatch/{entry_id}/watched")
        return data["movie"]

    # ── Comments & ratings ───────────────────────────────────────

    async def list_comments(self, movie_id: int) -> list[dict]:
        data = await self._request("GET", f"/comments/{movie_id}")
        return data.get("comments", [])

    async def add_comment(self, movie_id: int, username: str, text: str) -> dict:
        data = await self._request(
            "POST", "/comments", json={"movieId": movie_id, "username": username, "text": text},
        )
        return data["comment"]

    async def submit_rating(self, movie_id: int, rating: int, user_identifier: str) -> dict:
        data = await self._request(
            "POST", "/ratings",
            json={"movieId": movie_id, "rating": rating, "userIdentifier": user_identifier},
        )
        return data["rating"]

    async def rating_averages(self) -> dict[str, dict]:
        data = await self._request("GET", "/ratings")
        return data.get("averages", {})

    async def user_ratings(self, user_identifier: str) -> dict[str, int]:
        data = await self._request("GET", f"/user-ratings/{user_identifier}")
        return data.get("userRatings", {})
