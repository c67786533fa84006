"""Trailer discovery — IMDb page scrape with a YouTube search fallback.

The IMDb title page often embeds YouTube links; the first ``watch?v=`` or
``embed/`` id found wins. Anything else (no IMDb id, request failure, no link)
falls back to a YouTube embed that runs a search for "<title> <year> official trailer".
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

_WATCH_LINK = re.compile(r"youtube\.com/watch\?v=([a-zA-Z0-9_-]+)")
_EMBED_LINK = re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]+)")


@dataclass
class TrailerResult:
    url: str
    source: str       # "imdb-youtube" | "youtube-embed"


class TrailerFinder:
    """Best-effort trailer URL lookup for a catalog entry."""

    def __init__(
        self,
        imdb_url: str = "https://www.imdb.com",
        youtube_url: str = "https://www.youtube.com",
        user_agent: str = "Mozilla/5.0",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.imdb_url = imdb_url.rstrip("/")
        self.youtube_url = youtube_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

    async def find(self, title: str, year: Optional[int] = None, imdb_id: Optional[str] = None) -> TrailerResult:
        if imdb_id:
            video_id = await self._scrape_imdb(imdb_id)
            if video_id:
                return TrailerResult(f"{self.youtube_url}/watch?v={video_id}", "imdb-youtube")
        return TrailerResult(self.search_url(title, year), "youtube-embed")

    def search_url(self, title: str, year: Optional[int] = None) -> str:
        query = f"{title} {year or ''} official trailer"
        return f"{self.youtube_url}/embed?listType=search&list={quote(query, safe='')}"

    async def _scrape_imdb(self, imdb_id: str) -> Optional[str]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True,
            ) as client:
                resp = await client.get(
                    f"{self.imdb_url}/title/{imdb_id}/",
                    headers={"User-Agent": self.user_agent},
                )
        except httpx.HTTPError as e:
            logger.info(f"IMDb page fetch failed for {imdb_id}, using YouTube search: {e}")
            return None

        if resp.status_code >= 400:
            logger.info(f"IMDb page for {imdb_id} returned {resp.status_code}")
            return None

        html = resp.text
        match = _WATCH_LINK.search(html) or _EMBED_LINK.search(html)
        if not match:
            logger.debug(f"No YouTube link on IMDb page for {imdb_id}")
            return None
        return match.group(1)
