"""OMDb client — metadata lookup by IMDb id or by title/year.

OMDb answers HTTP 200 with ``{"Response": "False"}`` for misses; those become None.
Rate limiting is the caller's job (batch jobs sleep between calls).
"""

import re
from dataclasses import dataclass, field
from typing import Optional

import httpx

_IMDB_ID = re.compile(r"tt\d{7,8}")


@dataclass
class MetadataResult:
    """Normalized OMDb title."""
    title: str
    imdb_id: str
    year: Optional[int] = None
    genre: Optional[str] = None
    rating: Optional[float] = None
    plot: Optional[str] = None
    runtime: Optional[str] = None        # "142 min" | "3 Seasons"
    director: Optional[str] = None
    cast: list[str] = field(default_factory=list)
    poster: Optional[str] = None
    media_type: str = "movie"            # "movie" | "series" | "episode"


def extract_imdb_id(url: str) -> Optional[str]:
    """Pull the ``tt1234567`` id out of an IMDb URL (or a bare id)."""
    match = _IMDB_ID.search(url or "")
    return match.group(0) if match else None


def season_runtime(total_seasons: str | int) -> str:
    count = str(total_seasons)
    return f"{count} Season{'' if count == '1' else 's'}"


class OmdbClient:
    """The Open Movie Database API client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.omdbapi.com/",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def _get(self, params: dict) -> dict:
        """Make authenticated GET request to OMDb."""
        all_params = {**params, "apikey": self.api_key}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(self.base_url, params=all_params)
            resp.raise_for_status()
            return resp.json()

    # ── Lookups ──────────────────────────────────────────────────

    async def lookup_by_imdb_id(self, imdb_id: str, full_plot: bool = True) -> Optional[MetadataResult]:
        params = {"i": imdb_id}
        if full_plot:
            params["plot"] = "full"
        data = await self._get(params)
        return self._normalize(data)

    async def lookup_by_title_year(self, title: str, year: Optional[int] = None) -> Optional[MetadataResult]:
        params = {"t": title}
        if year:
            params["y"] = year
        data = await self._get(params)
        return self._normalize(data)

    # ── Normalization helpers ────────────────────────────────────

    @staticmethod
    def _value(data: dict, key: str) -> Optional[str]:
        value = data.get(key)
        if not value or value == "N/A":
            return None
        return value

    @staticmethod
    def _parse_year(raw: Optional[str]) -> Optional[int]:
        # Series years look like "2008–2013"
        match = re.match(r"\d{4}", raw or "")
        return int(match.group(0)) if match else None

    @staticmethod
    def _parse_float(raw: Optional[str]) -> Optional[float]:
        try:
            return float(raw) if raw else None
        except ValueError:
            return None

    def _normalize(self, data: dict) -> Optional[MetadataResult]:
        """Normalize an OMDb response into our standard schema."""
        if data.get("Response") == "False" or not data.get("imdbID"):
            return None

        media_type = data.get("Type", "movie")
        if media_type == "series":
            seasons = self._value(data, "totalSeasons")
            runtime = season_runtime(seasons) if seasons else None
        else:
            runtime = self._value(data, "Runtime")

        actors = self._value(data, "Actors")
        return MetadataResult(
            title=data.get("Title", ""),
            imdb_id=data["imdbID"],
            year=self._parse_year(data.get("Year")),
            genre=self._value(data, "Genre"),
            rating=self._parse_float(self._value(data, "imdbRating")),
            plot=self._value(data, "Plot"),
            runtime=runtime,
            director=self._value(data, "Director"),
            cast=actors.split(", ") if actors else [],
            poster=self._value(data, "Poster"),
            media_type=media_type,
        )
