"""Catalog query pipeline — filter, sort and paginate an in-memory entry list.

Runs synchronously over the full entry set with no I/O. Entries are the plain
JSON objects returned by the API (camelCase keys). Malformed fields never
raise: a missing or garbage number counts as its minimum when filtering and
as 0 when sorting.
"""

import math
import random
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from unidecode import unidecode

PAGE_SIZE_NARROW = 12
PAGE_SIZE_WIDE = 24
SIMILAR_LIMIT = 5
RECENT_LIMIT = 12

Entry = Mapping[str, Any]


class SortKey(str, Enum):
    DATE_ADDED = "dateAdded"                # newest first (by id)
    DATE_ADDED_LATEST = "dateAddedLatest"   # oldest first (by id)
    TITLE = "title"
    YEAR = "year"
    IMDB_RATING = "imdbRating"
    USER_RATING = "userRating"
    COMMUNITY_RATING = "communityRating"


class RuntimeFilter(str, Enum):
    ALL = "all"
    SHORT = "short"             # (0, 90] min
    MEDIUM = "medium"           # (90, 150] min
    LONG = "long"               # > 150 min
    ONE_SEASON = "oneSeason"
    MULTI_SEASON = "multiSeason"


# ── Field accessors ──────────────────────────────────────────────

_FIRST_INT = re.compile(r"(\d+)")
_SEASONS = re.compile(r"(\d+)\s+season", re.IGNORECASE)
_ONE_SEASON = re.compile(r"(?<!\d)1\s+seasons?\b", re.IGNORECASE)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def effective_rating(entry: Entry) -> float:
    """``imdbRating`` when it is a positive number, else the legacy ``rating``, else 0."""
    imdb = _number(entry.get("imdbRating"))
    if imdb is not None and imdb > 0:
        return imdb
    return _number(entry.get("rating")) or 0.0


def _sort_number(entry: Entry, key: str) -> float:
    return _number(entry.get(key)) or 0.0


def genres_of(entry: Entry) -> list[str]:
    genre = entry.get("genre")
    if not isinstance(genre, str) or not genre:
        return []
    return [g.strip() for g in genre.split(",")]


def primary_genre(entry: Entry) -> Optional[str]:
    genres = genres_of(entry)
    return genres[0].lower() if genres and genres[0] else None


def tags_of(entry: Entry) -> list[str]:
    tags = entry.get("tags")
    if not isinstance(tags, (list, tuple)):
        return []
    return [t for t in tags if isinstance(t, str)]


def _runtime_text(entry: Entry) -> str:
    runtime = entry.get("runtime")
    return runtime if isinstance(runtime, str) else ""


def parse_runtime_minutes(runtime: Optional[str]) -> int:
    """First integer in the runtime text, 0 when there is none."""
    if not runtime:
        return 0
    match = _FIRST_INT.search(runtime)
    return int(match.group(1)) if match else 0


def is_season_runtime(runtime: Optional[str]) -> bool:
    return bool(runtime) and "season" in runtime.lower()


def matches_runtime(runtime: Optional[str], runtime_filter: RuntimeFilter) -> bool:
    if runtime_filter is RuntimeFilter.ALL:
        return True
    if is_season_runtime(runtime):
        if runtime_filter is RuntimeFilter.ONE_SEASON:
            return bool(_ONE_SEASON.search(runtime))
        if runtime_filter is RuntimeFilter.MULTI_SEASON:
            match = _SEASONS.search(runtime)
            return bool(match) and int(match.group(1)) > 1
        return False

    minutes = parse_runtime_minutes(runtime)
    if runtime_filter is RuntimeFilter.SHORT:
        return 0 < minutes <= 90
    if runtime_filter is RuntimeFilter.MEDIUM:
        return 90 < minutes <= 150
    if runtime_filter is RuntimeFilter.LONG:
        return minutes > 150
    return False


# ── Filter ───────────────────────────────────────────────────────

@dataclass
class CatalogFilters:
    """Active predicates. An entry passes only if every one of them matches."""
    genres: set[str] = field(default_factory=set)
    years: set[int] = field(default_factory=set)
    search: str = ""
    rating_range: tuple[float, float] = (0.0, 10.0)
    runtime: RuntimeFilter = RuntimeFilter.ALL
    tags: set[str] = field(default_factory=set)

    @property
    def is_active(self) -> bool:
        return bool(
            self.genres or self.years or self.search or self.tags
            or self.rating_range != (0.0, 10.0)
            or self.runtime is not RuntimeFilter.ALL
        )

    def matches(self, entry: Entry) -> bool:
        if self.genres and not self.genres.intersection(genres_of(entry)):
            return False

        if self.years:
            year = _number(entry.get("year"))
            if year is None or int(year) not in self.years:
                return False

        if self.search:
            query = self.search.lower()
            title = entry.get("title") if isinstance(entry.get("title"), str) else ""
            description = entry.get("description") if isinstance(entry.get("description"), str) else ""
            if query not in title.lower() and query not in description.lower():
                return False

        lo, hi = self.rating_range
        if not lo <= effective_rating(entry) <= hi:
            return False

        if not matches_runtime(_runtime_text(entry), RuntimeFilter(self.runtime)):
            return False

        if self.tags and not self.tags.intersection(tags_of(entry)):
            return False

        return True


def filter_entries(entries: Iterable[Entry], filters: CatalogFilters) -> list[Entry]:
    return [e for e in entries if filters.matches(e)]


# ── Sort ─────────────────────────────────────────────────────────

def _title_key(entry: Entry) -> str:
    title = entry.get("title")
    return unidecode(title).casefold() if isinstance(title, str) else ""


def sort_entries(entries: Iterable[Entry], sort_key: SortKey | str) -> list[Entry]:
    """Stable sort; ties keep their input order."""
    key = SortKey(sort_key)
    if key is SortKey.DATE_ADDED:
        return sorted(entries, key=lambda e: _sort_number(e, "id"), reverse=True)
    if key is SortKey.DATE_ADDED_LATEST:
        return sorted(entries, key=lambda e: _sort_number(e, "id"))
    if key is SortKey.TITLE:
        return sorted(entries, key=_title_key)
    if key is SortKey.YEAR:
        return sorted(entries, key=lambda e: _sort_number(e, "year"), reverse=True)
    if key is SortKey.IMDB_RATING:
        return sorted(entries, key=effective_rating, reverse=True)
    if key is SortKey.USER_RATING:
        return sorted(entries, key=lambda e: _sort_number(e, "userRating"), reverse=True)
    return sorted(entries, key=lambda e: _sort_number(e, "communityRating"), reverse=True)


# ── Paginate ─────────────────────────────────────────────────────

@dataclass
class CatalogPage:
    entries: list[Entry]
    page: int
    page_size: int
    total_count: int
    total_pages: int

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0


def paginate(entries: Sequence[Entry], page: int, page_size: int) -> CatalogPage:
    """Slice one 1-based page. An empty input has zero pages, not one empty page."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    start = (page - 1) * page_size
    return CatalogPage(
        entries=list(entries[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_count=len(entries),
        total_pages=math.ceil(len(entries) / page_size),
    )


def query_catalog(
    entries: Iterable[Entry],
    filters: Optional[CatalogFilters] = None,
    sort_key: SortKey | str = SortKey.DATE_ADDED,
    page: int = 1,
    page_size: int = PAGE_SIZE_WIDE,
) -> CatalogPage:
    """Filter, sort, then paginate in one pass."""
    filtered = filter_entries(entries, filters or CatalogFilters())
    return paginate(sort_entries(filtered, sort_key), page, page_size)


class CatalogView:
    """Browse state for one catalog list.

    Any filter change sends the user back to page 1; a sort change keeps the page.
    """

    def __init__(self, page_size: int = PAGE_SIZE_WIDE, sort_key: SortKey | str = SortKey.DATE_ADDED):
        self.filters = CatalogFilters()
        self.sort_key = SortKey(sort_key)
        self.page = 1
        self.page_size = page_size

    def _filters_changed(self) -> None:
        self.page = 1

    def toggle_genre(self, genre: str) -> None:
        self.filters.genres ^= {genre}
        self._filters_changed()

    def toggle_year(self, year: int) -> None:
        self.filters.years ^= {year}
        self._filters_changed()

    def toggle_tag(self, tag: str) -> None:
        self.filters.tags ^= {tag}
        self._filters_changed()

    def set_search(self, query: str) -> None:
        self.filters.search = query
        self._filters_changed()

    def set_rating_range(self, lo: float, hi: float) -> None:
        self.filters.rating_range = (lo, hi)
        self._filters_changed()

    def set_runtime_filter(self, runtime_filter: RuntimeFilter | str) -> None:
        self.filters.runtime = RuntimeFilter(runtime_filter)
        self._filters_changed()

    def clear_filters(self) -> None:
        self.filters = CatalogFilters()
        self._filters_changed()

    def set_sort(self, sort_key: SortKey | str) -> None:
        self.sort_key = SortKey(sort_key)

    def go_to_page(self, page: int) -> None:
        self.page = max(1, page)

    def render(self, entries: Iterable[Entry]) -> CatalogPage:
        return query_catalog(entries, self.filters, self.sort_key, self.page, self.page_size)


# ── Derived lists ────────────────────────────────────────────────

def similar_entries(
    entry: Entry,
    entries: Iterable[Entry],
    limit: int = SIMILAR_LIMIT,
    rng: Optional[random.Random] = None,
) -> list[Entry]:
    """Random pick of other entries sharing the reference entry's primary genre.

    Order (and which matches are picked when there are more than ``limit``)
    changes on every call unless a seeded ``rng`` is passed.
    """
    genre = primary_genre(entry)
    if genre is None:
        return []
    candidates = [
        e for e in entries
        if e.get("id") != entry.get("id")
        and any(g.lower() == genre for g in genres_of(e))
    ]
    rng = rng or random.Random()
    return rng.sample(candidates, k=min(limit, len(candidates)))


def recent_entries(entries: Iterable[Entry], limit: int = RECENT_LIMIT) -> list[Entry]:
    return sort_entries(entries, SortKey.DATE_ADDED)[:limit]


def available_years(entries: Iterable[Entry]) -> list[int]:
    years = {int(y) for y in (_number(e.get("year")) for e in entries) if y is not None}
    return sorted(years, reverse=True)


def all_tags(entries: Iterable[Entry]) -> list[str]:
    return list(dict.fromkeys(t for e in entries for t in tags_of(e)))


def attach_ratings(
    entries: Iterable[Entry],
    averages: Mapping[str, Mapping[str, Any]],
    user_ratings: Mapping[str, int],
) -> list[dict]:
    """Copy entries with community/user ratings recomputed from the rating set."""
    enriched = []
    for entry in entries:
        item = dict(entry)
        movie_key = str(entry.get("id"))
        stats = averages.get(movie_key)
        if stats and stats.get("count"):
            item["communityRating"] = stats["average"]
            item["ratingCount"] = stats["count"]
        else:
            item.pop("communityRating", None)
            item.pop("ratingCount", None)
        if user_ratings.get(movie_key):
            item["userRating"] = user_ratings[movie_key]
        enriched.append(item)
    return enriched
