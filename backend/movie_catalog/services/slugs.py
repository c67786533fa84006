"""Title slugs used in movie detail URLs.

``encode`` is deterministic but not injective: ``"Movie: Part 2"`` and
``"Movie Part 2"`` share ``movie-part-2``. ``decode`` is only a fuzzy search
key, not an inverse.
"""

import re
from typing import Any, Iterable, Mapping, Optional

_STRIP = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def encode(title: str) -> str:
    """Lowercase, URL-safe slug for a title."""
    slug = _STRIP.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def decode(slug: str) -> str:
    return slug.replace("-", " ").lower()


def _title(entry: Mapping[str, Any]) -> Optional[str]:
    title = entry.get("title")
    return title if isinstance(title, str) and title else None


def resolve(entries: Iterable[Mapping[str, Any]], slug: str) -> Optional[Mapping[str, Any]]:
    """First entry whose title encodes to ``slug`` or equals its decoded form.

    Colliding titles are reachable only through the first one in iteration
    order. Returns None when nothing matches; entries without a title are skipped.
    """
    search_key = decode(slug)
    for entry in entries:
        title = _title(entry)
        if title is None:
            continue
        if encode(title) == slug or title.lower() == search_key:
            return entry
    return None


def slug_collision(
    entries: Iterable[Mapping[str, Any]],
    title: str,
    exclude_id: Any = None,
) -> Optional[Mapping[str, Any]]:
    """First entry other than ``exclude_id`` whose title has the same slug as ``title``."""
    slug = encode(title)
    for entry in entries:
        if exclude_id is not None and entry.get("id") == exclude_id:
            continue
        other = _title(entry)
        if other is not None and encode(other) == slug:
            return entry
    return None
