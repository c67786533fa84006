"""Abstract interfaces for the two tiers behind the client-side repository.

``RemotePort`` is the catalog API; ``LocalPort`` is whatever the client keeps
on disk when the API cannot be reached. ``CatalogApiClient`` and ``LocalCache``
are the shipped implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


# ── Abstract Interfaces ──────────────────────────────────────────

class RemotePort(ABC):
    """Interface for the remote catalog API. Failures raise ``httpx.HTTPError``."""

    @abstractmethod
    async def list_entries(self, namespace: str) -> list[dict]:
        """All entries of ``movies`` or ``towatch``."""
        ...

    @abstractmethod
    async def save_entry(self, namespace: str, entry: dict) -> dict:
        """Create or overwrite an entry by id."""
        ...

    @abstractmethod
    async def delete_entry(self, namespace: str, entry_id: int) -> None:
        ...

    @abstractmethod
    async def mark_watched(self, entry_id: int) -> dict:
        """Move a to-watch entry into the collection. Returns the new entry."""
        ...

    @abstractmethod
    async def list_comments(self, movie_id: int) -> list[dict]:
        ...

    @abstractmethod
    async def add_comment(self, movie_id: int, username: str, text: str) -> dict:
        ...

    @abstractmethod
    async def submit_rating(self, movie_id: int, rating: int, user_identifier: str) -> dict:
        ...

    @abstractmethod
    async def rating_averages(self) -> dict[str, dict]:
        """``{movieId: {"average", "count"}}``."""
        ...

    @abstractmethod
    async def user_ratings(self, user_identifier: str) -> dict[str, int]:
        """``{movieId: rating}`` for one identifier."""
        ...


class LocalPort(ABC):
    """Interface for the local fallback tier: named JSON documents."""

    @abstractmethod
    def load(self, name: str) -> Optional[Any]:
        """The document stored under ``name``, or None."""
        ...

    @abstractmethod
    def save(self, name: str, value: Any) -> None:
        """Replace the document stored under ``name``."""
        ...
