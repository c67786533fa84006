"""Abstract key-value store interface.

Every entity lives under a namespaced key (``movie:<id>``, ``rating:<movieId>:<user>``)
and is only reachable by exact key or by prefix scan of its namespace.
There are no transactions: each call commits on its own and the last write wins.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """Interface for the JSON key-value store backing the API."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Value stored under ``key``, or None."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Insert or overwrite ``key``."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""
        ...

    @abstractmethod
    async def get_by_prefix(self, prefix: str) -> list[Any]:
        """All values whose key starts with ``prefix``. Order is unspecified."""
        ...

    async def ping(self) -> bool:
        """Whether the backing storage is reachable."""
        return True


# ── Key builders ─────────────────────────────────────────────────

MOVIE_NAMESPACE = "movie"
TOWATCH_NAMESPACE = "towatch"


def entry_key(namespace: str, entry_id: int | str) -> str:
    return f"{namespace}:{entry_id}"


def comment_key(movie_id: int | str, comment_id: str) -> str:
    return f"comment:{movie_id}:{comment_id}"


def rating_key(movie_id: int | str, user_identifier: str) -> str:
    return f"rating:{movie_id}:{user_identifier}"


def user_id_key(user_id: str) -> str:
    return f"user:id:{user_id}"


def username_index_key(username: str) -> str:
    return f"user:username:{username.lower()}"


def email_index_key(email: str) -> str:
    return f"user:email:{email.lower()}"


def reset_token_key(token: str) -> str:
    return f"passwordreset:{token}"
