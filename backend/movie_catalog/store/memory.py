"""In-process key-value store, used when no database is configured and in tests."""

import copy
from typing import Any, Optional

from movie_catalog.store.base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Values are deep-copied so callers never share state with it."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        return [copy.deepcopy(v) for k, v in self._data.items() if k.startswith(prefix)]

    def keys(self) -> list[str]:
        return list(self._data)
