"""Key-value store implementations."""

from movie_catalog.store.base import KeyValueStore  # noqa: F401
from movie_catalog.store.memory import MemoryKeyValueStore  # noqa: F401
from movie_catalog.store.sql import SqlKeyValueStore  # noqa: F401
