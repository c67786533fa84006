"""SQLAlchemy-backed key-value store (PostgreSQL via asyncpg in production)."""

import logging
from typing import Any, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.ext.asyncio import async_sessionmaker

from movie_catalog.models.tables import KeyValue
from movie_catalog.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class SqlKeyValueStore(KeyValueStore):
    """One short session per operation, committed immediately."""

    def __init__(self, sessionmaker: async_sessionmaker):
        self.sessionmaker = sessionmaker

    async def get(self, key: str) -> Optional[Any]:
        async with self.sessionmaker() as session:
            result = await session.execute(select(KeyValue.value).where(KeyValue.key == key))
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        async with self.sessionmaker() as session:
            await session.merge(KeyValue(key=key, value=value))
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self.sessionmaker() as session:
            await session.execute(delete(KeyValue).where(KeyValue.key == key))
            await session.commit()

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(KeyValue.value).where(KeyValue.key.startswith(prefix, autoescape=True))
            )
            return list(result.scalars().all())

    async def ping(self) -> bool:
        try:
            async with self.sessionmaker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Store ping failed: {e}")
            return False
