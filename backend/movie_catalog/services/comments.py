"""Comments — create and delete only, keyed ``comment:<movieId>:<commentId>``."""

import logging
import uuid
from typing import Optional

from movie_catalog.errors import Forbidden, NotFound
from movie_catalog.store.base import KeyValueStore, comment_key
from movie_catalog.utils import now_ms

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def list_all(self) -> list[dict]:
        return await self.store.get_by_prefix("comment:")

    async def for_movie(self, movie_id: int) -> list[dict]:
        return await self.store.get_by_prefix(f"comment:{movie_id}:")

    async def add(
        self,
        movie_id: int,
        username: str,
        text: str,
        comment_id: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> dict:
        comment = {
            "id": comment_id or uuid.uuid4().hex,
            "movieId": movie_id,
            "username": username,
            "text": text,
            "timestamp": timestamp or now_ms(),
        }
        await self.store.set(comment_key(movie_id, comment["id"]), comment)
        return comment

    async def delete(self, movie_id: int, comment_id: str, username: str) -> None:
        """Delete a comment; only its author may do so."""
        key = comment_key(movie_id, comment_id)
        comment = await self.store.get(key)
        if comment is None:
            raise NotFound("Comment not found")
        if str(comment.get("username", "")).lower() != username.lower():
            raise Forbidden("Only the author can delete this comment")
        await self.store.delete(key)
        logger.info(f"Deleted comment {comment_id} on movie {movie_id}")
