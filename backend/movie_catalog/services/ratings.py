"""Ratings — one 1–5 score per (movie, user identifier), aggregated on read.

The identifier is either a username or an ``anon_...`` id; the two are never
linked, so a user who logs in starts a fresh rating history.
"""

import logging
from collections import defaultdict

from movie_catalog.errors import InvalidInput
from movie_catalog.store.base import KeyValueStore, rating_key
from movie_catalog.utils import now_ms

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def summarize(ratings: list[dict]) -> dict:
    """Average rounded to one decimal, 0 with no ratings."""
    if not ratings:
        return {"average": 0, "count": 0}
    average = sum(r["rating"] for r in ratings) / len(ratings)
    return {"average": round(average, 1), "count": len(ratings)}


class RatingService:

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def submit(self, movie_id: int, rating: int, user_identifier: str) -> dict:
        """Store or overwrite this identifier's rating for the movie."""
        if not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidInput(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        record = {
            "movieId": movie_id,
            "rating": rating,
            "userIdentifier": user_identifier,
            "timestamp": now_ms(),
        }
        await self.store.set(rating_key(movie_id, user_identifier), record)
        return record

    async def for_movie(self, movie_id: int) -> dict:
        ratings = await self.store.get_by_prefix(f"rating:{movie_id}:")
        return {"ratings": ratings, **summarize(ratings)}

    async def averages(self) -> dict[str, dict]:
        """``{movieId: {average, count}}`` for every rated movie."""
        by_movie: dict[str, list[dict]] = defaultdict(list)
        for record in await self.store.get_by_prefix("rating:"):
            by_movie[str(record["movieId"])].append(record)
        return {movie_id: summarize(ratings) for movie_id, ratings in by_movie.items()}

    async def for_user(self, user_identifier: str) -> dict[str, int]:
        """``{movieId: rating}`` for one identifier."""
        return {
            str(r["movieId"]): r["rating"]
            for r in await self.store.get_by_prefix("rating:")
            if r.get("userIdentifier") == user_identifier
        }
