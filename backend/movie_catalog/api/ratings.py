"""Rating endpoints — submission and on-read aggregation."""

from fastapi import APIRouter, Depends, Request

from movie_catalog.api.deps import get_store, respond
from movie_catalog.models.schemas import RatingIn
from movie_catalog.services.ratings import RatingService
from movie_catalog.store.base import KeyValueStore

router = APIRouter()


def get_ratings(store: KeyValueStore = Depends(get_store)) -> RatingService:
    return RatingService(store)


@router.post("/ratings")
async def submit_rating(request: Request, body: RatingIn, ratings: RatingService = Depends(get_ratings)):
    """Store a 1–5 rating; a second submission from the same identifier replaces the first."""
    record = await ratings.submit(body.movie_id, body.rating, body.user_identifier)
    return await respond(request, {"rating": record})


@router.get("/ratings")
async def all_averages(request: Request, ratings: RatingService = Depends(get_ratings)):
    """Average and count per movie id."""
    return await respond(request, {"averages": await ratings.averages()})


@router.get("/ratings/{movie_id}")
async def movie_ratings(request: Request, movie_id: int, ratings: RatingService = Depends(get_ratings)):
    return await respond(request, await ratings.for_movie(movie_id))


@router.get("/user-ratings/{user_identifier}")
async def user_ratings(request: Request, user_identifier: str, ratings: RatingService = Depends(get_ratings)):
    return await respond(request, {"userRatings": await ratings.for_user(user_identifier)})
