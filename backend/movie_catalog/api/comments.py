"""Comment endpoints."""

from fastapi import APIRouter, Depends, Request

from movie_catalog.api.deps import get_store, require_user, respond
from movie_catalog.models.schemas import CommentIn
from movie_catalog.services.comments import CommentService
from movie_catalog.store.base import KeyValueStore

router = APIRouter()


def get_comments(store: KeyValueStore = Depends(get_store)) -> CommentService:
    return CommentService(store)


@router.get("/comments")
async def list_comments(request: Request, comments: CommentService = Depends(get_comments)):
    return await respond(request, {"comments": await comments.list_all()})


@router.get("/comments/{movie_id}")
async def list_movie_comments(request: Request, movie_id: int, comments: CommentService = Depends(get_comments)):
    return await respond(request, {"comments": await comments.for_movie(movie_id)})


@router.post("/comments")
async def add_comment(request: Request, body: CommentIn, comments: CommentService = Depends(get_comments)):
    comment = await comments.add(
        body.movie_id, body.username, body.text, comment_id=body.id, timestamp=body.timestamp,
    )
    return await respond(request, {"comment": comment})


@router.delete("/comments/{movie_id}/{comment_id}")
async def delete_comment(
    request: Request,
    movie_id: int,
    comment_id: str,
    user: dict = Depends(require_user),
    comments: CommentService = Depends(get_comments),
):
    """Only the comment's author may delete it."""
    await comments.delete(movie_id, comment_id, user["username"])
    return await respond(request)
