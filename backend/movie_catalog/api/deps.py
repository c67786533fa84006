"""Shared FastAPI dependencies and the response envelope."""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from movie_catalog.clients.notifier import ResetLinkNotifier
from movie_catalog.clients.omdb import OmdbClient
from movie_catalog.clients.trailers import TrailerFinder
from movie_catalog.config import settings
from movie_catalog.errors import Unauthorized
from movie_catalog.services.users import UserRepository
from movie_catalog.store.base import KeyValueStore

logger = logging.getLogger(__name__)

# Status used when the client hung up before the response was ready.
CLIENT_CLOSED_REQUEST = 499

AUTH_REQUIRED = "Authentication required"

basic_auth = HTTPBasic(auto_error=False)


def get_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def get_omdb(request: Request) -> Optional[OmdbClient]:
    return request.app.state.omdb


def get_trailer_finder(request: Request) -> TrailerFinder:
    return request.app.state.trailers


def get_notifier(request: Request) -> Optional[ResetLinkNotifier]:
    return request.app.state.notifier


def get_users(store: KeyValueStore = Depends(get_store)) -> UserRepository:
    return UserRepository(
        store,
        bcrypt_rounds=settings.bcrypt_rounds,
        reset_ttl_minutes=settings.password_reset_ttl_minutes,
    )


async def optional_user(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    users: UserRepository = Depends(get_users),
) -> Optional[dict]:
    """The authenticated user, or None for anonymous calls. Bad credentials still fail."""
    if credentials is None:
        return None
    return await users.authenticate(credentials.username, credentials.password)


async def require_user(user: Optional[dict] = Depends(optional_user)) -> dict:
    """HTTP Basic credentials checked against the account store."""
    if user is None:
        raise Unauthorized(AUTH_REQUIRED)
    return user


async def respond(request: Request, payload: Optional[dict] = None, status_code: int = 200) -> Response:
    """``{"success": true, ...payload}``, or an empty 499 if the client is gone."""
    if await request.is_disconnected():
        logger.debug(f"Client disconnected from {request.method} {request.url.path}, response withheld")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return JSONResponse({"success": True, **(payload or {})}, status_code=status_code)
