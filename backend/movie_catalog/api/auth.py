"""Account endpoints — signup, login, profile and password reset."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from movie_catalog.api.deps import get_notifier, get_users, require_user, respond
from movie_catalog.clients.notifier import ResetLinkNotifier
from movie_catalog.config import settings
from movie_catalog.errors import Forbidden, NotConfigured
from movie_catalog.models.schemas import (
    ForgotPasswordRequest, LoginRequest, ProfileUpdate, ResetPasswordRequest, SignupRequest,
)
from movie_catalog.services.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/signup")
async def signup(request: Request, body: SignupRequest, users: UserRepository = Depends(get_users)):
    user = await users.create(body.username, body.email, body.password)
    return await respond(request, {"user": user})


@router.post("/login")
async def login(request: Request, body: LoginRequest, users: UserRepository = Depends(get_users)):
    user = await users.authenticate(body.username, body.password)
    return await respond(request, {"user": user})


@router.patch("/profile")
async def update_profile(
    request: Request,
    body: ProfileUpdate,
    current: dict = Depends(require_user),
    users: UserRepository = Depends(get_users),
):
    """Update the caller's own email, password or picture.

    Sending ``profilePicture: null`` clears the picture; omitting it leaves it alone.
    """
    if body.user_id != current["id"]:
        raise Forbidden("You can only update your own profile")
    user = await users.update_profile(
        body.user_id,
        email=body.email,
        password=body.password,
        profile_picture=body.profile_picture,
        set_profile_picture="profile_picture" in body.model_fields_set,
    )
    return await respond(request, {"user": user})


@router.post("/forgot-password")
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    users: UserRepository = Depends(get_users),
    notifier: Optional[ResetLinkNotifier] = Depends(get_notifier),
):
    if notifier is None:
        raise NotConfigured("Password reset delivery is not configured")
    user, token = await users.issue_reset_token(body.email)
    base_url = (request.headers.get("origin") or settings.app_url).rstrip("/")
    await notifier.send(user["email"], user["username"], f"{base_url}/reset-password?token={token}")
    logger.info(f"Sent password reset link for {user['id']}")
    return await respond(request, {"message": "Password reset link sent to your email"})


@router.post("/reset-password")
async def reset_password(request: Request, body: ResetPasswordRequest, users: UserRepository = Depends(get_users)):
    await users.reset_password(body.token, body.new_password)
    return await respond(request, {"message": "Password has been reset successfully"})
