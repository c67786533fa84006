"""User accounts over the key-value store.

Layout: the record lives at ``user:id:<id>``; ``user:username:<lower>`` and
``user:email:<lower>`` are unique indexes holding only the id. All writes to
those three keys go through ``UserRepository``.

The store has no transactions, so a multi-key write that fails halfway can
leave an index pointing at a record that does not exist (or a record without
its index). Records are written before their indexes, and lookups through an
index treat a dangling id as "no such user".
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt

from movie_catalog.errors import Conflict, InvalidInput, NotFound, Unauthorized
from movie_catalog.store.base import (
    KeyValueStore, email_index_key, reset_token_key, user_id_key, username_index_key,
)
from movie_catalog.utils import now_ms

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72
INVALID_CREDENTIALS = "Invalid username or password"


def public_view(user: dict) -> dict:
    """The user record without its password hash."""
    return {k: v for k, v in user.items() if k != "passwordHash"}


class UserRepository:

    def __init__(self, store: KeyValueStore, bcrypt_rounds: int = 12, reset_ttl_minutes: int = 60):
        self.store = store
        self.bcrypt_rounds = bcrypt_rounds
        self.reset_ttl = timedelta(minutes=reset_ttl_minutes)

    # ── Password hashing ─────────────────────────────────────────

    def _hash(self, password: str) -> str:
        raw = password.encode("utf-8")
        if len(raw) > BCRYPT_MAX_BYTES:
            raise InvalidInput(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(raw, bcrypt.gensalt(self.bcrypt_rounds)).decode("ascii")

    @staticmethod
    def _verify(password: str, password_hash: str) -> bool:
        raw = password.encode("utf-8")
        if len(raw) > BCRYPT_MAX_BYTES:
            return False
        return bcrypt.checkpw(raw, password_hash.encode("ascii"))

    # ── Lookups ──────────────────────────────────────────────────

    async def get(self, user_id: str) -> Optional[dict]:
        return await self.store.get(user_id_key(user_id))

    async def _via_index(self, index_key: str) -> Optional[dict]:
        user_id = await self.store.get(index_key)
        if user_id is None:
            return None
        user = await self.get(user_id)
        if user is None:
            logger.warning(f"Index {index_key} points at missing user {user_id}")
        return user

    async def get_by_username(self, username: str) -> Optional[dict]:
        return await self._via_index(username_index_key(username))

    async def get_by_email(self, email: str) -> Optional[dict]:
        return await self._via_index(email_index_key(email))

    # ── Mutations ────────────────────────────────────────────────

    async def create(self, username: str, email: str, password: str) -> dict:
        if await self.get_by_username(username) is not None:
            raise Conflict("Username already exists")
        if await self.get_by_email(email) is not None:
            raise Conflict("Email already registered")

        user = {
            "id": f"user_{now_ms()}_{secrets.token_hex(6)}",
            "username": username,
            "email": email.lower(),
            "passwordHash": self._hash(password),
            "createdAt": now_ms(),
        }
        await self._save(user)
        logger.info(f"Created account '{username}' ({user['id']})")
        return public_view(user)

    async def authenticate(self, username: str, password: str) -> dict:
        user = await self.get_by_username(username)
        if user is None or not self._verify(password, user.get("passwordHash", "")):
            raise Unauthorized(INVALID_CREDENTIALS)
        return public_view(user)

    async def update_profile(
        self,
        user_id: str,
        email: Optional[str] = None,
        password: Optional[str] = None,
        profile_picture: Optional[str] = None,
        set_profile_picture: bool = False,
    ) -> dict:
        """Change email, password and/or picture.

        ``set_profile_picture`` distinguishes "clear the picture" (None) from "leave it".
        """
        user = await self.get(user_id)
        if user is None:
            raise NotFound("User not found")
        previous_email = user["email"]
        updated = dict(user)

        if email and email.lower() != previous_email:
            owner = await self.get_by_email(email)
            if owner is not None and owner["id"] != user_id:
                raise Conflict("Email already in use")
            updated["email"] = email.lower()

        if password and password.strip():
            updated["passwordHash"] = self._hash(password)

        if set_profile_picture:
            updated["profilePicture"] = profile_picture

        await self._save(updated, previous_email=previous_email)
        return public_view(updated)

    async def _save(self, user: dict, previous_email: Optional[str] = None) -> None:
        """Write the record, then its indexes, then drop a stale email index."""
        await self.store.set(user_id_key(user["id"]), user)
        await self.store.set(username_index_key(user["username"]), user["id"])
        await self.store.set(email_index_key(user["email"]), user["id"])
        if previous_email and previous_email.lower() != user["email"]:
            await self.store.delete(email_index_key(previous_email))

    # ── Password reset ───────────────────────────────────────────

    async def issue_reset_token(self, email: str) -> tuple[dict, str]:
        user = await self.get_by_email(email)
        if user is None:
            raise NotFound("No account found with this email address")
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + self.reset_ttl
        await self.store.set(reset_token_key(token), {
            "userId": user["id"],
            "expiresAt": expires_at.isoformat(),
        })
        return public_view(user), token

    async def reset_password(self, token: str, new_password: str) -> dict:
        record = await self.store.get(reset_token_key(token))
        if record is None or datetime.fromisoformat(record["expiresAt"]) < datetime.now(timezone.utc):
            raise InvalidInput("Reset link is invalid or has expired")

        user = await self.get(record["userId"])
        if user is None:
            raise NotFound("User not found")

        user["passwordHash"] = self._hash(new_password)
        await self._save(user)
        await self.store.delete(reset_token_key(token))
        logger.info(f"Password reset for {user['id']}")
        return public_view(user)
