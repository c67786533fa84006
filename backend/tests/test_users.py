from datetime import datetime, timedelta, timezone

import pytest

from movie_catalog.errors import Conflict, InvalidInput, NotFound, Unauthorized
from movie_catalog.services.users import UserRepository
from movie_catalog.store.base import email_index_key, reset_token_key, user_id_key, username_index_key


@pytest.fixture
def users(store):
    return UserRepository(store, bcrypt_rounds=4)


async def test_create_writes_record_and_indexes(store, users):
    user = await users.create("Alice", "Alice@Example.com", "secret")
    assert "passwordHash" not in user
    assert user["email"] == "alice@example.com"
    assert await store.get(username_index_key("alice")) == user["id"]
    assert await store.get(email_index_key("ALICE@example.com")) == user["id"]
    record = await store.get(user_id_key(user["id"]))
    assert record["passwordHash"] != "secret"


async def test_duplicate_username_and_email(users):
    await users.create("alice", "alice@example.com", "secret")
    with pytest.raises(Conflict, match="Username"):
        await users.create("ALICE", "other@example.com", "secret")
    with pytest.raises(Conflict, match="Email"):
        await users.create("bob", "Alice@example.com", "secret")


async def test_authenticate(users):
    await users.create("alice", "alice@example.com", "secret")
    assert (await users.authenticate("Alice", "secret"))["username"] == "alice"
    with pytest.raises(Unauthorized):
        await users.authenticate("alice", "wrong")
    with pytest.raises(Unauthorized):
        await users.authenticate("nobody", "secret")


async def test_password_longer_than_bcrypt_limit(users):
    with pytest.raises(InvalidInput):
        await users.create("alice", "alice@example.com", "x" * 73)


async def test_dangling_index_reads_as_missing_user(store, users):
    await store.set(username_index_key("ghost"), "user_gone")
    assert await users.get_by_username("ghost") is None


async def test_update_email_moves_index(store, users):
    user = await users.create("alice", "alice@example.com", "secret")
    updated = await users.update_profile(user["id"], email="new@example.com")
    assert updated["email"] == "new@example.com"
    assert await store.get(email_index_key("alice@example.com")) is None
    assert await store.get(email_index_key("new@example.com")) == user["id"]


async def test_update_email_taken_by_other_user(users):
    alice = await users.create("alice", "alice@example.com", "secret")
    await users.create("bob", "bob@example.com", "secret")
    with pytest.raises(Conflict):
        await users.update_profile(alice["id"], email="BOB@example.com")


async def test_update_password_and_picture(users):
    user = await users.create("alice", "alice@example.com", "secret")
    await users.update_profile(user["id"], password="changed", profile_picture="pic.png", set_profile_picture=True)
    assert (await users.authenticate("alice", "changed"))["profilePicture"] == "pic.png"

    cleared = await users.update_profile(user["id"], profile_picture=None, set_profile_picture=True)
    assert cleared["profilePicture"] is None
    untouched = await users.update_profile(user["id"], email="alice@example.com")
    assert untouched["profilePicture"] is None


async def test_update_missing_user(users):
    with pytest.raises(NotFound):
        await users.update_profile("user_missing", email="x@example.com")


async def test_reset_token_round_trip(store, users):
    await users.create("alice", "alice@example.com", "secret")
    _, token = await users.issue_reset_token("ALICE@example.com")
    await users.reset_password(token, "brand-new")
    assert (await users.authenticate("alice", "brand-new"))["username"] == "alice"
    assert await store.get(reset_token_key(token)) is None
    with pytest.raises(InvalidInput):
        await users.reset_password(token, "again")


async def test_expired_reset_token(store, users):
    user = await users.create("alice", "alice@example.com", "secret")
    expired = (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()
    await store.set(reset_token_key("stale"), {"userId": user["id"], "expiresAt": expired})
    with pytest.raises(InvalidInput):
        await users.reset_password("stale", "brand-new")


async def test_reset_for_unknown_email(users):
    with pytest.raises(NotFound):
        await users.issue_reset_token("nobody@example.com")
