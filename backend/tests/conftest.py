import os

# Settings are read at import time; keep tests offline and fast.
os.environ["DATABASE_URL"] = ""
os.environ["OMDB_API_KEY"] = ""
os.environ["PASSWORD_RESET_WEBHOOK_URL"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENRICHMENT_DELAY_SECONDS"] = "0"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from movie_catalog.clients.trailers import TrailerFinder  # noqa: E402
from movie_catalog.main import create_app  # noqa: E402
from movie_catalog.store import MemoryKeyValueStore  # noqa: E402


def imdb_not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404)


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def trailer_finder():
    return TrailerFinder(transport=httpx.MockTransport(imdb_not_found))


@pytest.fixture
def app(store, trailer_finder):
    return create_app(store=store, trailers=trailer_finder, probe_integrations=False)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def account(client):
    """A signed-up user; ``auth`` is ready to pass as HTTP Basic credentials."""
    resp = client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "email": "Alice@example.com", "password": "hunter22"},
    )
    assert resp.status_code == 200
    return {"user": resp.json()["user"], "auth": ("alice", "hunter22")}
