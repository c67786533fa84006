"""Health and system status endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from movie_catalog.api.deps import get_store, respond
from movie_catalog.store.base import KeyValueStore

router = APIRouter()

VERSION = "0.1.0"


@router.get("/health")
async def health_check(request: Request, store: KeyValueStore = Depends(get_store)):
    """Liveness probe — reports store and integration status."""
    integrations = getattr(request.app.state, "integrations", {})
    return await respond(request, {
        "status": "ok",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": "ok" if await store.ping() else "error",
        "integrations": integrations,
    })
