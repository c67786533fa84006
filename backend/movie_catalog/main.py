"""Movie Catalog — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from movie_catalog.api import auth, catalog, comments, health, ratings
from movie_catalog.clients.notifier import ResetLinkNotifier
from movie_catalog.clients.omdb import OmdbClient
from movie_catalog.clients.trailers import TrailerFinder
from movie_catalog.config import settings
from movie_catalog.errors import CatalogError
from movie_catalog.logger import configure_logging
from movie_catalog.store import KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        messages = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
        return _error(400, "; ".join(messages) or "Invalid request")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, str(exc) or "Internal server error")


def create_app(
    store: Optional[KeyValueStore] = None,
    omdb: Optional[OmdbClient] = None,
    trailers: Optional[TrailerFinder] = None,
    notifier: Optional[ResetLinkNotifier] = None,
    probe_integrations: bool = True,
) -> FastAPI:
    """Build the application. Collaborators not passed in are built from settings."""
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        engine = None
        if app.state.store is None:
            from movie_catalog.database import create_engine, create_sessionmaker, init_db
            from movie_catalog.store.sql import SqlKeyValueStore

            engine = create_engine(settings.database_url, echo=settings.debug)
            await init_db(engine)
            app.state.store = SqlKeyValueStore(create_sessionmaker(engine))
            logger.info("Connected key-value store to database")

        if probe_integrations:
            from movie_catalog.services.integration_probe import probe_all

            app.state.integrations = await probe_all(settings)
            logger.info(f"Integrations: {app.state.integrations}")
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=health.VERSION,
        description="Personal movie collection and watch list",
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs" if settings.debug else None,
        redoc_url=f"{settings.api_prefix}/redoc" if settings.debug else None,
    )

    if store is None and not settings.has_database:
        logger.warning("DATABASE_URL is not set, using the in-memory store")
        store = MemoryKeyValueStore()
    app.state.store = store
    app.state.integrations = {}
    app.state.omdb = omdb or (
        OmdbClient(settings.omdb_api_key, settings.omdb_url, timeout=settings.http_timeout_seconds)
        if settings.has_omdb else None
    )
    app.state.trailers = trailers or TrailerFinder(
        settings.imdb_url,
        settings.youtube_url,
        user_agent=settings.scrape_user_agent,
        timeout=settings.http_timeout_seconds,
    )
    app.state.notifier = notifier or (
        ResetLinkNotifier(settings.password_reset_webhook_url, timeout=settings.http_timeout_seconds)
        if settings.has_reset_webhook else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list({*settings.cors_origins, settings.app_url}),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)

    # ── Mount routers ────────────────────────────────────────────────
    prefix = settings.api_prefix
    app.include_router(health.router,           prefix=prefix, tags=["system"])
    app.include_router(catalog.movies_router,   prefix=f"{prefix}/movies", tags=["movies"])
    app.include_router(catalog.towatch_router,  prefix=f"{prefix}/towatch", tags=["towatch"])
    app.include_router(comments.router,         prefix=prefix, tags=["comments"])
    app.include_router(ratings.router,          prefix=prefix, tags=["ratings"])
    app.include_router(auth.router,             prefix=prefix, tags=["auth"])
    return app


app = create_app()
