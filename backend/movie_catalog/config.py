"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """All configuration loaded from environment / .env file."""

    # ── Application ──────────────────────────────────────────────
    app_name: str = "Movie Catalog"
    app_url: str = "http://localhost:5173"
    debug: bool = False
    log_level: str = "info"
    api_prefix: str = "/api/v1"

    # ── Database ─────────────────────────────────────────────────
    # Empty means the in-process store (dev / tests).
    database_url: str = ""

    # ── OMDb ─────────────────────────────────────────────────────
    omdb_api_key: Optional[str] = None
    omdb_url: str = "https://www.omdbapi.com/"

    # ── Trailers ─────────────────────────────────────────────────
    imdb_url: str = "https://www.imdb.com"
    youtube_url: str = "https://www.youtube.com"
    scrape_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # ── Enrichment batches ───────────────────────────────────────
    enrichment_delay_seconds: float = 0.2
    enrichment_batch_limit: int = 10
    http_timeout_seconds: float = 15.0

    # ── Accounts ─────────────────────────────────────────────────
    bcrypt_rounds: int = 12
    password_reset_ttl_minutes: int = 60
    password_reset_webhook_url: Optional[str] = None

    # ── Server ───────────────────────────────────────────────────
    cors_origins: list[str] = ["http://localhost:5173"]
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    @property
    def has_database(self) -> bool:
        return bool(self.database_url)

    @property
    def has_omdb(self) -> bool:
        return bool(self.omdb_api_key)

    @property
    def has_reset_webhook(self) -> bool:
        return bool(self.password_reset_webhook_url)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
