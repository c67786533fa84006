"""SQLAlchemy ORM models — all database tables."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from movie_catalog.database import Base


# ── Key-value store ──────────────────────────────────────────────

class KeyValue(Base):
    """One namespaced key, e.g. ``movie:42`` or ``rating:42:anon_1``."""

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(500), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
