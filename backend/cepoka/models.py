# FILE: cepoka/models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Integer,
    String,
    DateTime,
    ForeignKey,
    LargeBinary,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------
# Models
# ---------------------------

class CacheStore(Base):
    """Named cache generation (e.g. ``cepoka-cache-v1``)."""

    __tablename__ = "cache_stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )

    entries: Mapped[List["CacheEntry"]] = relationship(
        "CacheEntry", back_populates="store", cascade="all,delete-orphan"
    )


class CacheEntry(Base):
    """Captured response keyed by absolute request URL."""

    __tablename__ = "cache_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cache_stores.id", ondelete="CASCADE"), index=True, nullable=False
    )
    url: Mapped[str] = mapped_column(String(2000), nullable=False)

    status: Mapped[int] = mapped_column(Integer, nullable=False, default=200)
    status_text: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    headers: Mapped[str] = mapped_column(Text, nullable=False, default="{}")  # JSON
    body: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    response_type: Mapped[str] = mapped_column(String(16), nullable=False, default="basic")

    stored_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    store: Mapped[CacheStore] = relationship("CacheStore", back_populates="entries")

    __table_args__ = (
        UniqueConstraint("store_id", "url", name="uq_cache_entries_store_url"),
    )
