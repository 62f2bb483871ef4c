"""Key-value storage table backing the persisted candidate pool and winners."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, validates

from .base import Base


class StorageEntry(Base):
    """One persisted value addressed by a string key.

    The table plays the part of browser local storage: the draw tool keeps
    its candidate pool under ``"users"`` and its winners history under
    ``"winners"``, each as a JSON document.
    """

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    """Storage key, e.g. ``"users"`` or ``"winners"``."""

    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    """JSON payload stored under ``key``."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    """Timestamp bumped on every write."""

    @validates("key")
    def _normalize_key(self, _key: str, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("storage key must not be empty")
        return normalized

    @classmethod
    def get_by_key(cls, session: Session, key: str) -> Optional["StorageEntry"]:
        """Return the entry stored under ``key`` if it exists."""
        return session.scalar(select(cls).where(cls.key == key))

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<StorageEntry(key={self.key!r}, updated_at={self.updated_at})>"
