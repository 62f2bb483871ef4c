"""SQLAlchemy-backed implementation of the storage port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from ..models import StorageEntry

logger = logging.getLogger(__name__)


class SqlStorage:
    """Persist values as rows of the ``storage_entries`` table.

    Every call runs in its own transaction, so each ``save`` is committed
    before it returns.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Create a storage adapter.

        Parameters
        ----------
        session_factory : sessionmaker[Session]
            Factory producing sessions bound to a database where the
            ``storage_entries`` table exists (see ``scripts/init_db.py``).
        """
        self._session_factory = session_factory

    def load(self, key: str) -> Optional[Any]:
        with self._session_factory() as session:
            entry = StorageEntry.get_by_key(session, key)
            if entry is None:
                return None
            return entry.value

    def save(self, key: str, data: Any) -> None:
        with self._session_factory.begin() as session:
            entry = StorageEntry.get_by_key(session, key)
            if entry is None:
                session.add(StorageEntry(key=key, value=data))
            else:
                entry.value = data
                entry.updated_at = datetime.now(timezone.utc)
        logger.debug(f"Saved storage key '{key}'")

    def remove(self, key: str) -> None:
        with self._session_factory.begin() as session:
            session.execute(delete(StorageEntry).where(StorageEntry.key == key))
        logger.debug(f"Removed storage key '{key}'")
