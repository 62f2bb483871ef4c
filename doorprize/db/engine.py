"""Engine and session factories for the storage database."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)

# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[2]


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


load_dotenv()
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./dev.db"), ROOT_DIR
)


def make_engine(
    database_url: Optional[str] = None,
    echo: bool = False,
    *,
    create_schema: bool = False,
) -> Engine:
    """Create an engine for ``database_url`` (``DB_URL`` by default).

    With ``create_schema`` the storage tables are created directly from the
    model metadata, which is enough for a local SQLite file. Shared
    databases should be migrated with ``scripts/init_db.py`` instead.
    """
    url = database_url or DEFAULT_SQLITE_URL
    engine = create_engine(url, echo=echo, future=True)
    if create_schema:
        from ..models import Base

        Base.metadata.create_all(engine)
        logger.debug("Storage schema ensured")
    return engine


def get_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Stored payloads stay readable after commit
        future=True,
    )
