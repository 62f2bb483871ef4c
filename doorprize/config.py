"""Settings read from the environment (and a ``.env`` file when present)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .db.engine import DEFAULT_SQLITE_URL, ROOT_DIR, resolve_sqlite_url
from .session import DEFAULT_COUNTDOWN_SECONDS

DEFAULT_TITLE = "Undian Pemenang Doorprize INAHEF 2024"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable '{name}' must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"Environment variable '{name}' must be non-negative")
    return value


@dataclass(frozen=True)
class Settings:
    database_url: str
    title: str = DEFAULT_TITLE
    show_score: bool = False
    countdown_seconds: int = DEFAULT_COUNTDOWN_SECONDS


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build :class:`Settings` from ``DB_URL``, ``DRAW_TITLE``,
    ``DRAW_SHOW_SCORE`` and ``DRAW_COUNTDOWN_SECONDS``."""
    if dotenv:
        load_dotenv()
    env_url = os.getenv("DB_URL")
    database_url = resolve_sqlite_url(env_url, ROOT_DIR) if env_url else DEFAULT_SQLITE_URL
    return Settings(
        database_url=database_url,
        title=os.getenv("DRAW_TITLE") or DEFAULT_TITLE,
        show_score=_parse_bool("DRAW_SHOW_SCORE", os.getenv("DRAW_SHOW_SCORE"), False),
        countdown_seconds=_parse_int(
            "DRAW_COUNTDOWN_SECONDS",
            os.getenv("DRAW_COUNTDOWN_SECONDS"),
            DEFAULT_COUNTDOWN_SECONDS,
        ),
    )


__all__ = ["DEFAULT_TITLE", "Settings", "load_settings"]
