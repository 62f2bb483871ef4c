from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .storage import StorageEntry  # noqa: F401

__all__ = [
    "Base",
    "StorageEntry",
]
