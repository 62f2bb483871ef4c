"""Persistence ports for the draw tool's key-value state."""

from .memory import MemoryStorage
from .port import StoragePort
from .sql import SqlStorage

__all__ = [
    "MemoryStorage",
    "SqlStorage",
    "StoragePort",
]
