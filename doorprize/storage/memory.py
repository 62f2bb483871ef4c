from __future__ import annotations

import copy
from typing import Any, Optional


class MemoryStorage:
    """Process-local storage, handy for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> Optional[Any]:
        # Hand out copies so callers cannot mutate stored state in place.
        return copy.deepcopy(self._data.get(key))

    def save(self, key: str, data: Any) -> None:
        self._data[key] = copy.deepcopy(data)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
