from __future__ import annotations

from typing import Any, Optional, Protocol


class StoragePort(Protocol):
    """Key-value persistence used by :class:`doorprize.roster.Roster`.

    Values are JSON-compatible documents. ``load`` returns ``None`` for a key
    that was never saved or has been removed.
    """

    def load(self, key: str) -> Optional[Any]: ...

    def save(self, key: str, data: Any) -> None: ...

    def remove(self, key: str) -> None: ...
