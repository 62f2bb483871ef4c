"""Candidate pool and winners history bound to a storage port."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from .candidate import Candidate, assign_identities
from .storage.port import StoragePort

logger = logging.getLogger(__name__)

CANDIDATES_KEY = "users"
WINNERS_KEY = "winners"


def _decode(payload: Optional[Any], key: str) -> list[Candidate]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Stored value for '{key}' must be a list, got {type(payload).__name__}")
    return assign_identities(Candidate.from_json(item) for item in payload)


class Roster:
    """Holds the imported candidates and the winners drawn from them.

    Both lists are loaded from ``storage`` on construction and written back
    after every mutation.
    """

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage
        self._candidates = _decode(storage.load(CANDIDATES_KEY), CANDIDATES_KEY)
        self._winners = _decode(storage.load(WINNERS_KEY), WINNERS_KEY)
        logger.debug(
            f"Loaded {len(self._candidates)} candidate(s) and {len(self._winners)} winner(s)"
        )

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def winners(self) -> list[Candidate]:
        return list(self._winners)

    def has_candidates(self) -> bool:
        return bool(self._candidates)

    def has_won(self, candidate: Candidate) -> bool:
        return any(winner.id == candidate.id for winner in self._winners)

    def eligible(self) -> list[Candidate]:
        """Return the candidates that have not won yet, in import order."""
        won = {winner.id for winner in self._winners}
        return [candidate for candidate in self._candidates if candidate.id not in won]

    def replace_candidates(self, candidates: Iterable[Candidate]) -> None:
        """Replace the whole pool; winners are kept."""
        self._candidates = assign_identities(candidates)
        if self._candidates:
            self._storage.save(
                CANDIDATES_KEY, [candidate.to_json() for candidate in self._candidates]
            )
        else:
            self._storage.remove(CANDIDATES_KEY)
        logger.info(f"Candidate pool replaced with {len(self._candidates)} candidate(s)")

    def clear_candidates(self) -> None:
        self._candidates = []
        self._storage.remove(CANDIDATES_KEY)
        logger.info("Candidate pool cleared")

    def record_winner(self, winner: Candidate) -> None:
        if not winner.id:
            raise ValueError("Winner must carry an identity key")
        if self.has_won(winner):
            raise ValueError(f"Candidate {winner.name!r} has already won")
        updated = self._winners + [winner]
        # Persist first so a failed write leaves the history unchanged.
        self._storage.save(WINNERS_KEY, [item.to_json() for item in updated])
        self._winners = updated
        logger.info(f"Recorded winner #{len(self._winners)}: {winner.name}")

    def clear_winners(self) -> None:
        self._winners = []
        self._storage.remove(WINNERS_KEY)
        logger.info("Winners history cleared")


__all__ = ["CANDIDATES_KEY", "Roster", "WINNERS_KEY"]
