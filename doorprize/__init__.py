"""Weighted doorprize drawing with a countdown and a persisted winners list."""

from .candidate import Candidate
from .roster import Roster
from .session import DrawSession, Phase

__all__ = ["Candidate", "DrawSession", "Phase", "Roster"]
