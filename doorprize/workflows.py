from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .candidate import Candidate
from .importer import ImportResult, read_candidates_from_file
from .prize_draw.selection import selection_odds
from .session import DrawSession, Phase

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

CLEAR_CANDIDATES_PROMPT = "Are you sure you want to clear all candidates?"
CLEAR_WINNERS_PROMPT = "Are you sure you want to clear all winners?"


@dataclass
class DisplaySettings:
    """Operator-editable display options."""

    title: str
    show_score: bool = False


@dataclass(frozen=True)
class CandidateRow:
    """One line of the candidate list view."""

    name: str
    institution: str
    score: Optional[float]
    odds: Optional[float]


@dataclass(frozen=True)
class WinnerRow:
    position: int
    name: str


def set_title(settings: DisplaySettings, title: str) -> DisplaySettings:
    settings.title = title
    return settings


def toggle_score_visibility(settings: DisplaySettings) -> bool:
    settings.show_score = not settings.show_score
    return settings.show_score


def import_candidates(session: DrawSession, path: Union[str, Path]) -> ImportResult:
    """Replace the candidate pool with the rows of the CSV file at ``path``.

    A running draw is stopped first. Rows with problems are reported in the
    returned :class:`ImportResult`; the file is rejected as a whole only when
    its header is unusable (:class:`~doorprize.importer.CsvImportError`).
    """
    result = read_candidates_from_file(path)
    if session.phase is Phase.DRAWING:
        session.reset()
    session.roster.replace_candidates(result.candidates)
    logger.info(f"Imported {len(result.candidates)} candidate(s) from {path}")
    return result


def clear_all_candidates(session: DrawSession, confirm: Confirm) -> bool:
    """Drop every candidate after operator confirmation.

    Returns ``True`` when the pool was cleared.
    """
    if not confirm(CLEAR_CANDIDATES_PROMPT):
        return False
    session.clear_candidates()
    return True


def clear_all_winners(session: DrawSession, confirm: Confirm) -> bool:
    """Forget every winner after operator confirmation.

    Returns ``True`` when the history was cleared.
    """
    if not confirm(CLEAR_WINNERS_PROMPT):
        return False
    session.clear_winners()
    return True


def can_draw(session: DrawSession) -> bool:
    """Whether the Draw button should be enabled.

    ``False`` while a draw is running and once every candidate has won.
    """
    return session.phase is not Phase.DRAWING and bool(session.roster.eligible())


def candidate_rows(session: DrawSession, settings: DisplaySettings) -> list[CandidateRow]:
    """Rows for the candidate list; score and odds only when scores are shown."""
    candidates = session.roster.candidates
    odds = selection_odds(candidates) if settings.show_score else [None] * len(candidates)
    rows: list[CandidateRow] = []
    for candidate, chance in zip(candidates, odds):
        rows.append(
            CandidateRow(
                name=candidate.name,
                institution=candidate.institution or candidate.institution_type or "-",
                score=_display_score(candidate) if settings.show_score else None,
                odds=chance,
            )
        )
    return rows


def winner_rows(session: DrawSession) -> list[WinnerRow]:
    return [
        WinnerRow(position=index, name=winner.name)
        for index, winner in enumerate(session.roster.winners, start=1)
    ]


def _display_score(candidate: Candidate) -> Optional[float]:
    return candidate.total_score if candidate.has_valid_score else None


__all__ = [
    "CLEAR_CANDIDATES_PROMPT",
    "CLEAR_WINNERS_PROMPT",
    "CandidateRow",
    "DisplaySettings",
    "WinnerRow",
    "can_draw",
    "candidate_rows",
    "clear_all_candidates",
    "clear_all_winners",
    "import_candidates",
    "set_title",
    "toggle_score_visibility",
    "winner_rows",
]
