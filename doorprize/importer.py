"""CSV ingestion of participant lists."""

from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from .candidate import Candidate, assign_identities

logger = logging.getLogger(__name__)

NAME_COLUMN = "Name"
EMAIL_COLUMN = "Email"
PHONE_COLUMN = "Phone"
INSTITUTION_COLUMN = "Institution"
INSTITUTION_TYPE_COLUMN = "Institution Type"
SCORE_COLUMN = "Total Score"

REQUIRED_COLUMNS = (NAME_COLUMN, SCORE_COLUMN)


class CsvImportError(ValueError):
    """Raised when a CSV file cannot be used as a participant list at all."""


@dataclass(frozen=True)
class RowError:
    """Problem found on a single CSV row.

    Attributes
    ----------
    line_number : int
        1-based line number in the file, counting the header as line 1.
    message : str
        Human-readable description of the problem.
    skipped : bool
        ``True`` when the row was dropped, ``False`` when it was imported
        with a degraded value (e.g. an unparseable score).
    """

    line_number: int
    message: str
    skipped: bool


@dataclass
class ImportResult:
    """Candidates parsed from a CSV file plus the per-row problems."""

    candidates: list[Candidate] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def skipped_rows(self) -> list[RowError]:
        return [error for error in self.errors if error.skipped]

    @property
    def ok(self) -> bool:
        return not self.errors


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return value.strip()


def parse_score(raw: Optional[str]) -> float:
    """Coerce a score cell into a number.

    Empty cells count as ``0``. Anything else that is not a finite number
    yields ``nan``, which weighs zero in every weighting scheme.
    """
    text = _clean(raw)
    if not text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        return math.nan
    if math.isinf(value):
        return math.nan
    return value


def parse_row(
    row: Mapping[str, Optional[str]], line_number: int
) -> tuple[Optional[Candidate], Optional[RowError]]:
    """Map one CSV record to a :class:`Candidate` or a :class:`RowError`.

    A row may produce both: an imported candidate whose score could not be
    parsed is returned together with a non-skipping error.
    """
    name = _clean(row.get(NAME_COLUMN))
    if not name:
        return None, RowError(line_number, "missing name", skipped=True)

    raw_score = row.get(SCORE_COLUMN)
    score = parse_score(raw_score)
    error = None
    if math.isnan(score):
        error = RowError(
            line_number,
            f"unparseable score {_clean(raw_score)!r} for {name!r}; it will never be drawn",
            skipped=False,
        )
    elif score < 0:
        error = RowError(
            line_number,
            f"negative score {score:g} for {name!r}; it will never be drawn",
            skipped=False,
        )

    candidate = Candidate(
        name=name,
        email=_clean(row.get(EMAIL_COLUMN)),
        phone=_clean(row.get(PHONE_COLUMN)),
        institution=_clean(row.get(INSTITUTION_COLUMN)) or None,
        institution_type=_clean(row.get(INSTITUTION_TYPE_COLUMN)) or None,
        total_score=score,
    )
    return candidate, error


def read_candidates(lines: Iterable[str]) -> ImportResult:
    """Parse CSV text (header row first) into candidates.

    Raises
    ------
    CsvImportError
        If the header row is missing or lacks a required column.
    """
    reader = csv.DictReader(lines)
    header = reader.fieldnames
    if not header:
        raise CsvImportError("CSV file is empty or has no header row")
    header = [column.strip() for column in header]
    reader.fieldnames = header
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise CsvImportError(f"CSV header is missing column(s): {', '.join(missing)}")

    result = ImportResult()
    parsed: list[Candidate] = []
    for row in reader:
        # Blank lines are dropped by DictReader; rows of empty cells are not.
        if not any(_clean(value) for value in row.values() if isinstance(value, str)):
            continue
        candidate, error = parse_row(row, reader.line_num)
        if error is not None:
            logger.warning(f"CSV line {error.line_number}: {error.message}")
            result.errors.append(error)
        if candidate is not None:
            parsed.append(candidate)

    result.candidates = assign_identities(parsed)
    logger.info(
        f"Parsed {len(result.candidates)} candidate(s) with {len(result.errors)} row problem(s)"
    )
    return result


def read_candidates_from_text(text: str) -> ImportResult:
    return read_candidates(io.StringIO(text, newline=""))


def read_candidates_from_file(path: Union[str, Path]) -> ImportResult:
    """Parse the CSV file at ``path``; a UTF-8 BOM is tolerated."""
    with Path(path).open("r", encoding="utf-8-sig", newline="") as handle:
        return read_candidates(handle)


__all__ = [
    "CsvImportError",
    "ImportResult",
    "RowError",
    "parse_row",
    "parse_score",
    "read_candidates",
    "read_candidates_from_file",
    "read_candidates_from_text",
]
