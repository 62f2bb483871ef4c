"""Participant records imported for a prize draw."""

from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional


@dataclass(frozen=True)
class Candidate:
    """One participant eligible for a draw.

    Attributes
    ----------
    name : str
        Display name shown while drawing and in the winners list.
    email : str
        Contact e-mail address.
    phone : str
        Contact phone number.
    institution : Optional[str]
        Affiliation shown under the name, display only.
    institution_type : Optional[str]
        Kind of affiliation, display only.
    total_score : float
        Score driving the selection weight. ``nan`` marks an unparseable
        score, which weighs zero.
    id : str
        Identity key used to exclude previous winners. Assigned by
        :func:`assign_identities` when omitted.
    """

    name: str
    email: str = ""
    phone: str = ""
    institution: Optional[str] = None
    institution_type: Optional[str] = None
    total_score: float = 0.0
    id: str = ""

    def fingerprint(self) -> str:
        """Return a SHA-256 digest of every identifying field except ``id``."""
        payload = json.dumps(
            [
                self.name,
                self.email,
                self.phone,
                self.institution,
                self.institution_type,
                _score_to_json(self.total_score),
            ],
            ensure_ascii=False,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    @property
    def has_valid_score(self) -> bool:
        return not math.isnan(self.total_score)

    def to_json(self) -> dict[str, Any]:
        """Serialize the candidate into a JSON-compatible dict."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "institution": self.institution,
            "institutionType": self.institution_type,
            "totalScore": _score_to_json(self.total_score),
        }

    def to_json_str(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Candidate":
        """Rebuild a candidate from :meth:`to_json` output."""
        if not isinstance(data, Mapping):
            raise TypeError("candidate payload must be a mapping")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"candidate payload is missing a name: {data!r}")
        raw_score = data.get("totalScore")
        return cls(
            id=str(data.get("id") or ""),
            name=name,
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            institution=data.get("institution"),
            institution_type=data.get("institutionType"),
            total_score=math.nan if raw_score is None else float(raw_score),
        )


def _score_to_json(score: float) -> Optional[float]:
    # JSON has no NaN; an invalid score is stored as null.
    if math.isnan(score):
        return None
    return score


def assign_identities(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Return ``candidates`` with a stable ``id`` filled in where missing.

    The key is the record fingerprint plus the ordinal of identical records
    seen so far, so two identical rows stay distinct while re-importing the
    same file reproduces the same keys.
    """
    seen: dict[str, int] = {}
    assigned: list[Candidate] = []
    for candidate in candidates:
        digest = candidate.fingerprint()
        ordinal = seen.get(digest, 0)
        seen[digest] = ordinal + 1
        if candidate.id:
            assigned.append(candidate)
            continue
        assigned.append(
            Candidate(
                id=f"{digest[:16]}-{ordinal}",
                name=candidate.name,
                email=candidate.email,
                phone=candidate.phone,
                institution=candidate.institution,
                institution_type=candidate.institution_type,
                total_score=candidate.total_score,
            )
        )
    return assigned


__all__ = ["Candidate", "assign_identities"]
