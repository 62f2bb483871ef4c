"""Weighted winner selection."""

from __future__ import annotations

import bisect
import random
from typing import Optional, Sequence

from ..candidate import Candidate
from .weighting import DEFAULT_SCHEME_KEY, DEFAULT_WEIGHTING_REGISTRY, WeightingScheme


class InvalidSelectionPool(ValueError):
    """Raised when no candidate in the pool can be selected."""


class NoEligibleCandidates(InvalidSelectionPool):
    """Raised when every imported candidate has already won."""


def _resolve_scheme(scheme: Optional[WeightingScheme]) -> WeightingScheme:
    return scheme or DEFAULT_WEIGHTING_REGISTRY.get(DEFAULT_SCHEME_KEY)


def candidate_weights(
    candidates: Sequence[Candidate],
    *,
    scheme: Optional[WeightingScheme] = None,
) -> list[float]:
    """Return the weight of each candidate, in input order."""
    active = _resolve_scheme(scheme)
    return [active.weight(candidate.total_score) for candidate in candidates]


def selection_odds(
    candidates: Sequence[Candidate],
    *,
    scheme: Optional[WeightingScheme] = None,
) -> list[float]:
    """Return each candidate's chance of being selected in a single draw.

    All odds are ``0.0`` when the pool carries no weight at all.
    """
    weights = candidate_weights(candidates, scheme=scheme)
    total = sum(weights)
    if total <= 0:
        return [0.0 for _ in weights]
    return [weight / total for weight in weights]


def select_winner(
    candidates: Sequence[Candidate],
    *,
    rng: Optional[random.Random] = None,
    scheme: Optional[WeightingScheme] = None,
) -> Candidate:
    """Pick one candidate at random, weighted by score.

    Parameters
    ----------
    candidates : Sequence[Candidate]
        Pool to draw from. Must contain at least one candidate with a
        positive weight.
    rng : Optional[random.Random], default: None
        Random source. The module-level generator is used when omitted.
    scheme : Optional[WeightingScheme], default: None
        Weighting scheme; defaults to the ``score_bands`` scheme.

    Returns
    -------
    Candidate
        An element of ``candidates``.

    Raises
    ------
    InvalidSelectionPool
        If ``candidates`` is empty or every candidate weighs zero.
    """
    if not candidates:
        raise InvalidSelectionPool("Cannot select a winner from an empty pool")

    weights = candidate_weights(candidates, scheme=scheme)
    cumulative: list[float] = []
    running = 0.0
    for weight in weights:
        running += weight
        cumulative.append(running)

    total = running
    if total <= 0:
        raise InvalidSelectionPool(
            "Cannot select a winner: every candidate has zero weight"
        )

    source = rng or random
    point = source.random() * total
    # bisect_right skips zero-weight candidates whose cumulative value equals
    # the previous one.
    index = bisect.bisect_right(cumulative, point)
    if index >= len(candidates):
        # Guard against floating point rounding at the upper edge.
        index = max(i for i, weight in enumerate(weights) if weight > 0)
    return candidates[index]


__all__ = [
    "InvalidSelectionPool",
    "NoEligibleCandidates",
    "candidate_weights",
    "select_winner",
    "selection_odds",
]
