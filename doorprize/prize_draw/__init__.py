"""Utilities for the prize draw subsystem."""

from .selection import (
    InvalidSelectionPool,
    NoEligibleCandidates,
    candidate_weights,
    select_winner,
    selection_odds,
)
from .weighting import (
    DEFAULT_SCHEME_KEY,
    DEFAULT_WEIGHTING_REGISTRY,
    SchemeRegistry,
    WeightingScheme,
    proportional_weight,
    score_band_weight,
)

__all__ = [
    "DEFAULT_SCHEME_KEY",
    "DEFAULT_WEIGHTING_REGISTRY",
    "InvalidSelectionPool",
    "NoEligibleCandidates",
    "SchemeRegistry",
    "WeightingScheme",
    "candidate_weights",
    "proportional_weight",
    "score_band_weight",
    "select_winner",
    "selection_odds",
]
