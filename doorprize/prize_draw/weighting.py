"""Weighting schemes turning candidate scores into selection weights."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Callable, Dict, Optional

# (inclusive upper bound, weight) pairs, checked in order.
SCORE_BANDS: tuple[tuple[float, int], ...] = (
    (100, 1),
    (200, 5),
    (300, 10),
    (400, 20),
    (500, 40),
    (600, 70),
    (700, 100),
    (800, 200),
)
TOP_BAND_WEIGHT = 300


def score_band_weight(score: float) -> int:
    """Return the tiered weight for ``score``.

    Scores of 0–100 weigh 1, 101–200 weigh 5 and so on up to 300 for
    anything above 800. Negative and NaN scores weigh 0.
    """
    if score is None or math.isnan(score) or score < 0:
        return 0
    for upper_bound, weight in SCORE_BANDS:
        if score <= upper_bound:
            return weight
    return TOP_BAND_WEIGHT


def proportional_weight(score: float) -> float:
    """Weight equal to the score itself; invalid or negative scores weigh 0."""
    if score is None or math.isnan(score) or score < 0 or math.isinf(score):
        return 0.0
    return float(score)


@dataclass(frozen=True)
class WeightingScheme:
    """Definition of a weighting scheme.

    Attributes
    ----------
    key : str
        Registry key used to identify the scheme.
    weigher : Callable[[float], float]
        Callable mapping a score to a non-negative weight.
    description : Optional[str]
        Human-readable summary of the scheme's behaviour.
    """

    key: str
    weigher: Callable[[float], float]
    description: Optional[str] = None

    def weight(self, score: float) -> float:
        value = self.weigher(score)
        if value < 0:
            raise ValueError(f"Scheme '{self.key}' produced a negative weight")
        return value


class SchemeRegistry:
    """Mutable registry mapping scheme keys to definitions."""

    def __init__(self) -> None:
        self._schemes: Dict[str, WeightingScheme] = {}

    def register(self, scheme: WeightingScheme, *, replace: bool = False) -> None:
        """Register a weighting scheme under its key.

        Parameters
        ----------
        scheme : WeightingScheme
            Scheme to add to the registry.
        replace : bool, default: False
            When ``True`` an existing registration with the same key is
            overwritten. Otherwise a duplicate raises :class:`ValueError`.
        """
        if not replace and scheme.key in self._schemes:
            raise ValueError(f"Weighting scheme '{scheme.key}' is already registered")
        self._schemes[scheme.key] = scheme

    def get(self, key: str) -> WeightingScheme:
        """Return the scheme registered under ``key``."""
        try:
            return self._schemes[key]
        except KeyError as exc:
            raise KeyError(f"Unknown weighting scheme '{key}'") from exc

    def available_schemes(self) -> Dict[str, WeightingScheme]:
        """Return a copy of the registered schemes keyed by identifier."""
        return dict(self._schemes)


DEFAULT_SCHEME_KEY = "score_bands"

DEFAULT_WEIGHTING_REGISTRY = SchemeRegistry()
DEFAULT_WEIGHTING_REGISTRY.register(
    WeightingScheme(
        key=DEFAULT_SCHEME_KEY,
        weigher=score_band_weight,
        description=(
            "Tiered weights per 100-point score band, from 1 for 0-100 up to "
            "300 for scores above 800."
        ),
    )
)
DEFAULT_WEIGHTING_REGISTRY.register(
    WeightingScheme(
        key="proportional",
        weigher=proportional_weight,
        description="Weight equals the candidate's total score.",
    )
)

__all__ = [
    "DEFAULT_SCHEME_KEY",
    "DEFAULT_WEIGHTING_REGISTRY",
    "SCORE_BANDS",
    "SchemeRegistry",
    "WeightingScheme",
    "proportional_weight",
    "score_band_weight",
]
