"""Confidence scorers for analysis steps."""

from __future__ import annotations

import random
from typing import Protocol

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0


def clamp_confidence(value: float) -> float:
    return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, value))


class ConfidenceScorer(Protocol):
    """Turns a baseline confidence into the reported step confidence."""

    def score(self, step: str, baseline: float) -> float:
        ...


class FixedScorer:
    """Reports the baseline unchanged (clamped). Deterministic."""

    def score(self, step: str, baseline: float) -> float:
        return clamp_confidence(baseline)


class JitterScorer:
    """Adds bounded uniform noise so scores don't look falsely uniform.

    Pass ``seed`` for reproducible runs.
    """

    def __init__(self, spread: float = 0.1, *, seed: int | None = None) -> None:
        if not 0.0 <= spread <= 0.1:
            raise ValueError("spread must be between 0 and 0.1")
        self.spread = spread
        self._random = random.Random(seed)

    def score(self, step: str, baseline: float) -> float:
        offset = self._random.uniform(-self.spread, self.spread)
        return clamp_confidence(baseline + offset)


__all__ = [
    "ConfidenceScorer",
    "FixedScorer",
    "JitterScorer",
    "MAX_CONFIDENCE",
    "MIN_CONFIDENCE",
    "clamp_confidence",
]
