from __future__ import annotations

from app.modeling.types import Confidence

HIGH_CONFIDENCE_SCORE = 15
MEDIUM_CONFIDENCE_SCORE = 10

HIGH_CONFIDENCE_DIFFERENTIAL = 10
MEDIUM_CONFIDENCE_DIFFERENTIAL = 5


def classify_confidence(score: int) -> Confidence:
    if score >= HIGH_CONFIDENCE_SCORE:
        return "high"
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return "medium"
    return "low"


def classify_differential(differential: int) -> Confidence:
    """Confidence for a home-minus-away differential; only the magnitude counts."""
    gap = abs(differential)
    if gap >= HIGH_CONFIDENCE_DIFFERENTIAL:
        return "high"
    if gap >= MEDIUM_CONFIDENCE_DIFFERENTIAL:
        return "medium"
    return "low"
