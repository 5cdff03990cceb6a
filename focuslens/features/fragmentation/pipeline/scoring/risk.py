"""
Risk band classification for fragmentation scores.
"""

import math

from focuslens.features.fragmentation.domain.errors import InvalidInputError
from focuslens.features.fragmentation.domain.models import RiskLevel

MODERATE_THRESHOLD = 2.0
HIGH_THRESHOLD = 3.5


def classify_risk(score: float) -> RiskLevel:
    """Map a score to Low / Moderate / High. Bands are closed below, open above."""
    if not math.isfinite(score):
        raise InvalidInputError(f"Cannot classify non-finite score {score!r}", field="score")
    if score >= HIGH_THRESHOLD:
        return "High"
    if score >= MODERATE_THRESHOLD:
        return "Moderate"
    return "Low"
