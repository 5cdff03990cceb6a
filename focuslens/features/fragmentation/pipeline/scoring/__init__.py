"""
Fragmentation scoring package.

Provides the deterministic scorer, the scorer interface, and risk banding.
"""

from .base import FragmentationScorer
from .risk import classify_risk
from .service import ScoringService, scoring_service

__all__ = ["FragmentationScorer", "ScoringService", "classify_risk", "scoring_service"]
