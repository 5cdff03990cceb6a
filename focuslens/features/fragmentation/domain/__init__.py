"""
Domain subpackage for the fragmentation feature.
"""

from .errors import (
    ComputationAnomalyError,
    FragmentationError,
    InvalidInputError,
    PartialDataError,
    parse_activities,
)
from .models import (
    ActivityItem,
    ActivityMetrics,
    ActivityWindow,
    AnomalyResult,
    HistoricalScore,
    RiskLevel,
    ScoreResult,
    TeamMemberScore,
    TeamOverview,
    TrendResult,
)

__all__ = [
    "ActivityItem",
    "ActivityMetrics",
    "ActivityWindow",
    "AnomalyResult",
    "ComputationAnomalyError",
    "FragmentationError",
    "HistoricalScore",
    "InvalidInputError",
    "PartialDataError",
    "RiskLevel",
    "ScoreResult",
    "TeamMemberScore",
    "TeamOverview",
    "TrendResult",
    "parse_activities",
]
