"""
Fragmentation feature package.

This vertical slice keeps every layer of the fragmentation engine
co-located (domain models, scoring, anomaly detection, trend aggregation,
and the API router) so contributors can navigate the feature without
hunting through global folders.
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as fragmentation_router  # noqa: F401
from .domain.models import ActivityItem, AnomalyResult, HistoricalScore, ScoreResult  # noqa: F401
from .pipeline.anomaly import anomaly_detector  # noqa: F401
from .pipeline.scoring import classify_risk, scoring_service  # noqa: F401
from .pipeline.trends import trend_aggregation_service  # noqa: F401
