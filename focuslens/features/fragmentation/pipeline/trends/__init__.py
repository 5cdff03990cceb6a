"""
Trend aggregation package.

Builds per-day score histories and team overviews on top of the scorer,
tolerating per-unit fetch failures.
"""

from .service import ActivitySupplier, TrendAggregationService, trend_aggregation_service
from .windows import build_day_windows, rolling_window

__all__ = [
    "ActivitySupplier",
    "TrendAggregationService",
    "build_day_windows",
    "rolling_window",
    "trend_aggregation_service",
]
