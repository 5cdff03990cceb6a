"""
Fragmentation API request models.
Used by routes for input validation. Activities stay raw here and are
validated by parse_activities so malformed records map to InvalidInputError.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreRequest(_Request):
    """Request for scoring one user's activity window."""

    user_id: str = Field(default="", description="User the activities belong to")
    activity_window_days: int = Field(default=7, description="Window length in days")
    activities: list[dict[str, Any]] = Field(
        default_factory=list, description="Activity records for this user and window"
    )


class AnomalyRequest(_Request):
    """Request for anomaly detection over a score series."""

    fragmentation_scores: list[float] = Field(..., description="Scores in chronological order")
    threshold: float | None = Field(
        default=None, description="Standard deviations above the mean (default 2.0)"
    )


class MetricsRequest(_Request):
    """Request for reporting counters over an activity set."""

    activities: list[dict[str, Any]] = Field(default_factory=list)


class TrendRequest(_Request):
    """Request for a per-day score trend over activities supplied inline."""

    user_id: str = Field(default="", description="User the activities belong to")
    start_date: date = Field(..., description="First day, inclusive")
    end_date: date = Field(..., description="Last day, inclusive")
    activities: list[dict[str, Any]] = Field(
        default_factory=list, description="All activities for the range; bucketed per day"
    )
