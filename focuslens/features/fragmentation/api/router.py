"""
Fragmentation routes.

Thin HTTP layer over the scoring, anomaly, metrics, and trend services.
Activity fetching stays with the caller: every route receives activities
in the request body.
"""

from collections.abc import Sequence

from fastapi import APIRouter, HTTPException, status

from focuslens.features.fragmentation.domain.errors import (
    ComputationAnomalyError,
    InvalidInputError,
    parse_activities,
)
from focuslens.features.fragmentation.domain.models import (
    ActivityItem,
    ActivityMetrics,
    ActivityWindow,
    AnomalyResult,
    ScoreResult,
    TrendResult,
)
from focuslens.features.fragmentation.pipeline.anomaly import anomaly_detector
from focuslens.features.fragmentation.pipeline.metrics import summarize_activity
from focuslens.features.fragmentation.pipeline.scoring import scoring_service
from focuslens.features.fragmentation.pipeline.trends import trend_aggregation_service
from focuslens.infrastructure.observability.logging import get_logger

from .schemas import AnomalyRequest, MetricsRequest, ScoreRequest, TrendRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/fragmentation", tags=["fragmentation"])


def _invalid(e: InvalidInputError) -> HTTPException:
    return HTTPException(status_code=422, detail=e.message)


def _in_memory_supplier(activities: Sequence[ActivityItem]):
    """Serve pre-loaded activities, filtered to each requested window."""

    async def supply(user_id: str, window: ActivityWindow) -> list[ActivityItem]:
        return [activity for activity in activities if window.contains(activity.timestamp)]

    return supply


@router.post("/score", response_model=ScoreResult)
async def score_activities(request: ScoreRequest):
    """Compute the fragmentation score for one user's activity window."""
    try:
        activities = parse_activities(request.activities)
        return scoring_service.score(
            activities, request.activity_window_days, user_id=request.user_id
        )
    except InvalidInputError as e:
        logger.warning("Invalid score request", user_id=request.user_id, error=e.message)
        raise _invalid(e)
    except ComputationAnomalyError as e:
        logger.error("Score computation failed", user_id=request.user_id, error=e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute fragmentation score",
        )


@router.post("/anomalies", response_model=AnomalyResult)
async def detect_anomalies(request: AnomalyRequest):
    """Flag the first spike in a score series."""
    try:
        return anomaly_detector.detect(request.fragmentation_scores, request.threshold)
    except InvalidInputError as e:
        logger.warning("Invalid anomaly request", error=e.message)
        raise _invalid(e)


@router.post("/metrics", response_model=ActivityMetrics)
async def activity_metrics(request: MetricsRequest):
    """Reporting counters for an activity set."""
    try:
        activities = parse_activities(request.activities)
    except InvalidInputError as e:
        logger.warning("Invalid metrics request", error=e.message)
        raise _invalid(e)
    return summarize_activity(activities)


@router.post("/trends", response_model=TrendResult)
async def build_trend(request: TrendRequest):
    """Per-day score history for a date range."""
    try:
        activities = parse_activities(request.activities)
        return await trend_aggregation_service.build_trend(
            request.user_id,
            request.start_date,
            request.end_date,
            _in_memory_supplier(activities),
        )
    except InvalidInputError as e:
        logger.warning("Invalid trend request", user_id=request.user_id, error=e.message)
        raise _invalid(e)
