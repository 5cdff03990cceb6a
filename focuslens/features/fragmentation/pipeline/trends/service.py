"""
Trend aggregation service.

Drives the scorer once per day across a date range (and once per member
for team overviews). Each unit fetches its activities from an injected
supplier; a unit that fails is dropped from the series and reported in a
consolidated warning instead of aborting the whole run.
"""

from __future__ import annotations

import asyncio
import statistics
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from focuslens.config import settings
from focuslens.features.fragmentation.domain.errors import (
    PartialDataError,
    describe_failures,
    parse_activities,
)
from focuslens.features.fragmentation.domain.models import (
    ActivityItem,
    ActivityWindow,
    HistoricalScore,
    ScoreResult,
    TeamMemberScore,
    TeamOverview,
    TrendResult,
)
from focuslens.features.fragmentation.pipeline.scoring.base import FragmentationScorer
from focuslens.features.fragmentation.pipeline.scoring.service import scoring_service
from focuslens.infrastructure.observability.logging import get_logger, log_partial_failure

from .windows import build_day_windows, rolling_window

logger = get_logger(__name__)

# (user_id, window) -> activities for that user inside that window
ActivitySupplier = Callable[
    [str, ActivityWindow], Awaitable[Sequence[ActivityItem | dict[str, Any]]]
]


@dataclass(slots=True)
class _DayOutcome:
    window: ActivityWindow
    entry: HistoricalScore | None = None
    error: PartialDataError | None = None


def round_one_decimal(value: float) -> float:
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def trailing_averages(scores: Sequence[float], window: int) -> list[float]:
    """Mean of each score and up to ``window - 1`` scores before it."""
    window = max(window, 1)
    averages: list[float] = []
    for index in range(len(scores)):
        chunk = scores[max(0, index - window + 1) : index + 1]
        averages.append(round_one_decimal(statistics.fmean(chunk)))
    return averages


class TrendAggregationService:
    def __init__(
        self,
        scorer: FragmentationScorer | None = None,
        max_concurrency: int | None = None,
        unit_timeout: float | None = None,
        rolling_window_days: int | None = None,
    ):
        config = settings.get_trend_config()
        self.scorer = scorer or scoring_service
        if max_concurrency is None:
            max_concurrency = config["max_concurrency"]
        self.max_concurrency = max(1, max_concurrency)
        self.unit_timeout = config["day_timeout"] if unit_timeout is None else unit_timeout
        self.rolling_window_days = (
            config["rolling_window"] if rolling_window_days is None else rolling_window_days
        )

    async def build_trend(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        supplier: ActivitySupplier,
        now: datetime | None = None,
    ) -> TrendResult:
        """
        Score every day in ``[start_date, end_date]`` for one user.

        Args:
            user_id: User whose activities the supplier returns
            start_date: First day, inclusive
            end_date: Last day, inclusive; scored up to ``now`` when it is today
            supplier: Async collaborator returning the activities for one window
            now: Current instant, defaults to the wall clock

        Returns:
            TrendResult ordered oldest to newest, with failed days omitted

        Raises:
            InvalidInputError: start_date is after end_date
        """
        windows = build_day_windows(start_date, end_date, now=now or datetime.now(UTC))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        # gather keeps input order, so history stays chronological
        outcomes = await asyncio.gather(
            *(self._score_day(semaphore, user_id, window, supplier) for window in windows)
        )

        history = [outcome.entry for outcome in outcomes if outcome.entry is not None]
        failures = [outcome.error for outcome in outcomes if outcome.error is not None]
        scores = [entry.score for entry in history]

        result = TrendResult(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            history=history,
            average_score=round_one_decimal(statistics.fmean(scores)) if scores else None,
            rolling_average=trailing_averages(scores, self.rolling_window_days),
            failed_days=[failure.day for failure in failures if failure.day is not None],
            warning=describe_failures(failures, len(windows), "days"),
        )

        logger.info(
            "Fragmentation trend built",
            user_id=user_id,
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            days_requested=len(windows),
            days_scored=len(history),
            days_failed=len(failures),
            average_score=result.average_score,
        )
        return result

    async def score_team(
        self,
        user_ids: Sequence[str],
        supplier: ActivitySupplier,
        window: ActivityWindow | None = None,
        now: datetime | None = None,
    ) -> TeamOverview:
        """
        Score every team member over one shared window.

        Failed members keep their slot with an error and are left out of the
        stable / at-risk / overloaded counts.
        """
        if window is None:
            window = rolling_window(now or datetime.now(UTC), settings.TEAM_SCORE_WINDOW_DAYS)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        members = await asyncio.gather(
            *(self._score_member(semaphore, user_id, window, supplier) for user_id in user_ids)
        )

        overview = TeamOverview(members=list(members))
        failures: list[PartialDataError] = []
        for member in members:
            if member.result is None:
                failures.append(
                    PartialDataError(member.error or "unknown error", user_id=member.user_id)
                )
                continue
            if member.result.risk_level == "Low":
                overview.stable += 1
            elif member.result.risk_level == "Moderate":
                overview.at_risk += 1
            else:
                overview.overloaded += 1
        overview.warning = describe_failures(failures, len(members), "users")

        logger.info(
            "Team fragmentation overview built",
            members=len(members),
            stable=overview.stable,
            at_risk=overview.at_risk,
            overloaded=overview.overloaded,
            failed=len(failures),
        )
        return overview

    async def _score_day(
        self,
        semaphore: asyncio.Semaphore,
        user_id: str,
        window: ActivityWindow,
        supplier: ActivitySupplier,
    ) -> _DayOutcome:
        try:
            result = await self._fetch_and_score(
                semaphore, user_id, window, supplier, unit="day", key=window.day.isoformat()
            )
        except PartialDataError as e:
            return _DayOutcome(window=window, error=e)

        return _DayOutcome(
            window=window,
            entry=HistoricalScore(
                date=window.day,
                score=result.fragmentation_score,
                risk_level=result.risk_level,
                summary=result.summary,
            ),
        )

    async def _score_member(
        self,
        semaphore: asyncio.Semaphore,
        user_id: str,
        window: ActivityWindow,
        supplier: ActivitySupplier,
    ) -> TeamMemberScore:
        try:
            result = await self._fetch_and_score(
                semaphore, user_id, window, supplier, unit="user", key=user_id
            )
        except PartialDataError as e:
            return TeamMemberScore(user_id=user_id, error=e.message)
        return TeamMemberScore(user_id=user_id, result=result)

    async def _fetch_and_score(
        self,
        semaphore: asyncio.Semaphore,
        user_id: str,
        window: ActivityWindow,
        supplier: ActivitySupplier,
        unit: str,
        key: str,
    ) -> ScoreResult:
        """
        Fetch and score a single unit of work.

        Any Exception becomes a PartialDataError for this unit only.
        CancelledError is a BaseException and propagates untouched.
        """
        async with semaphore:
            try:
                raw = await asyncio.wait_for(supplier(user_id, window), timeout=self.unit_timeout)
                activities = parse_activities(raw)
                return self.scorer.score(activities, window.window_days, user_id=user_id)
            except TimeoutError as e:
                message = f"activity fetch timed out after {self.unit_timeout}s"
                log_partial_failure(unit, key, message, user_id=user_id)
                raise PartialDataError(message, user_id=user_id, day=window.day, cause=e) from e
            except Exception as e:
                message = f"{type(e).__name__}: {e}"
                log_partial_failure(unit, key, message, user_id=user_id)
                raise PartialDataError(message, user_id=user_id, day=window.day, cause=e) from e


trend_aggregation_service = TrendAggregationService()
