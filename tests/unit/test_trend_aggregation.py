import asyncio
from datetime import UTC, date, datetime, timedelta

import pytest

from focuslens.config import settings
from focuslens.features.fragmentation.domain.errors import InvalidInputError
from focuslens.features.fragmentation.domain.models import ActivityWindow, ScoreResult
from focuslens.features.fragmentation.pipeline.trends.service import (
    TrendAggregationService,
    trailing_averages,
)

NOW = datetime(2024, 3, 20, 12, 0, tzinfo=UTC)
DAYS = [date(2024, 3, d) for d in range(1, 6)]


@pytest.mark.asyncio
async def test_failed_day_is_omitted_and_reported(fake_supplier, meetings):
    fake_supplier.by_day = {day: meetings(3) for day in DAYS}
    fake_supplier.failing_days = {DAYS[2]}
    service = TrendAggregationService(max_concurrency=5)

    trend = await service.build_trend("user-1", DAYS[0], DAYS[-1], fake_supplier, now=NOW)

    assert [entry.date for entry in trend.history] == [DAYS[0], DAYS[1], DAYS[3], DAYS[4]]
    assert trend.failed_days == [DAYS[2]]
    assert trend.warning is not None
    assert "1 of 5 days" in trend.warning
    assert "2024-03-03" in trend.warning
    assert "ConnectionError" in trend.warning
    assert trend.average_score == 1.2


@pytest.mark.asyncio
async def test_history_is_chronological_regardless_of_completion_order(fake_supplier, meetings):
    fake_supplier.by_day = {day: meetings(i + 1) for i, day in enumerate(DAYS)}
    fake_supplier.delays = {DAYS[0]: 0.05, DAYS[1]: 0.03}
    service = TrendAggregationService(max_concurrency=5)

    trend = await service.build_trend("user-1", DAYS[0], DAYS[-1], fake_supplier, now=NOW)

    assert [entry.date for entry in trend.history] == DAYS
    assert trend.scores == [0.4, 0.8, 1.2, 1.6, 2.0]
    assert trend.average_score == 1.2
    assert trend.warning is None
    assert trend.failed_days == []


@pytest.mark.asyncio
async def test_each_day_is_scored_with_a_one_day_window(fake_supplier, meetings):
    fake_supplier.by_day = {DAYS[0]: meetings(6)}
    service = TrendAggregationService()

    trend = await service.build_trend("user-1", DAYS[0], DAYS[0], fake_supplier, now=NOW)

    # six activities exceed the one-day density threshold of five
    assert trend.history[0].score == 2.7
    assert trend.history[0].risk_level == "Moderate"
    assert all(window.window_days == 1 for _, window in fake_supplier.calls)


@pytest.mark.asyncio
async def test_empty_days_score_zero(fake_supplier):
    service = TrendAggregationService()

    trend = await service.build_trend("user-1", DAYS[0], DAYS[-1], fake_supplier, now=NOW)

    assert trend.scores == [0.0] * 5
    assert trend.average_score == 0.0


@pytest.mark.asyncio
async def test_all_days_failing_returns_empty_history(fake_supplier):
    fake_supplier.failing_days = set(DAYS)
    service = TrendAggregationService()

    trend = await service.build_trend("user-1", DAYS[0], DAYS[-1], fake_supplier, now=NOW)

    assert trend.history == []
    assert trend.average_score is None
    assert trend.rolling_average == []
    assert "5 of 5 days" in trend.warning


@pytest.mark.asyncio
async def test_slow_day_times_out_without_aborting_range(fake_supplier):
    fake_supplier.delays = {DAYS[1]: 0.5}
    service = TrendAggregationService(max_concurrency=5, unit_timeout=0.05)

    trend = await service.build_trend("user-1", DAYS[0], DAYS[2], fake_supplier, now=NOW)

    assert [entry.date for entry in trend.history] == [DAYS[0], DAYS[2]]
    assert trend.failed_days == [DAYS[1]]
    assert "timed out" in trend.warning


@pytest.mark.asyncio
async def test_malformed_day_payload_is_partial_not_fatal():
    async def supplier(user_id: str, window: ActivityWindow):
        if window.day == DAYS[1]:
            return [{"type": "teams_meeting", "timestamp": "garbage", "source": "teams"}]
        return [
            {"type": "teams_meeting", "timestamp": "2024-03-01T09:00:00Z", "source": "teams"}
        ]

    trend = await TrendAggregationService().build_trend(
        "user-1", DAYS[0], DAYS[2], supplier, now=NOW
    )

    assert len(trend.history) == 2
    assert "InvalidInputError" in trend.warning


@pytest.mark.asyncio
async def test_range_ending_today_requests_partial_window(fake_supplier):
    now = datetime(2024, 3, 5, 15, 0, tzinfo=UTC)
    service = TrendAggregationService()

    await service.build_trend("user-1", DAYS[3], DAYS[4], fake_supplier, now=now)

    windows = sorted((window for _, window in fake_supplier.calls), key=lambda w: w.day)
    assert windows[0].is_partial is False
    assert windows[1].is_partial is True
    assert windows[1].end == now


@pytest.mark.asyncio
async def test_inverted_range_raises(fake_supplier):
    with pytest.raises(InvalidInputError):
        await TrendAggregationService().build_trend(
            "user-1", DAYS[4], DAYS[0], fake_supplier, now=NOW
        )


@pytest.mark.asyncio
async def test_cancellation_propagates_to_in_flight_days(fake_supplier):
    fake_supplier.delays = {day: 5.0 for day in DAYS}
    service = TrendAggregationService(max_concurrency=5)

    task = asyncio.create_task(
        service.build_trend("user-1", DAYS[0], DAYS[-1], fake_supplier, now=NOW)
    )
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    active = 0
    peak = 0

    async def supplier(user_id: str, window: ActivityWindow):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return []

    service = TrendAggregationService(max_concurrency=2)
    await service.build_trend(
        "user-1", DAYS[0], DAYS[0] + timedelta(days=9), supplier, now=NOW
    )

    assert peak <= 2


@pytest.mark.asyncio
async def test_injected_scorer_is_used(fake_supplier):
    class FixedScorer:
        def score(self, activities, window_days, user_id=""):
            return ScoreResult(
                user_id=user_id,
                fragmentation_score=3.0,
                summary="fixed",
                risk_level="Moderate",
                activities_count=len(activities),
            )

    service = TrendAggregationService(scorer=FixedScorer())

    trend = await service.build_trend("user-1", DAYS[0], DAYS[1], fake_supplier, now=NOW)

    assert trend.scores == [3.0, 3.0]
    assert trend.history[0].summary == "fixed"


@pytest.mark.asyncio
async def test_score_team_counts_bands_and_isolates_failures(make_activity, meetings):
    heavy = [make_activity("jira_issue_task", "jira", minutes=m) for m in range(4)]

    async def supplier(user_id: str, window: ActivityWindow):
        if user_id == "bob":
            raise RuntimeError("directory lookup failed")
        if user_id == "carol":
            return heavy
        return meetings(2)

    service = TrendAggregationService()

    overview = await service.score_team(["alice", "bob", "carol"], supplier, now=NOW)

    assert [member.user_id for member in overview.members] == ["alice", "bob", "carol"]
    assert overview.members[0].result.fragmentation_score == 0.8
    assert overview.members[1].result is None
    assert "directory lookup failed" in overview.members[1].error
    assert overview.members[2].result.risk_level == "High"
    assert (overview.stable, overview.at_risk, overview.overloaded) == (1, 0, 1)
    assert "1 of 3 users" in overview.warning
    assert "bob" in overview.warning


def test_trailing_averages():
    assert trailing_averages([1.0, 2.0, 3.0], 2) == [1.0, 1.5, 2.5]
    assert trailing_averages([1.0, 2.0, 3.0, 4.0], 7) == [1.0, 1.5, 2.0, 2.5]
    assert trailing_averages([], 7) == []


def test_explicit_zero_overrides_are_kept():
    service = TrendAggregationService(unit_timeout=0, rolling_window_days=0)

    assert service.unit_timeout == 0
    assert service.rolling_window_days == 0


def test_unset_overrides_fall_back_to_settings():
    service = TrendAggregationService()

    assert service.unit_timeout == settings.TREND_DAY_TIMEOUT_SECONDS
    assert service.rolling_window_days == settings.TREND_ROLLING_WINDOW_DAYS
