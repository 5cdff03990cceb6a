import asyncio
from datetime import UTC, date, datetime, timedelta

import pytest

from focuslens.features.fragmentation.domain.models import ActivityItem, ActivityWindow

BASE_TIME = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)


def build_activity(
    type: str = "teams_meeting",
    source: str = "teams",
    minutes: int = 0,
    **overrides,
) -> ActivityItem:
    return ActivityItem(
        type=type,
        source=source,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        **overrides,
    )


class FakeActivitySupplier:
    """Per-day activity source that can be told to fail on given days."""

    def __init__(self, by_day: dict[date, list[ActivityItem]] | None = None):
        self.by_day = by_day or {}
        self.failing_days: set[date] = set()
        self.failing_users: set[str] = set()
        self.delays: dict[date, float] = {}
        self.calls: list[tuple[str, ActivityWindow]] = []

    async def __call__(self, user_id: str, window: ActivityWindow) -> list[ActivityItem]:
        self.calls.append((user_id, window))
        delay = self.delays.get(window.day)
        if delay:
            await asyncio.sleep(delay)
        if window.day in self.failing_days or user_id in self.failing_users:
            raise ConnectionError(f"activity service unavailable for {window.day.isoformat()}")
        return list(self.by_day.get(window.day, []))


@pytest.fixture
def make_activity():
    return build_activity


@pytest.fixture
def fake_supplier():
    return FakeActivitySupplier()


@pytest.fixture
def meetings():
    def _build(count: int) -> list[ActivityItem]:
        return [build_activity("teams_meeting", "teams", minutes=m) for m in range(count)]

    return _build
