"""
Day window construction for trend aggregation.

Every day in a range is scored over its own window. Past days cover the
full calendar day; when the range ends today, the last window stops at
"now" and is marked partial.
"""

from datetime import date, datetime, time, timedelta, tzinfo

from focuslens.config import settings
from focuslens.features.fragmentation.domain.errors import InvalidInputError
from focuslens.features.fragmentation.domain.models import ActivityWindow


def day_window(day: date, tz: tzinfo, now: datetime | None = None) -> ActivityWindow:
    """Window for a single calendar day, truncated at ``now`` when the day is today."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    if now is not None and now.astimezone(tz).date() == day:
        return ActivityWindow(day=day, start=start, end=now.astimezone(tz), is_partial=True)
    return ActivityWindow(day=day, start=start, end=end)


def build_day_windows(
    start_date: date,
    end_date: date,
    now: datetime | None = None,
    tz: tzinfo | None = None,
    max_days: int | None = None,
) -> list[ActivityWindow]:
    """
    Build one window per day in ``[start_date, end_date]``, oldest first.

    Only the final day can be partial, and only when it is today.

    Raises:
        InvalidInputError: the range is inverted, longer than ``max_days``
            (default ``TREND_MAX_RANGE_DAYS``), or ends on the last representable date
    """
    if start_date > end_date:
        raise InvalidInputError(
            f"start_date {start_date.isoformat()} is after end_date {end_date.isoformat()}",
            field="start_date",
        )
    # The window for date.max would end on a day that does not exist
    if end_date == date.max:
        raise InvalidInputError(
            f"end_date must be before {date.max.isoformat()}", field="end_date"
        )
    max_days = settings.TREND_MAX_RANGE_DAYS if max_days is None else max_days
    span = (end_date - start_date).days + 1
    if span > max_days:
        raise InvalidInputError(
            f"Date range covers {span} days, the limit is {max_days}", field="end_date"
        )

    tz = tz or settings.trend_tzinfo()
    windows: list[ActivityWindow] = []
    day = start_date
    while day < end_date:
        windows.append(day_window(day, tz))
        day += timedelta(days=1)
    windows.append(day_window(end_date, tz, now=now))
    return windows


def rolling_window(end: datetime, days: int) -> ActivityWindow:
    """Trailing multi-day window ending at ``end``, used for team scoring."""
    if days < 1:
        raise InvalidInputError(f"days must be at least 1, got {days}", field="days")
    return ActivityWindow(
        day=end.date(),
        start=end - timedelta(days=days),
        end=end,
        window_days=days,
        is_partial=False,
    )
