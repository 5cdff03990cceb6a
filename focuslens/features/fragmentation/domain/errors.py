"""
Error taxonomy for the fragmentation engine.

InvalidInputError fails fast at the API boundary. PartialDataError is
collected by the aggregation layer and reported as a warning, never raised
to the caller. ComputationAnomalyError guards against a non-finite score.
"""

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from .models import ActivityItem


class FragmentationError(Exception):
    """Base exception for fragmentation engine operations."""

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        error_code: str | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.error_code = error_code
        self.recoverable = recoverable


class InvalidInputError(FragmentationError):
    """Caller supplied malformed input (bad timestamp, empty series, bad window)."""

    def __init__(self, message: str, user_id: str | None = None, field: str | None = None):
        super().__init__(message, user_id=user_id, error_code="invalid_input")
        self.field = field


class PartialDataError(FragmentationError):
    """A single day or user could not be fetched or scored during aggregation."""

    def __init__(
        self,
        message: str,
        user_id: str | None = None,
        day: date | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, user_id=user_id, error_code="partial_data", recoverable=True)
        self.day = day
        self.cause = cause

    @property
    def label(self) -> str:
        if self.day is not None:
            return self.day.isoformat()
        return self.user_id or "unknown"


class ComputationAnomalyError(FragmentationError):
    """Score computation produced a non-finite value."""

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message, user_id=user_id, error_code="computation_anomaly")


def parse_activities(raw: Iterable[Mapping[str, Any] | ActivityItem]) -> list[ActivityItem]:
    """
    Validate raw activity payloads into ActivityItem models.

    Args:
        raw: Dicts in wire shape (camelCase or snake_case), or ActivityItems

    Returns:
        Parsed activities in input order

    Raises:
        InvalidInputError: if any record fails validation
    """
    activities: list[ActivityItem] = []
    for index, item in enumerate(raw):
        if isinstance(item, ActivityItem):
            activities.append(item)
            continue
        try:
            activities.append(ActivityItem.model_validate(item))
        except ValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise InvalidInputError(
                f"Invalid activity at index {index}: {first.get('msg', str(e))}",
                field=location or None,
            ) from e
    return activities


def describe_failures(failures: list[PartialDataError], total: int, unit: str) -> str | None:
    """Fold per-unit failures into one warning line, or None when nothing failed."""
    if not failures:
        return None
    details = "; ".join(f"{failure.label} ({failure.message})" for failure in failures)
    return f"Could not load activity for {len(failures)} of {total} {unit}: {details}"
