"""
Fragmentation scoring service - reduces one user's activity window to a 0-5 score.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from focuslens.config import settings
from focuslens.features.fragmentation.domain.errors import (
    ComputationAnomalyError,
    InvalidInputError,
    parse_activities,
)
from focuslens.features.fragmentation.domain.models import ActivityItem, ScoreResult
from focuslens.infrastructure.observability.logging import get_logger

from .risk import classify_risk

logger = get_logger(__name__)

NO_ACTIVITY_SUMMARY = "No activities tracked for this period."


@dataclass(slots=True)
class ContributingFactors:
    issue_updates: int = 0
    meetings: int = 0
    source_switches: int = 0
    type_switches: int = 0
    distinct_sources: int = 0
    multi_platform: bool = False
    high_density: bool = False

    def narrative(self) -> list[str]:
        parts: list[str] = []
        if self.issue_updates:
            parts.append(_plural(self.issue_updates, "issue update", "issue updates"))
        if self.meetings:
            parts.append(_plural(self.meetings, "meeting", "meetings"))
        if self.source_switches:
            parts.append(_plural(self.source_switches, "platform switch", "platform switches"))
        if self.type_switches:
            parts.append(_plural(self.type_switches, "task type switch", "task type switches"))
        if self.multi_platform:
            parts.append(f"activity across {self.distinct_sources} platforms")
        if self.high_density:
            parts.append("periods of high activity density")
        return parts


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


class ScoringService:
    WEIGHTS = {
        "meeting": Decimal("0.4"),
        "issue_update": Decimal("1.0"),
        "source_switch": Decimal("0.25"),
        "type_switch": Decimal("0.1"),
        "multi_platform": Decimal("0.5"),
        "density": Decimal("0.3"),
    }
    DENSITY_THRESHOLD_PER_DAY = 5
    MULTI_PLATFORM_MIN_SOURCES = 3
    FLOOR_SCORE = Decimal("0.1")
    MIN_SCORE = Decimal("0.0")
    MAX_SCORE = Decimal("5.0")
    LOW_ACTIVITY_CEILING = 1.0

    def __init__(
        self,
        weights: Mapping[str, float | Decimal] | None = None,
        strict_numerics: bool | None = None,
    ):
        self.weights = dict(self.WEIGHTS)
        for key, value in (weights or {}).items():
            if key not in self.WEIGHTS:
                raise ValueError(f"Unknown scoring weight '{key}'")
            self.weights[key] = Decimal(str(value))
        self.strict_numerics = (
            settings.SCORE_STRICT_NUMERICS if strict_numerics is None else strict_numerics
        )

    def score(
        self,
        activities: Sequence[ActivityItem | Mapping[str, Any]],
        window_days: int,
        user_id: str = "",
    ) -> ScoreResult:
        """
        Compute the fragmentation score for one user's activity window.

        Args:
            activities: Every activity for this user in the window, in any order.
                Raw mappings in wire shape are validated first
            window_days: Window length in days, scales the density threshold
            user_id: Echoed on the result; activities are never filtered by it

        Returns:
            ScoreResult with a one-decimal score in [0.0, 5.0]

        Raises:
            InvalidInputError: window_days is not a positive integer, or an activity
                record is malformed
            ComputationAnomalyError: the score is non-finite and strict mode is on
        """
        self._validate_window(window_days, user_id)
        activities = parse_activities(activities)

        if not activities:
            return ScoreResult(
                user_id=user_id,
                fragmentation_score=0.0,
                summary=NO_ACTIVITY_SUMMARY,
                risk_level="Low",
                activities_count=0,
            )

        # sorted() is stable: equal timestamps keep their input order
        ordered = sorted(activities, key=lambda activity: activity.timestamp)

        try:
            raw, factors = self._accumulate(ordered, window_days)
        except InvalidOperation:
            raw, factors = Decimal("NaN"), None

        if factors is None or not raw.is_finite():
            return self._non_finite_result(user_id, len(activities), raw)

        # Floor precedes clamp and rounding
        if self._round(raw) == 0:
            raw = self.FLOOR_SCORE

        final = float(self._round(min(self.MAX_SCORE, max(self.MIN_SCORE, raw))))
        risk_level = classify_risk(final)
        summary = self._build_summary(final, risk_level, factors)

        logger.debug(
            "Fragmentation score computed",
            user_id=user_id,
            activities_count=len(activities),
            score=final,
            risk_level=risk_level,
        )

        return ScoreResult(
            user_id=user_id,
            fragmentation_score=final,
            summary=summary,
            risk_level=risk_level,
            activities_count=len(activities),
        )

    def _validate_window(self, window_days: int, user_id: str) -> None:
        if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days < 1:
            raise InvalidInputError(
                f"window_days must be a positive integer, got {window_days!r}",
                user_id=user_id or None,
                field="window_days",
            )

    def _accumulate(
        self, ordered: list[ActivityItem], window_days: int
    ) -> tuple[Decimal, ContributingFactors]:
        total = Decimal("0.0")
        factors = ContributingFactors()
        previous: ActivityItem | None = None

        for activity in ordered:
            if activity.is_meeting:
                total += self.weights["meeting"]
                factors.meetings += 1

            if activity.is_issue_update:
                total += self.weights["issue_update"]
                factors.issue_updates += 1

            if previous is not None:
                if activity.source != previous.source:
                    total += self.weights["source_switch"]
                    factors.source_switches += 1
                # previous is never a presence update
                elif activity.type != previous.type and not activity.is_presence_update:
                    total += self.weights["type_switch"]
                    factors.type_switches += 1

            if not activity.is_presence_update:
                previous = activity

        factors.distinct_sources = len({activity.source for activity in ordered})
        if factors.distinct_sources >= self.MULTI_PLATFORM_MIN_SOURCES:
            total += self.weights["multi_platform"]
            factors.multi_platform = True

        if len(ordered) > self.DENSITY_THRESHOLD_PER_DAY * window_days:
            total += self.weights["density"]
            factors.high_density = True

        return total, factors

    def _non_finite_result(self, user_id: str, count: int, raw: Decimal) -> ScoreResult:
        if self.strict_numerics:
            raise ComputationAnomalyError(
                f"Fragmentation score is not finite ({raw})", user_id=user_id or None
            )

        fallback = (
            settings.SCORE_FALLBACK_WITH_ACTIVITY if count else settings.SCORE_FALLBACK_NO_ACTIVITY
        )
        final = float(self._round(min(self.MAX_SCORE, max(self.MIN_SCORE, Decimal(str(fallback))))))
        risk_level = classify_risk(final)
        logger.warning(
            "Non-finite fragmentation score replaced with fallback",
            user_id=user_id,
            activities_count=count,
            fallback=final,
        )
        return ScoreResult(
            user_id=user_id,
            fragmentation_score=final,
            summary=(
                f"Score of {final} ({risk_level}). "
                "Fallback score applied because the computation did not produce a finite value."
            ),
            risk_level=risk_level,
            activities_count=count,
        )

    def _build_summary(self, final: float, risk_level: str, factors: ContributingFactors) -> str:
        parts = factors.narrative()
        if not parts:
            if final <= self.LOW_ACTIVITY_CEILING:
                parts = ["low overall activity levels"]
            else:
                parts = ["general activity patterns"]
        return f"Score of {final} ({risk_level}). Key factors: {', '.join(parts)}."

    @staticmethod
    def _round(value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


scoring_service = ScoringService()
