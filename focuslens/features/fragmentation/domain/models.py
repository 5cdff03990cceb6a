"""
Domain models for the fragmentation feature.

Activity records come in from collaborators, results go back out. Every
model serializes to camelCase JSON (``model_dump(by_alias=True)``) and
accepts either the camelCase or the snake_case name on input.
"""

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

ActivitySource = Literal["teams", "jira", "m365", "other"]
JiraStatusCategory = Literal["new", "indeterminate", "done"]
RiskLevel = Literal["Low", "Moderate", "High"]

MEETING_TYPE = "teams_meeting"
PRESENCE_UPDATE_TYPE = "teams_presence_update"
ISSUE_UPDATE_PREFIX = "jira_issue"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActivityItem(_WireModel):
    """
    One externally supplied activity record for a single user.

    Constructing the model directly raises pydantic's ValidationError on a
    malformed record. parse_activities (and ScoringService.score, which calls it)
    reports the same failure as InvalidInputError.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    type: str
    timestamp: datetime
    source: ActivitySource
    details: str | None = None
    duration_minutes: float | None = Field(default=None, ge=0)
    jira_status_category_key: JiraStatusCategory | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive and aware timestamps must stay comparable when sorted together
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def is_meeting(self) -> bool:
        return self.type == MEETING_TYPE

    @property
    def is_presence_update(self) -> bool:
        return self.type == PRESENCE_UPDATE_TYPE

    @property
    def is_issue_update(self) -> bool:
        return self.source == "jira" and self.type.startswith(ISSUE_UPDATE_PREFIX)

    @property
    def is_completed_issue(self) -> bool:
        return self.is_issue_update and self.jira_status_category_key == "done"


class ScoreResult(_WireModel):
    """Fragmentation score for one user over one window."""

    user_id: str
    fragmentation_score: float = Field(ge=0.0, le=5.0)
    summary: str
    risk_level: RiskLevel
    activities_count: int = Field(ge=0)


class HistoricalScore(_WireModel):
    """One day of a user's score trend."""

    date: date
    score: float
    risk_level: RiskLevel
    summary: str

    @field_serializer("date")
    def _serialize_date(self, value: date) -> str:
        return value.isoformat()


class AnomalyResult(_WireModel):
    is_anomaly: bool
    anomaly_index: int | None = None
    message: str


class ActivityWindow(_WireModel):
    """Half-open time range ``[start, end)`` that one scoring call covers."""

    day: date
    start: datetime
    end: datetime
    window_days: int = Field(default=1, ge=1)
    is_partial: bool = False

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


class TrendResult(_WireModel):
    """Per-day score history for a date range, with averages and any partial-data warning."""

    user_id: str
    start_date: date
    end_date: date
    history: list[HistoricalScore]
    average_score: float | None = None
    rolling_average: list[float] = Field(default_factory=list)
    failed_days: list[date] = Field(default_factory=list)
    warning: str | None = None

    @property
    def scores(self) -> list[float]:
        return [entry.score for entry in self.history]


class ActivityMetrics(_WireModel):
    """Reporting counters derived from an activity set. Not part of the score."""

    activities_count: int
    meeting_count: int
    total_meeting_minutes: float
    issue_update_count: int
    completed_issue_count: int
    presence_update_count: int
    sources: list[str]


class TeamMemberScore(_WireModel):
    user_id: str
    result: ScoreResult | None = None
    error: str | None = None


class TeamOverview(_WireModel):
    members: list[TeamMemberScore]
    stable: int = 0
    at_risk: int = 0
    overloaded: int = 0
    warning: str | None = None
