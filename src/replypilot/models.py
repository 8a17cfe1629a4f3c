"""Summary: Domain model dataclasses for ReplyPilot.

Importance: Defines the core entities shared across matching, metrics, and insights.
Alternatives: Use Pydantic models or ORM classes directly.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum


class Direction(str, Enum):
    """Summary: Direction of a message relative to the account owner."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


class MatchingMethod(str, Enum):
    """Summary: How an outbound reply was paired with its inbound message."""

    TIME_WINDOW = "time_window"
    THREAD_ID = "thread_id"


class Platform(str, Enum):
    """Summary: Messaging platforms that can supply events.

    Importance: Drives platform filters across metrics and goals.
    Alternatives: Accept arbitrary platform strings.
    """

    GMAIL = "gmail"
    OUTLOOK = "outlook"
    SLACK = "slack"
    IMESSAGE = "imessage"

    @property
    def display_name(self) -> str:
        return {
            Platform.GMAIL: "Gmail",
            Platform.OUTLOOK: "Outlook",
            Platform.SLACK: "Slack",
            Platform.IMESSAGE: "iMessage",
        }[self]


class InsightType(str, Enum):
    """Summary: Category of an emitted insight."""

    TREND = "trend"
    PATTERN = "pattern"
    ACHIEVEMENT = "achievement"
    WARNING = "warning"
    ANOMALY = "anomaly"
    RECOMMENDATION = "recommendation"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    FLAT = "flat"
    DECLINING = "declining"


@dataclass(frozen=True)
class MessageEvent:
    """Summary: One message observed in a conversation.

    Importance: Core unit consumed by the response matcher.
    Alternatives: Match directly on raw provider payloads.
    """

    id: str
    timestamp: datetime
    direction: Direction
    participant_id: str
    conversation_id: str
    excluded: bool = False


@dataclass(frozen=True)
class Conversation:
    """Summary: Thread container holding timestamp-ordered events.

    Importance: Matching is scoped to a single conversation.
    Alternatives: Keep a flat event stream keyed by thread identifiers.
    """

    id: str
    platform: Platform
    subject: str | None = None
    events: tuple[MessageEvent, ...] = ()

    def with_events(self, new_events: list[MessageEvent]) -> "Conversation":
        """Summary: Return a copy with new events appended in timestamp order.

        Importance: Supports incremental syncs without mutating shared snapshots.
        Alternatives: Mutate the event list in place.
        """

        known = {event.id for event in self.events}
        merged = list(self.events) + [event for event in new_events if event.id not in known]
        merged.sort(key=lambda event: (event.timestamp, event.id))
        return Conversation(
            id=self.id, platform=self.platform, subject=self.subject, events=tuple(merged)
        )


@dataclass(frozen=True)
class ResponseWindow:
    """Summary: A matched inbound/outbound pair with derived latency fields.

    Importance: Every metric, insight, and streak is computed from windows.
    Alternatives: Recompute pairs on every metrics request.
    """

    inbound_event_id: str
    outbound_event_id: str | None
    conversation_id: str
    platform: Platform | None
    participant_id: str
    inbound_timestamp: datetime
    latency_seconds: float
    confidence: float
    matching_method: MatchingMethod
    day_of_week: int
    hour_of_day: int
    is_working_hours: bool
    is_valid_for_analytics: bool

    @property
    def id(self) -> str:
        return self.inbound_event_id


@dataclass(frozen=True)
class PendingResponse:
    """Summary: An inbound event still awaiting a reply.

    Importance: Feeds "awaiting reply" lists outside the window collection.
    Alternatives: Store pending rows as windows with no outbound event.
    """

    inbound_event_id: str
    conversation_id: str
    platform: Platform | None
    participant_id: str
    received_at: datetime
    waiting_seconds: float


@dataclass(frozen=True)
class TimeRange:
    """Summary: Explicit analytics period with an inclusive start and end.

    Importance: Anchors every aggregation and trend comparison to a caller-supplied now.
    Alternatives: Read the wall clock inside each computation.
    """

    start: datetime
    end: datetime
    name: str = "custom"

    PRESETS = ("today", "week", "month", "quarter", "year")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def label(self) -> str:
        return {
            "today": "today",
            "week": "the past week",
            "month": "the past month",
            "quarter": "the past quarter",
            "year": "the past year",
        }.get(self.name, "the selected period")

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def previous(self) -> "TimeRange":
        """Summary: Return the immediately preceding range of equal length.

        Importance: Used for period-over-period trend comparisons.
        Alternatives: Use calendar-aligned previous periods.
        """

        return TimeRange(start=self.start - self.duration, end=self.start, name=f"previous_{self.name}")

    def days(self) -> list[date]:
        """Summary: List every calendar day touched by the range."""

        current = self.start.date()
        days: list[date] = []
        while current <= self.end.date():
            days.append(current)
            current += timedelta(days=1)
        return days

    @classmethod
    def preset(cls, name: str, now: datetime) -> "TimeRange":
        """Summary: Build a named range ending at now.

        Importance: Mirrors the today/week/month/quarter/year selector used by consumers.
        Alternatives: Require callers to compute explicit boundaries.
        """

        if name == "today":
            start = datetime.combine(now.date(), datetime.min.time(), tzinfo=now.tzinfo)
        elif name == "week":
            start = now - timedelta(days=7)
        elif name == "month":
            start = _shift_months(now, -1)
        elif name == "quarter":
            start = _shift_months(now, -3)
        elif name == "year":
            start = _shift_months(now, -12)
        else:
            raise ValueError(f"Unknown time range: {name}")
        return cls(start=start, end=now, name=name)


def _shift_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class ResponseMetrics:
    """Summary: Aggregate latency snapshot for a platform filter and time range.

    Importance: Primary dashboard payload; recomputed on demand.
    Alternatives: Persist rolled-up metrics per period.
    """

    platform: Platform | None
    time_range: TimeRange
    sample_count: int
    median_latency: float
    mean_latency: float
    p90_latency: float
    p95_latency: float
    min_latency: float
    max_latency: float
    working_hours_median: float | None = None
    non_working_hours_median: float | None = None
    previous_period_median: float | None = None
    trend_percentage: float | None = None

    @property
    def trend_direction(self) -> TrendDirection:
        if self.trend_percentage is None:
            return TrendDirection.FLAT
        if self.trend_percentage < -5:
            return TrendDirection.IMPROVING
        if self.trend_percentage > 5:
            return TrendDirection.DECLINING
        return TrendDirection.FLAT


@dataclass(frozen=True)
class DailyMetrics:
    day: date
    median_latency: float
    mean_latency: float
    response_count: int
    message_count: int


@dataclass(frozen=True)
class HourlyMetrics:
    hour: int
    median_latency: float
    mean_latency: float
    response_count: int
    message_count: int


@dataclass(frozen=True)
class PlatformMetrics:
    """Summary: Per-platform breakdown with optional goal progress."""

    platform: Platform | None
    median_latency: float
    sample_count: int
    goal_progress: float | None


@dataclass(frozen=True)
class Insight:
    """Summary: One human-readable finding mined from response windows.

    Importance: Surfaces patterns users can act on.
    Alternatives: Show raw charts only.
    """

    type: InsightType
    title: str
    description: str
    confidence: float
    data_points: int
    actionable: str | None = None


@dataclass(frozen=True)
class ResponseGoal:
    """Summary: User target latency with streak bookkeeping.

    Importance: Goals drive streak evaluation and platform progress.
    Alternatives: Keep a single global target without streaks.
    """

    target_latency_seconds: float
    platform: Platform | None = None
    enabled: bool = True
    current_streak: int = 0
    longest_streak: int = 0
    last_streak_date: date | None = None


@dataclass(frozen=True)
class DayResult:
    day: date
    response_count: int
    met_target: bool


@dataclass(frozen=True)
class StreakState:
    """Summary: Day-level goal compliance with current and best streaks."""

    target_latency_seconds: float
    current_streak: int
    longest_streak: int
    last_qualifying_day: date | None
    days: tuple[DayResult, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ResponseScore:
    """Summary: Composite 0-100 responsiveness score with a letter grade."""

    overall: int
    speed_score: int
    consistency_score: int
    coverage_score: int
    grade: str
