"""Summary: Core application services for ReplyPilot.

Importance: Orchestrates syncing, matching, aggregation, insights, and goals.
Alternatives: Build a full service layer with dependency injection framework.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

from replypilot.config import AnalyticsSettings
from replypilot.insights import InsightGenerator
from replypilot.matcher import MatchResult, ResponseMatcher, pending_response
from replypilot.metrics import (
    compute_daily_metrics,
    compute_hourly_metrics,
    compute_metrics,
    compute_platform_metrics,
    filter_windows,
)
from replypilot.models import (
    Conversation,
    DailyMetrics,
    HourlyMetrics,
    Insight,
    PendingResponse,
    Platform,
    PlatformMetrics,
    ResponseGoal,
    ResponseMetrics,
    ResponseScore,
    ResponseWindow,
    StreakState,
    TimeRange,
)
from replypilot.repository import InMemoryRepository
from replypilot.scoring import compute_score
from replypilot.sources import EventSource
from replypilot.streaks import effective_target, evaluate_streak, roll_forward


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncSummary:
    """Summary: Outcome of matching one conversation snapshot."""

    conversation_id: str
    new_windows: int
    pending: int


@dataclass(frozen=True)
class SyncService:
    """Summary: Feeds conversation snapshots through the matcher into the repository.

    Importance: Owns the matched-inbound ledger so re-syncs never duplicate windows.
    Alternatives: Recompute every window from scratch on each sync.
    """

    repository: InMemoryRepository
    matcher: ResponseMatcher

    def sync_conversation(self, conversation: Conversation) -> SyncSummary:
        """Summary: Merge a snapshot and match only events not matched before.

        Importance: Supports incremental re-sync of growing conversations.
        Alternatives: Delete and rebuild the conversation's windows.
        """

        merged = self.repository.upsert_conversation(conversation)
        result: MatchResult = self.matcher.match(
            merged,
            matched_inbound_ids=self.repository.matched_inbound_ids(merged.id),
            consumed_outbound_ids=self.repository.consumed_outbound_ids(merged.id),
        )
        added = self.repository.save_windows(result.windows)
        self.repository.replace_pending(merged.id, result.pending)
        logger.info(
            "Synced conversation %s: %s new windows, %s pending.", merged.id, added, len(result.pending)
        )
        return SyncSummary(conversation_id=merged.id, new_windows=added, pending=len(result.pending))

    def sync_source(self, source: EventSource) -> list[SyncSummary]:
        """Summary: Sync every conversation supplied by an event source."""

        summaries = [self.sync_conversation(conversation) for conversation in source.load_conversations()]
        logger.info("Synced %s conversations.", len(summaries))
        return summaries

    def rebuild(self) -> list[SyncSummary]:
        """Summary: Reset analytics and rematch every stored conversation."""

        self.repository.reset_windows()
        return [self.sync_conversation(conversation) for conversation in self.repository.list_conversations()]


@dataclass(frozen=True)
class AnalyticsService:
    """Summary: Pull-model access to metrics over the current window snapshot.

    Importance: Callers fetch on demand; nothing recomputes behind their back.
    Alternatives: Observe the repository and push recomputed metrics.
    """

    repository: InMemoryRepository
    settings: AnalyticsSettings

    def windows(self, conversation_id: str | None = None) -> list[ResponseWindow]:
        return self.repository.list_windows(conversation_id)

    def metrics(self, platform: Platform | None, time_range: TimeRange) -> ResponseMetrics:
        return compute_metrics(self.repository.list_windows(), platform, time_range)

    def daily(self, platform: Platform | None, time_range: TimeRange) -> list[DailyMetrics]:
        return compute_daily_metrics(self.repository.list_windows(), platform, time_range)

    def hourly(self, platform: Platform | None, time_range: TimeRange | None) -> list[HourlyMetrics]:
        return compute_hourly_metrics(self.repository.list_windows(), platform, time_range)

    def platforms(self, time_range: TimeRange, goals: Sequence[ResponseGoal] = ()) -> list[PlatformMetrics]:
        return compute_platform_metrics(self.repository.list_windows(), time_range, goals)

    def pending(self, now: datetime, platform: Platform | None = None) -> list[PendingResponse]:
        """Summary: List inbound messages still awaiting a reply, longest wait first.

        Importance: Feeds "awaiting reply" lists without polluting the window set.
        Alternatives: Store placeholder windows for unanswered messages.
        """

        responses = [
            pending_response(event, self.repository.platform_for(conversation_id), now)
            for conversation_id, event in self.repository.list_pending()
        ]
        if platform is not None:
            responses = [response for response in responses if response.platform == platform]
        return sorted(responses, key=lambda response: (-response.waiting_seconds, response.inbound_event_id))

    def score(
        self,
        platform: Platform | None,
        time_range: TimeRange,
        target_latency_seconds: float | None = None,
    ) -> ResponseScore:
        target = target_latency_seconds or self.settings.default_goal_seconds
        windows = filter_windows(self.repository.list_windows(), platform, time_range)
        return compute_score(windows, target)


@dataclass(frozen=True)
class InsightService:
    """Summary: Generates insights for a platform filter and time range."""

    repository: InMemoryRepository
    generator: InsightGenerator

    def insights(
        self,
        time_range: TimeRange,
        platform: Platform | None = None,
        minimum_sample_size: int | None = None,
    ) -> list[Insight]:
        windows = filter_windows(self.repository.list_windows(), platform, time_range)
        return self.generator.generate(windows, time_range, minimum_sample_size)


@dataclass(frozen=True)
class GoalService:
    """Summary: Evaluates streaks and rolls goal bookkeeping forward.

    Importance: Keeps streak state derived from real windows only.
    Alternatives: Let the UI maintain streak counters.
    """

    repository: InMemoryRepository
    settings: AnalyticsSettings

    def streak(self, goals: Sequence[ResponseGoal], today: date, platform: Platform | None = None) -> StreakState:
        """Summary: Evaluate a streak against the strictest enabled goal."""

        target = effective_target(goals, self.settings.default_goal_seconds)
        windows = filter_windows(self.repository.list_windows(), platform)
        return evaluate_streak(windows, target, today)

    def roll_forward(self, goal: ResponseGoal, today: date) -> ResponseGoal:
        return roll_forward(goal, filter_windows(self.repository.list_windows()), today)
