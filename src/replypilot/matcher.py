"""Summary: Response matching between inbound messages and their replies.

Importance: Produces the response windows every downstream metric depends on.
Alternatives: Rely on provider thread headers such as In-Reply-To only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from replypilot.confidence import is_valid_for_analytics, score_confidence
from replypilot.config import AnalyticsSettings
from replypilot.models import (
    Conversation,
    Direction,
    MatchingMethod,
    MessageEvent,
    PendingResponse,
    Platform,
    ResponseWindow,
)


logger = logging.getLogger(__name__)


def day_of_week(moment: datetime) -> int:
    """Summary: Weekday number with 1=Sunday through 7=Saturday."""

    return moment.isoweekday() % 7 + 1


def is_working_hours(moment: datetime, settings: AnalyticsSettings) -> bool:
    """Summary: Check whether a timestamp falls inside the configured working band.

    Importance: Splits metrics into on-hours and off-hours cohorts.
    Alternatives: Store a per-user list of working intervals.
    """

    if settings.exclude_weekends and day_of_week(moment) in (1, 7):
        return False
    return settings.working_hours_start <= moment.hour < settings.working_hours_end


def build_window(
    inbound: MessageEvent,
    outbound: MessageEvent,
    platform: Platform | None,
    settings: AnalyticsSettings,
    method: MatchingMethod = MatchingMethod.TIME_WINDOW,
) -> ResponseWindow:
    """Summary: Create a window with confidence and time metadata computed up front.

    Importance: Keeps windows read-only after creation.
    Alternatives: Derive weekday and hour lazily on every query.
    """

    latency = (outbound.timestamp - inbound.timestamp).total_seconds()
    confidence = score_confidence(latency, method)
    return ResponseWindow(
        inbound_event_id=inbound.id,
        outbound_event_id=outbound.id,
        conversation_id=inbound.conversation_id,
        platform=platform,
        participant_id=inbound.participant_id,
        inbound_timestamp=inbound.timestamp,
        latency_seconds=latency,
        confidence=confidence,
        matching_method=method,
        day_of_week=day_of_week(inbound.timestamp),
        hour_of_day=inbound.timestamp.hour,
        is_working_hours=is_working_hours(inbound.timestamp, settings),
        is_valid_for_analytics=is_valid_for_analytics(confidence, settings.confidence_threshold),
    )


@dataclass(frozen=True)
class MatchResult:
    """Summary: Windows produced by one matching pass plus still-pending inbound events."""

    windows: tuple[ResponseWindow, ...]
    pending: tuple[MessageEvent, ...]

    def pending_responses(self, platform: Platform | None, now: datetime) -> list[PendingResponse]:
        return [pending_response(event, platform, now) for event in self.pending]


def pending_response(event: MessageEvent, platform: Platform | None, now: datetime) -> PendingResponse:
    """Summary: Describe an unanswered inbound event and how long it has waited."""

    return PendingResponse(
        inbound_event_id=event.id,
        conversation_id=event.conversation_id,
        platform=platform,
        participant_id=event.participant_id,
        received_at=event.timestamp,
        waiting_seconds=max((now - event.timestamp).total_seconds(), 0.0),
    )


@dataclass(frozen=True)
class ResponseMatcher:
    """Summary: Pairs each inbound event with the earliest unconsumed later reply.

    Importance: Deterministic, idempotent matching that supports incremental re-sync.
    Alternatives: Scan every outbound event for each inbound event.
    """

    settings: AnalyticsSettings

    def match(
        self,
        conversation: Conversation,
        matched_inbound_ids: Iterable[str] = (),
        consumed_outbound_ids: Iterable[str] = (),
    ) -> MatchResult:
        """Summary: Match a conversation's events into response windows.

        Importance: Each inbound maps to at most one window and each reply is consumed once.
        Alternatives: Allow one reply to answer several inbound messages.

        Events already recorded in ``matched_inbound_ids`` or ``consumed_outbound_ids``
        from an earlier pass are skipped, so re-running after new events arrive only
        produces windows for the newly matchable inbound events.
        """

        already_matched = set(matched_inbound_ids)
        consumed = set(consumed_outbound_ids)
        ordered = sorted(
            (event for event in conversation.events if not event.excluded),
            key=lambda event: (event.timestamp, event.id),
        )
        inbound = [
            event
            for event in ordered
            if event.direction == Direction.INBOUND and event.id not in already_matched
        ]
        outbound = [
            event
            for event in ordered
            if event.direction == Direction.OUTBOUND and event.id not in consumed
        ]
        horizon = timedelta(days=self.settings.matching_window_days)

        windows: list[ResponseWindow] = []
        pending: list[MessageEvent] = []
        cursor = 0
        for event in inbound:
            # Replies at or before this inbound can never answer a later inbound either.
            while cursor < len(outbound) and outbound[cursor].timestamp <= event.timestamp:
                cursor += 1
            if cursor >= len(outbound):
                pending.append(event)
                continue
            candidate = outbound[cursor]
            if candidate.timestamp - event.timestamp > horizon:
                pending.append(event)
                continue
            window = build_window(event, candidate, conversation.platform, self.settings)
            cursor += 1
            if window.latency_seconds <= 0:
                logger.debug("Discarded non-positive latency for inbound %s.", event.id)
                pending.append(event)
                continue
            windows.append(window)

        logger.debug(
            "Conversation %s: %s windows, %s pending.", conversation.id, len(windows), len(pending)
        )
        return MatchResult(windows=tuple(windows), pending=tuple(pending))

    def match_all(self, conversations: Iterable[Conversation]) -> list[ResponseWindow]:
        """Summary: Match independent conversations and return the aggregate window set."""

        windows: list[ResponseWindow] = []
        for conversation in conversations:
            windows.extend(self.match(conversation).windows)
        return windows
