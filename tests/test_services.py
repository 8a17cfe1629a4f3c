"""Summary: Tests for the application services.

Importance: Services compose matching, storage, and analytics for every entrypoint.
Alternatives: Test only through the API layer.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path

from replypilot.app import AppServices, build_services, load_fixture
from replypilot.config import AnalyticsSettings, AppConfig
from replypilot.models import Conversation, Direction, MessageEvent, Platform, ResponseGoal, TimeRange

BASE = datetime(2026, 1, 5, 10, 0)
SAMPLE = Path(__file__).resolve().parents[1] / "data" / "sample_events.json"


def _build_services() -> AppServices:
    """Summary: Build services against an explicit configuration.

    Importance: Keeps tests independent of environment variables.
    Alternatives: Load AppConfig from the environment.
    """

    config = AppConfig(
        events_path=str(SAMPLE),
        api_host="127.0.0.1",
        api_port=8000,
        api_key="",
        analytics=AnalyticsSettings(),
    )
    return build_services(config)


def _event(event_id: str, minutes: int, direction: Direction) -> MessageEvent:
    return MessageEvent(event_id, BASE + timedelta(minutes=minutes), direction, "alex@example.com", "conv-1")


def _conversation(*events: MessageEvent) -> Conversation:
    return Conversation(id="conv-1", platform=Platform.SLACK, events=tuple(events))


def test_resync_is_idempotent_and_incremental() -> None:
    """Summary: Verify repeated syncs never duplicate windows.

    Importance: Connectors resend overlapping snapshots.
    Alternatives: Deduplicate windows downstream.
    """

    services = _build_services()
    first = _conversation(_event("in-1", 0, Direction.INBOUND), _event("out-1", 30, Direction.OUTBOUND))
    assert services.sync.sync_conversation(first).new_windows == 1
    assert services.sync.sync_conversation(first).new_windows == 0

    grown = _conversation(_event("in-2", 60, Direction.INBOUND))
    summary = services.sync.sync_conversation(grown)
    assert summary.new_windows == 0
    assert summary.pending == 1

    answered = _conversation(_event("out-2", 75, Direction.OUTBOUND))
    summary = services.sync.sync_conversation(answered)
    assert summary.new_windows == 1
    assert summary.pending == 0
    assert [window.latency_seconds for window in services.analytics.windows("conv-1")] == [1800, 900]


def test_rebuild_recomputes_same_windows() -> None:
    """Summary: Verify rebuilding from stored conversations reproduces the window set."""

    services = _build_services()
    load_fixture(services)
    before = services.analytics.windows()
    services.sync.rebuild()
    assert services.analytics.windows() == before


def test_sample_fixture_end_to_end() -> None:
    """Summary: Verify metrics, pending, and platform breakdowns over the sample data.

    Importance: Exercises the whole pipeline the CLI uses.
    Alternatives: Only unit test components.
    """

    services = _build_services()
    added = load_fixture(services)
    assert added == 9
    now = datetime(2026, 1, 10, 12, 0)
    time_range = TimeRange.preset("week", now)

    pending = services.analytics.pending(now)
    assert [response.inbound_event_id for response in pending] == ["g2-in-2"]
    assert pending[0].platform == Platform.GMAIL
    assert pending[0].conversation_id == "gmail-thread-2"
    assert pending[0].received_at == datetime(2026, 1, 9, 11, 0)
    assert pending[0].waiting_seconds == 25 * 3600

    metrics = services.analytics.metrics(None, time_range)
    assert metrics.sample_count == 8
    slack = services.analytics.metrics(Platform.SLACK, time_range)
    assert slack.median_latency == 240

    platforms = services.analytics.platforms(time_range, [ResponseGoal(target_latency_seconds=3600)])
    assert {entry.platform for entry in platforms} == {Platform.GMAIL, Platform.OUTLOOK, Platform.SLACK}
    assert all(entry.goal_progress is not None for entry in platforms)

    assert len(services.analytics.hourly(None, time_range)) == 24
    assert len(services.analytics.daily(None, time_range)) == 8
    assert services.insights.insights(time_range)[-1].title == "Tracking 8 Responses"
    assert services.analytics.score(None, time_range).grade != "--"


def test_goal_streak_through_service() -> None:
    """Summary: Verify the goal service evaluates streaks over stored windows."""

    services = _build_services()
    load_fixture(services)
    state = services.goals.streak([ResponseGoal(target_latency_seconds=3 * 3600)], date(2026, 1, 8))
    assert state.target_latency_seconds == 3 * 3600
    assert state.current_streak == 2
    assert state.longest_streak == 2
    rolled = services.goals.roll_forward(ResponseGoal(target_latency_seconds=3 * 3600), date(2026, 1, 8))
    assert rolled.current_streak == 2
    assert rolled.last_streak_date == date(2026, 1, 8)
