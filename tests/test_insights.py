"""Summary: Tests for insight generation.

Importance: Insights are the user-facing explanation of response patterns.
Alternatives: Review generated insights manually on sample data.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from replypilot.config import AnalyticsSettings
from replypilot.formatting import format_hour
from replypilot.insights import InsightGenerator, generate_insights
from replypilot.matcher import build_window
from replypilot.models import (
    Direction,
    InsightType,
    MessageEvent,
    Platform,
    ResponseWindow,
    TimeRange,
)

SETTINGS = AnalyticsSettings()
ROOMY = InsightGenerator(AnalyticsSettings(max_insights=12))
MONDAY = datetime(2025, 12, 1, 10, 0)


def _window(
    inbound_at: datetime,
    latency: float,
    participant: str = "alex@example.com",
    platform: Platform = Platform.GMAIL,
) -> ResponseWindow:
    """Summary: Build a window for a given inbound time and latency.

    Importance: Reuses production window construction in tests.
    Alternatives: Hand-fill every ResponseWindow field.
    """

    key = f"{inbound_at.isoformat()}-{participant}"
    inbound = MessageEvent(f"in-{key}", inbound_at, Direction.INBOUND, participant, "conv")
    outbound = MessageEvent(
        f"out-{key}", inbound_at + timedelta(seconds=latency), Direction.OUTBOUND, "me", "conv"
    )
    return build_window(inbound, outbound, platform, SETTINGS)


def _range_ending(end: datetime) -> TimeRange:
    return TimeRange(start=end - timedelta(days=90), end=end, name="quarter")


def _titles(insights: list) -> list[str]:
    return [insight.title for insight in insights]


def test_empty_input_returns_getting_started() -> None:
    """Summary: Verify empty data yields the onboarding insight only.

    Importance: New users see guidance instead of an empty panel.
    Alternatives: Return an empty list.
    """

    insights = InsightGenerator(SETTINGS).generate([], _range_ending(MONDAY))
    assert _titles(insights) == ["Getting Started"]
    assert insights[0].type == InsightType.RECOMMENDATION
    assert insights[0].data_points == 0


def test_below_minimum_sample_returns_getting_started() -> None:
    """Summary: Verify fewer windows than the minimum skip the detectors."""

    windows = [_window(MONDAY + timedelta(hours=index), 600) for index in range(3)]
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=1)))
    assert _titles(insights) == ["Getting Started"]
    relaxed = InsightGenerator(SETTINGS).generate(
        windows, _range_ending(MONDAY + timedelta(days=1)), minimum_sample_size=1
    )
    assert relaxed[-1].title == "Tracking 3 Responses"


def test_fastest_day_of_week_detected() -> None:
    """Summary: Verify faster Monday replies produce a Monday pattern insight.

    Importance: Day-of-week habits are a headline finding.
    Alternatives: Show a weekday chart without commentary.
    """

    windows = []
    for day in range(28):
        moment = MONDAY + timedelta(days=day)
        weekday = moment.weekday()
        latency = 900 if weekday == 0 else 5400 if weekday == 4 else 2700
        for slot in range(3):
            windows.append(_window(moment + timedelta(minutes=5 * slot), latency))
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=28)))
    monday = [insight for insight in insights if "Monday" in insight.title]
    assert len(monday) == 1
    assert monday[0].type == InsightType.PATTERN
    assert monday[0].title == "You respond 6.0x faster on Mondays"
    assert "Fri" in monday[0].description


def test_off_hours_slowdown_warning() -> None:
    """Summary: Verify slower off-hours replies produce a warning."""

    windows = []
    for day in range(14):
        moment = MONDAY + timedelta(days=day)
        if moment.weekday() >= 5:
            continue
        windows.append(_window(moment, 1200))
        windows.append(_window(moment.replace(hour=20), 7200))
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=14)))
    warning = [insight for insight in insights if insight.title == "Off-Hours Significantly Slower"]
    assert len(warning) == 1
    assert warning[0].type == InsightType.WARNING
    assert "6.0x slower" in warning[0].description


def test_vip_contact_detected() -> None:
    """Summary: Verify a contact answered far faster than others is called out."""

    windows = []
    for day in range(10):
        moment = MONDAY + timedelta(days=day)
        windows.append(_window(moment, 600, participant="vip@example.com"))
        other = "other1@example.com" if day % 2 else "other2@example.com"
        windows.append(_window(moment + timedelta(hours=1), 3600, participant=other))
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=10)))
    vip = [insight for insight in insights if insight.title.startswith("VIP Contact")]
    assert _titles(vip) == ["VIP Contact: vip"]
    assert vip[0].data_points == 10


def test_exceptional_day_anomaly() -> None:
    """Summary: Verify a much faster recent day is flagged as an anomaly.

    Importance: Highlights days worth replicating.
    Alternatives: Only report averages.
    """

    windows = []
    for day in range(11):
        latency = 600 if day == 10 else 3000
        for slot in range(5):
            windows.append(_window(MONDAY + timedelta(days=day, minutes=slot), latency))
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=11)))
    anomaly = [insight for insight in insights if insight.type == InsightType.ANOMALY]
    assert _titles(anomaly) == ["Exceptional Performance Detected"]
    assert "Dec 11, 2025" in anomaly[0].description


def test_unusual_delay_anomaly() -> None:
    """Summary: Verify a much slower recent day is flagged as a delay."""

    windows = []
    for day in range(11):
        latency = 9000 if day == 10 else 3000
        for slot in range(5):
            windows.append(_window(MONDAY + timedelta(days=day, minutes=slot), latency))
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=11)))
    assert "Unusual Delay Detected" in _titles(insights)


def test_slow_responder_recommendation() -> None:
    """Summary: Verify a median above four hours suggests improvement."""

    windows = [_window(MONDAY + timedelta(hours=6 * index), 18000) for index in range(10)]
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=3)))
    slow = [insight for insight in insights if insight.title == "Slow Responder: Room for Improvement"]
    assert len(slow) == 1
    assert slow[0].type == InsightType.RECOMMENDATION
    assert slow[0].actionable


def test_lightning_fast_responder() -> None:
    """Summary: Verify mostly sub-30-minute replies earn an achievement."""

    windows = [_window(MONDAY + timedelta(hours=3 * index), 600) for index in range(10)]
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=2)))
    assert "Lightning Fast Responder" in _titles(insights)


def test_improving_trend_detected() -> None:
    """Summary: Verify steadily falling latencies report improvement.

    Importance: Users see when habits are working.
    Alternatives: Only compare against all-time averages.
    """

    windows = []
    for day in range(14):
        latency = 3600 - 200 * day
        for slot in range(3):
            windows.append(_window(MONDAY + timedelta(days=day, minutes=10 * slot), latency))
    now = MONDAY + timedelta(days=13, hours=1)
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(now))
    titles = _titles(insights)
    assert "Response Times Improving" in titles
    assert "On Track to Improve" in titles
    assert "Response Times Slowing Down" not in titles
    trend = [insight for insight in insights if insight.title == "Response Times Improving"]
    assert trend[0].type == InsightType.TREND


def test_consistent_responder_with_summary_last() -> None:
    """Summary: Verify tight spreads earn a consistency insight and the summary ends the list."""

    windows = [
        _window(MONDAY + timedelta(hours=6 * index), 1500 + (index % 5) * 150) for index in range(20)
    ]
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=5)))
    assert "Consistent Responder" in _titles(insights)
    assert insights[-1].title == "Tracking 20 Responses"
    assert insights[-1].type == InsightType.PATTERN
    assert insights[-1].confidence == 1.0


def test_insights_are_capped_and_ranked() -> None:
    """Summary: Verify random data never exceeds the cap and stays ranked.

    Importance: Consumers render a bounded list.
    Alternatives: Let callers truncate.
    """

    rng = random.Random(7)
    participants = ["a@example.com", "b@example.com", "c@example.com"]
    windows = [
        _window(
            MONDAY + timedelta(minutes=rng.randint(0, 60 * 24 * 20)),
            rng.randint(60, 20000),
            participant=rng.choice(participants),
            platform=rng.choice(list(Platform)),
        )
        for _ in range(100)
    ]
    end = _range_ending(MONDAY + timedelta(days=21))
    insights = InsightGenerator(SETTINGS).generate(windows, end)
    assert len(insights) <= SETTINGS.max_insights
    assert insights[-1].title.startswith("Tracking")
    ranked = [insight.confidence for insight in insights[:-1]]
    assert ranked == sorted(ranked, reverse=True)
    assert all(0.0 <= insight.confidence <= 1.0 for insight in insights)
    assert all(insight.data_points > 0 for insight in insights)
    assert InsightGenerator(SETTINGS).generate(windows, end) == insights

    tight = InsightGenerator(AnalyticsSettings(max_insights=2)).generate(windows, end)
    assert len(tight) <= 2
    assert tight[-1].title.startswith("Tracking")


def test_invalid_windows_are_ignored() -> None:
    """Summary: Verify low-confidence windows do not count toward insights."""

    windows = [_window(MONDAY + timedelta(hours=index), 600) for index in range(4)]
    windows.append(_window(MONDAY + timedelta(days=1), 80 * 3600))
    insights = InsightGenerator(SETTINGS).generate(windows, _range_ending(MONDAY + timedelta(days=5)))
    assert _titles(insights) == ["Getting Started"]


def test_generate_insights_function_defaults() -> None:
    """Summary: Verify the functional entry point matches the generator."""

    windows = [_window(MONDAY + timedelta(hours=3 * index), 600) for index in range(10)]
    time_range = _range_ending(MONDAY + timedelta(days=2))
    assert generate_insights(windows, time_range) == InsightGenerator(SETTINGS).generate(windows, time_range)
    assert _titles(generate_insights(windows, time_range, minimum_sample_size=20)) == ["Getting Started"]


def _projection_titles(insights: list) -> set[str]:
    return {"On Track to Improve", "Trending Slower"} & set(_titles(insights))


def test_peak_response_hour_detected() -> None:
    """Summary: Verify the fastest hour of day is reported against the overall median.

    Importance: Tells users when they are most responsive.
    Alternatives: Show an hourly chart without commentary.
    """

    windows = []
    for day in range(3):
        moment = MONDAY + timedelta(days=day)
        windows.append(_window(moment, 600))
        windows.append(_window(moment.replace(hour=14), 3600))
    insights = ROOMY.generate(windows, _range_ending(MONDAY + timedelta(days=3)))
    peak = [insight for insight in insights if insight.title.startswith("Peak Response Hour")]
    assert _titles(peak) == [f"Peak Response Hour: {format_hour(10)}"]
    assert peak[0].type == InsightType.ACHIEVEMENT
    assert peak[0].data_points == 3


def test_faster_off_hours_pattern() -> None:
    """Summary: Verify quicker evening replies produce an off-hours pattern."""

    windows = []
    for day in range(5):
        moment = MONDAY + timedelta(days=day)
        windows.append(_window(moment, 7200))
        windows.append(_window(moment.replace(hour=20), 1200))
    insights = ROOMY.generate(windows, _range_ending(MONDAY + timedelta(days=5)))
    faster = [insight for insight in insights if insight.title == "Faster Responses Off-Hours"]
    assert len(faster) == 1
    assert faster[0].type == InsightType.PATTERN
    assert faster[0].data_points == 10
    assert "Off-Hours Significantly Slower" not in _titles(insights)


def test_variable_response_times_warning() -> None:
    """Summary: Verify a wide middle half relative to the median is flagged."""

    latencies = [60, 60, 60, 100, 100, 10000, 10000, 10000]
    windows = [_window(MONDAY + timedelta(hours=5 * index), latency) for index, latency in enumerate(latencies)]
    insights = ROOMY.generate(windows, _range_ending(MONDAY + timedelta(days=2)))
    variable = [insight for insight in insights if insight.title == "Variable Response Times"]
    assert len(variable) == 1
    assert variable[0].type == InsightType.WARNING
    assert "Consistent Responder" not in _titles(insights)


def test_slowing_down_week_over_week() -> None:
    """Summary: Verify a slower recent week raises a warning.

    Importance: Users learn about regressions before they become habits.
    Alternatives: Only report long-term averages.
    """

    windows = [_window(MONDAY + timedelta(days=day), 600) for day in range(3)]
    windows += [_window(MONDAY + timedelta(days=day), 3600) for day in range(7, 10)]
    insights = ROOMY.generate(windows, _range_ending(MONDAY + timedelta(days=10)))
    slowing = [insight for insight in insights if insight.title == "Response Times Slowing Down"]
    assert len(slowing) == 1
    assert slowing[0].type == InsightType.WARNING
    assert "500%" in slowing[0].description
    assert "Response Times Improving" not in _titles(insights)


def test_trending_slower_projection() -> None:
    """Summary: Verify a steadily rising daily median projects a slowdown."""

    windows = [_window(MONDAY + timedelta(days=day), 600 + 300 * day) for day in range(10)]
    insights = ROOMY.generate(windows, _range_ending(MONDAY + timedelta(days=9, hours=1)))
    trend = [insight for insight in insights if insight.title == "Trending Slower"]
    assert len(trend) == 1
    assert trend[0].type == InsightType.TREND
    assert trend[0].data_points == 10
    assert trend[0].confidence > 0.99
    assert "On Track to Improve" not in _titles(insights)


def test_projection_skips_degenerate_series() -> None:
    """Summary: Verify short, flat, and noisy daily series produce no projection.

    Importance: Projections must never be shown on fits that explain nothing.
    Alternatives: Always project and let users judge the fit.
    """

    two_days = [
        _window(MONDAY + timedelta(days=day, hours=slot), 600 + 600 * day)
        for day in range(2)
        for slot in range(3)
    ]
    insights = ROOMY.generate(two_days, _range_ending(MONDAY + timedelta(days=2)))
    assert not _projection_titles(insights)

    flat = [_window(MONDAY + timedelta(days=day), 1200) for day in range(6)]
    insights = ROOMY.generate(flat, _range_ending(MONDAY + timedelta(days=6)))
    assert not _projection_titles(insights)
    assert insights[-1].title == "Tracking 6 Responses"

    noisy = [_window(MONDAY + timedelta(days=day), 600 if day % 2 == 0 else 6000) for day in range(6)]
    insights = ROOMY.generate(noisy, _range_ending(MONDAY + timedelta(days=6)))
    assert not _projection_titles(insights)
