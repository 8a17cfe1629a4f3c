"""Summary: Tests for the composite responsiveness score.

Importance: Widgets show the score and grade as a headline.
Alternatives: Show the median alone.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from replypilot.config import AnalyticsSettings
from replypilot.matcher import build_window
from replypilot.models import Direction, MessageEvent, Platform, ResponseWindow
from replypilot.scoring import EMPTY_SCORE, compute_score, grade_for

BASE = datetime(2026, 1, 5, 9, 0)


def _windows(latencies: list[float]) -> list[ResponseWindow]:
    windows = []
    for index, latency in enumerate(latencies):
        moment = BASE + timedelta(hours=index)
        inbound = MessageEvent(f"in-{index}", moment, Direction.INBOUND, "alex@example.com", "conv")
        outbound = MessageEvent(f"out-{index}", moment + timedelta(seconds=latency), Direction.OUTBOUND, "me", "conv")
        windows.append(build_window(inbound, outbound, Platform.GMAIL, AnalyticsSettings()))
    return windows


def test_fast_consistent_replies_score_high() -> None:
    """Summary: Verify quick, uniform replies earn an A+.

    Importance: Confirms component weighting.
    Alternatives: Compare against a benchmark population.
    """

    score = compute_score(_windows([600] * 10), 3600)
    assert score.speed_score == 98
    assert score.consistency_score == 100
    assert score.coverage_score == 100
    assert score.overall == 99
    assert score.grade == "A+"


def test_slow_replies_score_low() -> None:
    """Summary: Verify replies at ten times the target fail."""

    score = compute_score(_windows([36000] * 5), 3600)
    assert score.speed_score == 0
    assert score.coverage_score == 0
    assert score.overall == 30
    assert score.grade == "F"


def test_empty_and_invalid_windows() -> None:
    """Summary: Verify no valid data yields the placeholder score."""

    assert compute_score([], 3600) == EMPTY_SCORE
    assert compute_score(_windows([90 * 3600]), 3600) == EMPTY_SCORE


def test_grade_boundaries() -> None:
    """Summary: Verify grade thresholds are inclusive floors."""

    assert grade_for(90) == "A+"
    assert grade_for(85) == "A"
    assert grade_for(70) == "B"
    assert grade_for(50) == "D"
    assert grade_for(49) == "F"
