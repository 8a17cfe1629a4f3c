"""Summary: Composite responsiveness score with a letter grade.

Importance: Gives widgets and digests a single headline number.
Alternatives: Show the median latency alone.
"""

from __future__ import annotations

from typing import Iterable

from replypilot.models import ResponseScore, ResponseWindow
from replypilot.stats import lower_median, quartiles

GRADES = ((90, "A+"), (80, "A"), (70, "B"), (60, "C"), (50, "D"))

EMPTY_SCORE = ResponseScore(overall=0, speed_score=0, consistency_score=0, coverage_score=0, grade="--")


def grade_for(overall: int) -> str:
    for floor, grade in GRADES:
        if overall >= floor:
            return grade
    return "F"


def compute_score(windows: Iterable[ResponseWindow], target_latency_seconds: float = 3600) -> ResponseScore:
    """Summary: Weight speed, consistency, and coverage into a 0-100 score.

    Importance: Summarizes several statistics without hiding them.
    Alternatives: Rank users against a population benchmark.

    Speed is 100 for an instant median and 0 at ten times the target. Consistency
    falls as the interquartile range grows relative to the median. Coverage is
    the share of replies inside the target.
    """

    latencies = sorted(window.latency_seconds for window in windows if window.is_valid_for_analytics)
    if not latencies:
        return EMPTY_SCORE

    median = lower_median(latencies)
    speed_ratio = min(median / target_latency_seconds, 10.0)
    speed = max(0, int(100 * (1 - speed_ratio / 10)))

    q1, q3 = quartiles(latencies)
    spread_ratio = min((q3 - q1) / max(median, 1.0), 2.0)
    consistency = max(0, min(100, int(100 * (1 - spread_ratio / 2))))

    within = sum(1 for latency in latencies if latency <= target_latency_seconds)
    coverage = int(within / len(latencies) * 100)

    overall = (speed * 40 + consistency * 30 + coverage * 30) // 100
    return ResponseScore(
        overall=overall,
        speed_score=speed,
        consistency_score=consistency,
        coverage_score=coverage,
        grade=grade_for(overall),
    )
