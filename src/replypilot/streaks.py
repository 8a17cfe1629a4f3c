"""Summary: Goal compliance and streak evaluation over response windows.

Importance: Rewards consistent days where every reply met the target.
Alternatives: Track streaks incrementally inside the sync loop.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, Sequence

from replypilot.models import DayResult, ResponseGoal, ResponseWindow, StreakState


def effective_target(goals: Sequence[ResponseGoal], default_seconds: float) -> float:
    """Summary: Strictest target across enabled goals, or the default when none are enabled."""

    targets = [goal.target_latency_seconds for goal in goals if goal.enabled]
    return min(targets) if targets else default_seconds


def evaluate_streak(
    windows: Iterable[ResponseWindow],
    target_latency_seconds: float,
    today: date,
) -> StreakState:
    """Summary: Compute per-day compliance plus current and longest streaks.

    Importance: Backs goal tracking with real data only.
    Alternatives: Judge each day by its median instead of every reply.

    A day passes only when every valid window on it met the target. The current
    streak ends today, or yesterday when today has no data yet. Days without a
    valid window break a run, including days whose inbound messages are all
    pending or matched with low confidence.
    """

    groups: dict[date, list[float]] = defaultdict(list)
    for window in windows:
        if window.is_valid_for_analytics:
            groups[window.inbound_timestamp.date()].append(window.latency_seconds)

    results = tuple(
        DayResult(
            day=day,
            response_count=len(groups[day]),
            met_target=all(latency <= target_latency_seconds for latency in groups[day]),
        )
        for day in sorted(groups)
    )
    passed = {result.day for result in results if result.met_target}

    longest = 0
    run = 0
    previous: date | None = None
    for result in results:
        if not result.met_target:
            run = 0
        elif previous is not None and run > 0 and result.day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = result.day

    anchor = today if today in groups else today - timedelta(days=1)
    current = 0
    while anchor in passed:
        current += 1
        anchor -= timedelta(days=1)

    return StreakState(
        target_latency_seconds=target_latency_seconds,
        current_streak=current,
        longest_streak=longest,
        last_qualifying_day=max(passed) if passed else None,
        days=results,
    )


def roll_forward(goal: ResponseGoal, windows: Iterable[ResponseWindow], today: date) -> ResponseGoal:
    """Summary: Return the goal with streak fields refreshed for today.

    Importance: The only place goal streak bookkeeping changes.
    Alternatives: Let the UI increment streak counters directly.
    """

    scoped = [
        window
        for window in windows
        if goal.platform is None or window.platform == goal.platform
    ]
    state = evaluate_streak(scoped, goal.target_latency_seconds, today)
    return replace(
        goal,
        current_streak=state.current_streak,
        longest_streak=max(goal.longest_streak, state.longest_streak),
        last_streak_date=state.last_qualifying_day,
    )
