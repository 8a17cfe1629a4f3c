"""Summary: Aggregation of response windows into latency metrics and series.

Importance: Powers dashboards, exports, and widgets with consistent statistics.
Alternatives: Push aggregation into SQL queries against the window store.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Sequence

from replypilot.models import (
    DailyMetrics,
    HourlyMetrics,
    Platform,
    PlatformMetrics,
    ResponseGoal,
    ResponseMetrics,
    ResponseWindow,
    TimeRange,
)
from replypilot.stats import lower_median, mean, percentile


def filter_windows(
    windows: Iterable[ResponseWindow],
    platform: Platform | None = None,
    time_range: TimeRange | None = None,
) -> list[ResponseWindow]:
    """Summary: Keep valid windows matching the platform and time range.

    Importance: Every aggregate starts from the same filtered population.
    Alternatives: Filter separately in each computation.
    """

    return [
        window
        for window in windows
        if window.is_valid_for_analytics
        and (platform is None or window.platform == platform)
        and (time_range is None or time_range.contains(window.inbound_timestamp))
    ]


def _median_or_none(latencies: Sequence[float]) -> float | None:
    return lower_median(latencies) if latencies else None


def working_hours_breakdown(windows: Sequence[ResponseWindow]) -> tuple[float | None, float | None]:
    """Summary: Medians for windows inside and outside working hours."""

    working = [window.latency_seconds for window in windows if window.is_working_hours]
    off_hours = [window.latency_seconds for window in windows if not window.is_working_hours]
    return _median_or_none(working), _median_or_none(off_hours)


def compute_metrics(
    windows: Iterable[ResponseWindow],
    platform: Platform | None,
    time_range: TimeRange,
) -> ResponseMetrics:
    """Summary: Reduce windows to median, mean, percentile, and trend statistics.

    Importance: Primary responsiveness snapshot for a platform and period.
    Alternatives: Report only a mean latency.
    """

    all_windows = list(windows)
    filtered = filter_windows(all_windows, platform, time_range)
    if not filtered:
        return ResponseMetrics(
            platform=platform,
            time_range=time_range,
            sample_count=0,
            median_latency=0.0,
            mean_latency=0.0,
            p90_latency=0.0,
            p95_latency=0.0,
            min_latency=0.0,
            max_latency=0.0,
        )

    latencies = sorted(window.latency_seconds for window in filtered)
    median = lower_median(latencies)
    working_median, non_working_median = working_hours_breakdown(filtered)

    previous = filter_windows(all_windows, platform, time_range.previous())
    # The boundary instant belongs to the current range only.
    previous = [window for window in previous if window.inbound_timestamp < time_range.start]
    previous_median = _median_or_none([window.latency_seconds for window in previous])
    trend = None
    if previous_median is not None:
        trend = (median - previous_median) / max(previous_median, 1.0) * 100

    return ResponseMetrics(
        platform=platform,
        time_range=time_range,
        sample_count=len(latencies),
        median_latency=median,
        mean_latency=mean(latencies),
        p90_latency=percentile(latencies, 0.9),
        p95_latency=percentile(latencies, 0.95),
        min_latency=latencies[0],
        max_latency=latencies[-1],
        working_hours_median=working_median,
        non_working_hours_median=non_working_median,
        previous_period_median=previous_median,
        trend_percentage=trend,
    )


def compute_daily_metrics(
    windows: Iterable[ResponseWindow],
    platform: Platform | None,
    time_range: TimeRange,
) -> list[DailyMetrics]:
    """Summary: One zero-filled bucket per calendar day in the range.

    Importance: Keeps chart series length constant regardless of gaps.
    Alternatives: Return only days that have samples.

    Each window stands for one inbound and one outbound message, so the message
    count of a bucket is twice its response count.
    """

    groups: dict[date, list[float]] = defaultdict(list)
    for window in filter_windows(windows, platform, time_range):
        groups[window.inbound_timestamp.date()].append(window.latency_seconds)
    return [
        DailyMetrics(
            day=day,
            median_latency=lower_median(groups.get(day, [])),
            mean_latency=mean(groups.get(day, [])),
            response_count=len(groups.get(day, [])),
            message_count=2 * len(groups.get(day, [])),
        )
        for day in time_range.days()
    ]


def compute_hourly_metrics(
    windows: Iterable[ResponseWindow],
    platform: Platform | None = None,
    time_range: TimeRange | None = None,
) -> list[HourlyMetrics]:
    """Summary: Exactly 24 hour-of-day buckets, independent of date."""

    groups: dict[int, list[float]] = defaultdict(list)
    for window in filter_windows(windows, platform, time_range):
        groups[window.hour_of_day].append(window.latency_seconds)
    return [
        HourlyMetrics(
            hour=hour,
            median_latency=lower_median(groups.get(hour, [])),
            mean_latency=mean(groups.get(hour, [])),
            response_count=len(groups.get(hour, [])),
            message_count=2 * len(groups.get(hour, [])),
        )
        for hour in range(24)
    ]


def compute_platform_metrics(
    windows: Iterable[ResponseWindow],
    time_range: TimeRange,
    goals: Sequence[ResponseGoal] = (),
) -> list[PlatformMetrics]:
    """Summary: Per-platform medians with progress toward the matching goal.

    Importance: Lets consumers compare platforms and show goal progress bars.
    Alternatives: Call compute_metrics once per platform.

    A platform-specific enabled goal wins over a global goal. Progress is the share
    of responses at or under the goal target.
    """

    groups: dict[Platform | None, list[float]] = defaultdict(list)
    for window in filter_windows(windows, None, time_range):
        groups[window.platform].append(window.latency_seconds)

    results: list[PlatformMetrics] = []
    for platform in sorted(groups, key=lambda item: item.value if item else ""):
        latencies = groups[platform]
        goal = _goal_for(platform, goals)
        progress = None
        if goal is not None:
            met = sum(1 for latency in latencies if latency <= goal.target_latency_seconds)
            progress = met / len(latencies)
        results.append(
            PlatformMetrics(
                platform=platform,
                median_latency=lower_median(latencies),
                sample_count=len(latencies),
                goal_progress=progress,
            )
        )
    return results


def _goal_for(platform: Platform | None, goals: Sequence[ResponseGoal]) -> ResponseGoal | None:
    enabled = [goal for goal in goals if goal.enabled]
    for goal in enabled:
        if goal.platform is not None and goal.platform == platform:
            return goal
    for goal in enabled:
        if goal.platform is None:
            return goal
    return None
