"""Summary: Pattern detectors that turn response windows into ranked insights.

Importance: Explains responsiveness in plain language instead of raw numbers.
Alternatives: Ask an AI provider to summarize the metrics.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable, Sequence

from replypilot.config import AnalyticsSettings
from replypilot.formatting import (
    DAY_NAMES,
    DAY_SHORT,
    format_contact_name,
    format_duration,
    format_hour,
)
from replypilot.models import Insight, InsightType, ResponseWindow, TimeRange
from replypilot.stats import clamp_unit, least_squares, lower_median, quartiles


logger = logging.getLogger(__name__)

FAST_REPLY_SECONDS = 1800
SLOW_MEDIAN_SECONDS = 4 * 3600
WEEK = timedelta(days=7)

Detector = Callable[[Sequence[ResponseWindow], TimeRange], "Insight | None"]


def getting_started_insight() -> Insight:
    return Insight(
        type=InsightType.RECOMMENDATION,
        title="Getting Started",
        description="Sync your messages to see personalized insights about your response patterns.",
        confidence=1.0,
        data_points=0,
    )


def _latencies(windows: Iterable[ResponseWindow]) -> list[float]:
    return sorted(window.latency_seconds for window in windows)


def _sample_factor(count: int, saturation: int) -> float:
    return min(count / saturation, 1.0)


@dataclass(frozen=True)
class InsightGenerator:
    """Summary: Runs independent detectors and returns a capped, ranked insight list.

    Importance: Produces deterministic findings from the same window snapshot.
    Alternatives: Hand-curate a fixed set of dashboard callouts.
    """

    settings: AnalyticsSettings

    def generate(
        self,
        windows: Iterable[ResponseWindow],
        time_range: TimeRange,
        minimum_sample_size: int | None = None,
    ) -> list[Insight]:
        """Summary: Generate insights for a window collection.

        Importance: Single entry point for dashboards, digests, and the API.
        Alternatives: Expose each detector separately to callers.

        The end of ``time_range`` acts as "now" for week-over-week and projection
        windows. Insights are ranked by confidence with detector order breaking ties,
        truncated to the configured cap, and the tracking summary is always last.
        """

        minimum = self.settings.minimum_sample_size if minimum_sample_size is None else minimum_sample_size
        valid = sorted(
            (window for window in windows if window.is_valid_for_analytics),
            key=lambda window: (window.inbound_timestamp, window.inbound_event_id),
        )
        if len(valid) < minimum or not valid:
            return [getting_started_insight()]

        detectors: tuple[Detector, ...] = (
            self._day_of_week_pattern,
            self._hour_of_day_pattern,
            self._working_hours_pattern,
            self._speed_tier,
            self._week_over_week,
            self._consistency,
            self._anomaly,
            self._vip_contact,
            self._projection,
        )
        found: list[Insight] = []
        for detector in detectors:
            insight = detector(valid, time_range)
            if insight is not None:
                found.append(insight)

        ranked = sorted(found, key=lambda insight: -insight.confidence)
        ranked = ranked[: self.settings.max_insights - 1]
        ranked.append(self._tracking_summary(valid))
        logger.debug("Generated %s insights from %s windows.", len(ranked), len(valid))
        return ranked

    def _day_of_week_pattern(
        self, windows: Sequence[ResponseWindow], time_range: TimeRange
    ) -> Insight | None:
        groups: dict[int, list[float]] = defaultdict(list)
        for window in windows:
            groups[window.day_of_week].append(window.latency_seconds)
        medians = {day: lower_median(latencies) for day, latencies in groups.items()}
        if len(medians) < 2:
            return None
        best = min(medians, key=lambda day: (medians[day], day))
        worst = max(medians, key=lambda day: (medians[day], -day))
        if medians[best] >= medians[worst] or not math.isfinite(medians[best]):
            return None

        ratio = medians[worst] / max(medians[best], 1.0)
        data_points = len(groups[best]) + len(groups[worst])
        if ratio >= 2.0:
            title = f"You respond {ratio:.1f}x faster on {DAY_NAMES[best]}s"
        else:
            title = f"{DAY_NAMES[best]}s are your fastest day"
        strength = min((ratio - 1.0) / 2.0, 1.0)
        return Insight(
            type=InsightType.PATTERN,
            title=title,
            description=(
                f"Median {format_duration(medians[best])} on {DAY_SHORT[best]} vs "
                f"{format_duration(medians[worst])} on {DAY_SHORT[worst]}."
            ),
            actionable=f"Consider batching messages for {DAY_SHORT[worst]} to improve consistency.",
            confidence=clamp_unit((0.55 + 0.35 * strength) * (0.7 + 0.3 * _sample_factor(data_points, 10))),
            data_points=data_points,
        )

    def _hour_of_day_pattern(
        self, windows: Sequence[ResponseWindow], time_range: TimeRange
    ) -> Insight | None:
        groups: dict[int, list[float]] = defaultdict(list)
        for window in windows:
            groups[window.hour_of_day].append(window.latency_seconds)
        medians = {
            hour: lower_median(latencies) for hour, latencies in groups.items() if len(latencies) >= 2
        }
        if len(medians) < 2:
            return None
        peak = min(medians, key=lambda hour: (medians[hour], hour))
        overall = lower_median(window.latency_seconds for window in windows)
        if medians[peak] >= overall:
            return None

        ratio = overall / max(medians[peak], 1.0)
        count = len(groups[peak])
        hour_label = format_hour(peak)
        return Insight(
            type=InsightType.ACHIEVEMENT if ratio >= 2.0 else InsightType.PATTERN,
            title=f"Peak Response Hour: {hour_label}",
            description=(
                f"Messages around {hour_label} get your fastest replies, median "
                f"{format_duration(medians[peak])} vs overall {format_duration(overall)}."
            ),
            actionable="Consider scheduling important communications during this window.",
            confidence=clamp_unit((0.5 + 0.3 * min(ratio - 1.0, 1.0)) * (0.8 + 0.2 * _sample_factor(count, 6))),
            data_points=count,
        )

    def _working_hours_pattern(
        self, windows: Sequence[ResponseWindow], time_range: TimeRange
    ) -> Insight | None:
        working = [window.latency_seconds for window in windows if window.is_working_hours]
        off_hours = [window.latency_seconds for window in windows if not window.is_working_hours]
        if not working or not off_hours:
            return None
        working_median = lower_median(working)
        off_median = lower_median(off_hours)
        ratio = off_median / max(working_median, 1.0)
        strength = 1.0 if ratio <= 0 else min(abs(math.log(ratio)) / math.log(3), 1.0)
        data_points = len(working) + len(off_hours)

        if ratio > 1.5:
            return Insight(
                type=InsightType.WARNING,
                title="Off-Hours Significantly Slower",
                description=(
                    f"You respond {ratio:.1f}x slower outside working hours "
                    f"({format_duration(off_median)} vs {format_duration(working_median)})."
                ),
                actionable="Set expectations with contacts who often write after hours.",
                confidence=clamp_unit(0.6 + 0.3 * strength),
                data_points=data_points,
            )
        if ratio < 0.8:
            return Insight(
                type=InsightType.PATTERN,
                title="Faster Responses Off-Hours",
                description=(
                    f"You respond faster outside working hours: {format_duration(off_median)} "
                    f"vs {format_duration(working_median)} during work."
                ),
                actionable="Consider setting boundaries to protect off-hours time.",
                confidence=clamp_unit(0.6 + 0.3 * strength),
                data_points=data_points,
            )
        return None

    def _speed_tier(self, windows: Sequence[ResponseWindow], time_range: TimeRange) -> Insight | None:
        latencies = _latencies(windows)
        count = len(latencies)
        fast_share = sum(1 for latency in latencies if latency < FAST_REPLY_SECONDS) / count
        median = lower_median(latencies)
        confidence = clamp_unit(0.7 + 0.2 * _sample_factor(count, 50))

        if fast_share > 0.7:
            return Insight(
                type=InsightType.ACHIEVEMENT,
                title="Lightning Fast Responder",
                description=f"{int(fast_share * 100)}% of your responses are under 30 minutes.",
                confidence=confidence,
                data_points=count,
            )
        if fast_share > 0.5:
            return Insight(
                type=InsightType.ACHIEVEMENT,
                title="Fast Responder",
                description=f"{int(fast_share * 100)}% of your responses are under 30 minutes.",
                confidence=confidence,
                data_points=count,
            )
        if median > SLOW_MEDIAN_SECONDS:
            return Insight(
                type=InsightType.RECOMMENDATION,
                title="Slow Responder: Room for Improvement",
                description=f"Your median response time is {format_duration(median)}.",
                actionable="Set a goal to respond within 2 hours for new messages.",
                confidence=confidence,
                data_points=count,
            )
        return None

    def _week_over_week(
        self, windows: Sequence[ResponseWindow], time_range: TimeRange
    ) -> Insight | None:
        now = time_range.end
        recent = [
            window.latency_seconds
            for window in windows
            if now - WEEK < window.inbound_timestamp <= now
        ]
        prior = [
            window.latency_seconds
            for window in windows
            if now - 2 * WEEK < window.inbound_timestamp <= now - WEEK
        ]
        if len(recent) < 3 or len(prior) < 3:
            return None
        current = lower_median(recent)
        previous = lower_median(prior)
        change = (current - previous) / max(previous, 1.0)
        confidence = clamp_unit(0.6 + 0.35 * min(abs(change) / 0.5, 1.0))
        data_points = len(recent) + len(prior)

        if change < -0.15:
            return Insight(
                type=InsightType.TREND,
                title="Response Times Improving",
                description=(
                    f"Your median dropped {int(abs(change) * 100)}% week over week "
                    f"({format_duration(previous)} to {format_duration(current)})."
                ),
                actionable="Keep up the momentum by maintaining your current habits.",
                confidence=confidence,
                data_points=data_points,
            )
        if change > 0.15:
            return Insight(
                type=InsightType.WARNING,
                title="Response Times Slowing Down",
                description=(
                    f"Your median rose {int(change * 100)}% week over week "
                    f"({format_duration(previous)} to {format_duration(current)})."
                ),
                actionable="Consider reviewing your message handling habits or setting tighter goals.",
                confidence=confidence,
                data_points=data_points,
            )
        return None

    def _consistency(self, windows: Sequence[ResponseWindow], time_range: TimeRange) -> Insight | None:
        latencies = _latencies(windows)
        if len(latencies) < 5:
            return None
        median = lower_median(latencies)
        q1, q3 = quartiles(latencies)
        spread = q3 - q1
        confidence = clamp_unit(0.6 + 0.25 * _sample_factor(len(latencies), 30))

        if spread < 0.5 * median:
            return Insight(
                type=InsightType.ACHIEVEMENT,
                title="Consistent Responder",
                description=(
                    f"Most of your responses fall between {format_duration(q1)} "
                    f"and {format_duration(q3)}."
                ),
                confidence=confidence,
                data_points=len(latencies),
            )
        if spread > 2 * median:
            return Insight(
                type=InsightType.WARNING,
                title="Variable Response Times",
                description=(
                    f"Your responses range widely, from {format_duration(q1)} to "
                    f"{format_duration(q3)} across the middle half."
                ),
                actionable="Identify what causes delays: specific contacts, times, or message types.",
                confidence=confidence,
                data_points=len(latencies),
            )
        return None

    def _anomaly(self, windows: Sequence[ResponseWindow], time_range: TimeRange) -> Insight | None:
        groups: dict[date, list[float]] = defaultdict(list)
        for window in windows:
            groups[window.inbound_timestamp.date()].append(window.latency_seconds)
        if len(groups) < 3:
            return None
        overall = lower_median(window.latency_seconds for window in windows)
        ratio = self.settings.anomaly_ratio

        for day in sorted(groups, reverse=True):
            latencies = groups[day]
            if len(latencies) < self.settings.anomaly_min_samples:
                continue
            day_median = lower_median(latencies)
            confidence = clamp_unit(0.6 + 0.3 * _sample_factor(len(latencies), 10))
            if day_median * ratio <= overall:
                return Insight(
                    type=InsightType.ANOMALY,
                    title="Exceptional Performance Detected",
                    description=(
                        f"On {day.strftime('%b %d, %Y')} you responded unusually fast "
                        f"(median {format_duration(day_median)} vs {format_duration(overall)} overall)."
                    ),
                    actionable="What did you do differently? Replicate that pattern.",
                    confidence=confidence,
                    data_points=len(latencies),
                )
            if day_median >= overall * ratio:
                return Insight(
                    type=InsightType.ANOMALY,
                    title="Unusual Delay Detected",
                    description=(
                        f"On {day.strftime('%b %d, %Y')} response times were unusually slow "
                        f"(median {format_duration(day_median)} vs {format_duration(overall)} overall)."
                    ),
                    actionable="Review what caused the delay to prevent future occurrences.",
                    confidence=confidence,
                    data_points=len(latencies),
                )
        return None

    def _vip_contact(self, windows: Sequence[ResponseWindow], time_range: TimeRange) -> Insight | None:
        groups: dict[str, list[float]] = defaultdict(list)
        for window in windows:
            groups[window.participant_id].append(window.latency_seconds)
        candidates = {
            contact: lower_median(latencies)
            for contact, latencies in groups.items()
            if len(latencies) >= self.settings.vip_min_responses
        }
        if not candidates:
            return None
        vip = min(candidates, key=lambda contact: (candidates[contact], contact))
        rest = [window.latency_seconds for window in windows if window.participant_id != vip]
        if not rest:
            return None
        rest_median = lower_median(rest)
        if candidates[vip] * 2 > rest_median:
            return None

        name = format_contact_name(vip)
        count = len(groups[vip])
        return Insight(
            type=InsightType.PATTERN,
            title=f"VIP Contact: {name}",
            description=(
                f"You respond fastest to {name}, median {format_duration(candidates[vip])} "
                f"vs {format_duration(rest_median)} for everyone else."
            ),
            confidence=clamp_unit(0.6 + 0.3 * _sample_factor(count, 10)),
            data_points=count,
        )

    def _projection(self, windows: Sequence[ResponseWindow], time_range: TimeRange) -> Insight | None:
        now = time_range.end
        groups: dict[date, list[float]] = defaultdict(list)
        for window in windows:
            if now - 2 * WEEK < window.inbound_timestamp <= now:
                groups[window.inbound_timestamp.date()].append(window.latency_seconds)
        if len(groups) < 3:
            return None
        days = sorted(groups)
        xs = [float((day - days[0]).days) for day in days]
        ys = [lower_median(groups[day]) for day in days]
        fit = least_squares(xs, ys)
        if fit is None or fit.r_squared < 0.6:
            return None
        level = sum(ys) / len(ys)
        if abs(fit.slope * 7) / max(level, 1.0) < 0.1:
            return None

        current = max(fit.predict(xs[-1]), 0.0)
        projected = max(fit.predict(xs[-1] + 7), 0.0)
        change = int(abs(projected - current) / max(current, 1.0) * 100)
        if fit.slope < 0:
            title = "On Track to Improve"
            description = f"Based on recent days, your response time could decrease by about {change}% next week."
        else:
            title = "Trending Slower"
            description = f"If the current trend continues, your response time may increase by about {change}% next week."
        return Insight(
            type=InsightType.TREND,
            title=title,
            description=description,
            confidence=clamp_unit(fit.r_squared),
            data_points=len(days),
        )

    def _tracking_summary(self, windows: Sequence[ResponseWindow]) -> Insight:
        platforms = len({window.platform for window in windows})
        suffix = "" if platforms == 1 else "s"
        return Insight(
            type=InsightType.PATTERN,
            title=f"Tracking {len(windows)} Responses",
            description=f"{len(windows)} valid responses analyzed across {platforms} platform{suffix}.",
            confidence=1.0,
            data_points=len(windows),
        )


def generate_insights(
    windows: Iterable[ResponseWindow],
    time_range: TimeRange,
    minimum_sample_size: int = 5,
    settings: AnalyticsSettings | None = None,
) -> list[Insight]:
    """Summary: Functional entry point over a default-configured generator."""

    generator = InsightGenerator(settings if settings is not None else AnalyticsSettings())
    return generator.generate(windows, time_range, minimum_sample_size)
