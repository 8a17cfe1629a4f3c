"""Summary: Confidence scoring for matched response windows.

Importance: Long-delay matches stay counted but are down-weighted in analytics.
Alternatives: Drop long-delay matches entirely.
"""

from __future__ import annotations

from replypilot.models import MatchingMethod

HOUR = 3600.0

# (upper bound in hours, confidence); latencies past the last bound score FLOOR.
DECAY_BANDS = ((24, 1.0), (48, 0.8), (72, 0.6))
FLOOR = 0.4


def score_confidence(
    latency_seconds: float, method: MatchingMethod = MatchingMethod.TIME_WINDOW
) -> float:
    """Summary: Map a latency to a confidence in [0, 1] using fixed decay bands.

    Importance: Discounts stale or ambiguous pairings.
    Alternatives: Use a continuous exponential decay curve.
    """

    # Thread-identifier matches are not given elevated trust; method only documents intent.
    hours = max(latency_seconds, 0.0) / HOUR
    for upper, confidence in DECAY_BANDS:
        if hours < upper:
            return confidence
    return FLOOR


def is_valid_for_analytics(confidence: float, threshold: float) -> bool:
    return confidence >= threshold
