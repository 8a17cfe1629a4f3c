"""Summary: Statistical primitives shared by metrics, insights, streaks, and scoring.

Importance: One place owns the index-based median and percentile convention.
Alternatives: Use the standard library statistics module with interpolated medians.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


def lower_median(values: Iterable[float]) -> float:
    """Summary: Median as the element at index n // 2 of the sorted values.

    Importance: Matches the established dashboard numbers exactly.
    Alternatives: Average the two middle values for even-sized inputs.

    For even counts this picks the upper of the two middle elements by index, which
    is not the textbook median. It is kept for parity with existing expectations.
    Returns 0.0 for empty input.
    """

    ordered = sorted(values)
    if not ordered:
        return 0.0
    return ordered[len(ordered) // 2]


def percentile(sorted_values: Sequence[float], fraction: float) -> float:
    """Summary: Index-based percentile clamped to the last element."""

    if not sorted_values:
        return 0.0
    index = min(int(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[index]


def quartiles(sorted_values: Sequence[float]) -> tuple[float, float]:
    """Summary: Q1 and Q3 at indices n/4 and 3n/4 of the sorted values."""

    count = len(sorted_values)
    if count == 0:
        return 0.0, 0.0
    return sorted_values[count // 4], sorted_values[min(3 * count // 4, count - 1)]


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class LinearFit:
    slope: float
    intercept: float
    r_squared: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def least_squares(xs: Sequence[float], ys: Sequence[float]) -> LinearFit | None:
    """Summary: Fit y = slope * x + intercept and report R squared.

    Importance: Backs the projection insight without pulling in numpy.
    Alternatives: Use numpy.polyfit.

    Returns None for fewer than two points or when every x is identical.
    """

    count = len(xs)
    if count < 2 or count != len(ys):
        return None
    x_mean = sum(xs) / count
    y_mean = sum(ys) / count
    ss_xx = sum((x - x_mean) ** 2 for x in xs)
    if ss_xx == 0:
        return None
    ss_xy = sum((x - x_mean) * (y - y_mean) for x, y in zip(xs, ys))
    slope = ss_xy / ss_xx
    intercept = y_mean - slope * x_mean
    ss_total = sum((y - y_mean) ** 2 for y in ys)
    if ss_total == 0:
        # Perfectly flat series: the line explains nothing beyond the mean.
        return LinearFit(slope=slope, intercept=intercept, r_squared=0.0)
    ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in zip(xs, ys))
    return LinearFit(slope=slope, intercept=intercept, r_squared=clamp_unit(1 - ss_res / ss_total))
