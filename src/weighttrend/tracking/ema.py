"""Exponentially smoothed moving average for weight tracking.

This implements the Hacker's Diet trend calculation:
    T_n = λ × W_n + (1 - λ) × T_{n-1}

With λ=0.1 (10%), this is a low-pass filter with roughly a 10-day time
constant. It removes day-to-day noise from water retention, gut contents,
and scale error while tracking the underlying weight trend.

The recurrence is applied per entry, not per calendar day: a gap of several
days between weigh-ins is treated the same as consecutive days.

Reference: https://www.fourmilab.ch/hackdiet/
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Iterable, Sequence

from weighttrend.tracking.models import TrendPoint, WeightSample
from weighttrend.units import WeightUnit

logger = logging.getLogger(__name__)

# Default smoothing factor (10% = 0.1)
# This is the classic Hacker's Diet value, chosen because:
# 1. Easy mental math (shift decimal point)
# 2. ~10 day time constant balances responsiveness vs noise rejection
DEFAULT_SMOOTHING = 0.1

# Default span for the chart EMA, α = 2 / (span + 1)
DEFAULT_SPAN = 10


def validate_smoothing(smoothing: float, name: str = "smoothing") -> float:
    """Raise ValueError unless 0 < smoothing <= 1."""
    if not 0.0 < smoothing <= 1.0:
        raise ValueError(f"{name} must be in (0, 1], got {smoothing}")
    return smoothing


def span_to_smoothing(span: int) -> float:
    """
    Convert an EMA span (in periods) to a smoothing factor.

    Example:
        >>> span_to_smoothing(10)
        0.18181818181818182
    """
    if span < 1:
        raise ValueError(f"span must be a positive integer, got {span}")
    return 2.0 / (span + 1)


def update_trend(
    prev_trend: float,
    today_weight: float,
    smoothing: float = DEFAULT_SMOOTHING,
) -> float:
    """
    Calculate the next trend value.

    Written as λW + (1-λ)T rather than T + λ(W - T) so that λ=1.0 returns
    today's weight bit-for-bit.

    Args:
        prev_trend: Previous trend value (T_{n-1})
        today_weight: Today's scale weight (W_n)
        smoothing: Smoothing factor λ, default 0.1
                   Higher values = more responsive, more noise
                   Lower values = smoother, more lag

    Returns:
        Today's trend value (T_n)

    Example:
        >>> update_trend(180.0, 182.0)
        180.2
    """
    return smoothing * today_weight + (1 - smoothing) * prev_trend


def smooth_series(weights: Sequence[float], smoothing: float = DEFAULT_SMOOTHING) -> list[float]:
    """
    Calculate trend values for a series of weights already in order.

    The first weight seeds the trend.

    Example:
        >>> smooth_series([180.0, 182.0, 179.0])
        [180.0, 180.2, 180.08]
    """
    if not weights:
        return []

    trends = [weights[0]]
    for weight in weights[1:]:
        trends.append(update_trend(trends[-1], weight, smoothing))
    return trends


def sort_samples(samples: Iterable[WeightSample]) -> list[WeightSample]:
    """Return samples ordered oldest first (stable for equal timestamps)."""
    return sorted(samples, key=lambda s: s.timestamp)


def calculate_ewma(
    samples: Iterable[WeightSample],
    smoothing: float = DEFAULT_SMOOTHING,
) -> list[TrendPoint]:
    """
    Smooth every sample, one trend point per input sample.

    Samples may arrive in any order and any unit; they are sorted by
    timestamp and normalized to lbs before smoothing. `trend_rate` is left
    unset (see `with_trend_rates`).

    Args:
        samples: Weight samples
        smoothing: Smoothing factor λ in (0, 1], default 0.1

    Returns:
        Trend points in chronological order
    """
    validate_smoothing(smoothing)
    ordered = sort_samples(samples)
    raw = [s.weight_in(WeightUnit.LB) for s in ordered]
    smoothed = smooth_series(raw, smoothing)

    return [
        TrendPoint(date=s.day, raw_weight=r, smoothed_weight=t)
        for s, r, t in zip(ordered, raw, smoothed)
    ]


def daily_averages(samples: Iterable[WeightSample]) -> list[tuple[date, float]]:
    """
    Group samples by calendar day and average each day in lbs.

    Returns:
        List of (day, average_lbs) tuples, oldest day first
    """
    by_day: dict[date, list[float]] = defaultdict(list)
    for sample in samples:
        by_day[sample.day].append(sample.weight_in(WeightUnit.LB))

    return [(day, sum(values) / len(values)) for day, values in sorted(by_day.items())]


def calculate_daily_ewma(
    samples: Iterable[WeightSample],
    smoothing: float = DEFAULT_SMOOTHING,
) -> list[TrendPoint]:
    """
    Smooth the per-day average weight, one trend point per calendar day.

    Multiple weigh-ins on the same day are averaged first, so the output can
    be shorter than the input.

    Args:
        samples: Weight samples (any order, any unit)
        smoothing: Smoothing factor λ in (0, 1], default 0.1

    Returns:
        Trend points, one per logged day, oldest first
    """
    validate_smoothing(smoothing)
    days = daily_averages(samples)
    smoothed = smooth_series([weight for _, weight in days], smoothing)

    return [
        TrendPoint(date=day, raw_weight=weight, smoothed_weight=trend)
        for (day, weight), trend in zip(days, smoothed)
    ]


def exponential_moving_average(
    samples: Iterable[WeightSample],
    span: int = DEFAULT_SPAN,
) -> list[TrendPoint]:
    """Per-day EMA parameterised by span instead of λ (α = 2 / (span + 1))."""
    return calculate_daily_ewma(samples, span_to_smoothing(span))


def with_trend_rates(points: Sequence[TrendPoint]) -> list[TrendPoint]:
    """
    Fill in `trend_rate` from successive smoothed values.

    The rate for point i is the change in smoothed weight since point i-1
    divided by the days between them. The first point, and any point sharing
    a date with its predecessor, keeps a rate of None.

    Args:
        points: Trend points in chronological order

    Returns:
        New trend points with `trend_rate` set where it can be computed
    """
    result: list[TrendPoint] = []
    for i, point in enumerate(points):
        rate = None
        if i > 0:
            prev = points[i - 1]
            days_between = (point.date - prev.date).days
            if days_between > 0:
                rate = (point.smoothed_weight - prev.smoothed_weight) / days_between
            else:
                logger.debug("No trend rate for %s: same day as previous point", point.date)
        result.append(replace(point, trend_rate=rate))
    return result
