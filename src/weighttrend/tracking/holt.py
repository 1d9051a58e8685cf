"""Holt's double exponential smoothing for weight forecasting.

Holt's method tracks two quantities: a level (where the weight is now) and
a trend (how fast it is moving). Unlike the plain EMA, it can extrapolate:

    level_i = α × W_i + (1 - α) × (level_{i-1} + trend_{i-1})
    trend_i = β × (level_i - level_{i-1}) + (1 - β) × trend_{i-1}
    forecast(h) = level + h × trend

The state is seeded from the first two weigh-ins (level = W_0,
trend = W_1 - W_0), so at least two samples are needed. The trend is per
entry; with one weigh-in per day that is lbs/day.

Every weight is converted to lbs before it enters the recurrence. Mixing a
kg entry into a lb history without converting it reads as a 100-lb jump.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from weighttrend.tracking.ema import sort_samples, validate_smoothing
from weighttrend.tracking.models import HoltResult, WeightSample
from weighttrend.units import WeightUnit

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.3  # level smoothing
DEFAULT_BETA = 0.1  # trend smoothing


@dataclass
class HoltSmoother:
    """
    Running Holt state.

    Attributes:
        level: Current level estimate (lbs)
        trend: Current trend estimate (lbs per entry)
        alpha: Level smoothing factor in (0, 1]
        beta: Trend smoothing factor in (0, 1]
    """

    level: float
    trend: float
    alpha: float = DEFAULT_ALPHA
    beta: float = DEFAULT_BETA

    def __post_init__(self) -> None:
        validate_smoothing(self.alpha, "alpha")
        validate_smoothing(self.beta, "beta")

    @classmethod
    def from_first_two(
        cls,
        first: float,
        second: float,
        alpha: float = DEFAULT_ALPHA,
        beta: float = DEFAULT_BETA,
    ) -> "HoltSmoother":
        """Seed level and trend from the first two observations."""
        return cls(level=first, trend=second - first, alpha=alpha, beta=beta)

    def update(self, weight: float) -> None:
        """Fold one observation (lbs) into the level and trend."""
        prev_level = self.level
        self.level = self.alpha * weight + (1 - self.alpha) * (prev_level + self.trend)
        self.trend = self.beta * (self.level - prev_level) + (1 - self.beta) * self.trend


def calculate_holt(
    samples: Iterable[WeightSample],
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
) -> Optional[HoltResult]:
    """
    Run Holt's method over a weight history.

    Args:
        samples: Weight samples in any order and any unit
        alpha: Level smoothing factor, default 0.3
        beta: Trend smoothing factor, default 0.1

    Returns:
        HoltResult in lbs, or None with fewer than two samples
    """
    ordered = sort_samples(samples)
    if len(ordered) < 2:
        logger.debug("Holt forecast needs 2 samples, got %d", len(ordered))
        return None

    weights = [s.weight_in(WeightUnit.LB) for s in ordered]
    smoother = HoltSmoother.from_first_two(weights[0], weights[1], alpha=alpha, beta=beta)

    # Index 0 only seeds the state; the recurrence starts at index 1
    for weight in weights[1:]:
        smoother.update(weight)

    return HoltResult(level=smoother.level, trend=smoother.trend, last_date=ordered[-1].day)
