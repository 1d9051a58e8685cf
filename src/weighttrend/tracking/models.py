"""Data models for weight samples and trend output."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from weighttrend.units import WeightUnit, convert


@dataclass(frozen=True)
class WeightSample:
    """A single weigh-in as recorded by the user."""

    timestamp: datetime
    weight_value: float
    unit: WeightUnit = WeightUnit.LB

    def weight_in(self, unit: WeightUnit) -> float:
        """Return the weight converted to `unit`."""
        return convert(self.weight_value, self.unit, unit)

    @property
    def day(self) -> date:
        """Calendar day the sample was taken on."""
        return self.timestamp.date()


@dataclass(frozen=True)
class TrendPoint:
    """
    One point on the trend line: the raw weight and its smoothed value.

    Weights are stored in pounds regardless of how they were entered; use
    the `*_in` accessors to read them in a display unit. `trend_rate` is the
    change in smoothed weight per day (lbs/day) and is not part of equality.
    """

    date: date
    raw_weight: float
    smoothed_weight: float
    trend_rate: Optional[float] = field(default=None, compare=False)

    def raw_weight_in(self, unit: WeightUnit) -> float:
        return convert(self.raw_weight, WeightUnit.LB, unit)

    def smoothed_weight_in(self, unit: WeightUnit) -> float:
        return convert(self.smoothed_weight, WeightUnit.LB, unit)

    def trend_rate_in(self, unit: WeightUnit) -> Optional[float]:
        if self.trend_rate is None:
            return None
        return convert(self.trend_rate, WeightUnit.LB, unit)


@dataclass(frozen=True)
class HoltResult:
    """Final level and per-day trend from Holt's double exponential smoothing."""

    level: float  # lbs
    trend: float  # lbs/day
    last_date: date

    def forecast(self, days_ahead: float) -> float:
        """
        Extrapolate the trend line.

        Args:
            days_ahead: Days past `last_date` (0 returns the level itself)

        Returns:
            Forecast weight in lbs
        """
        return self.level + self.trend * days_ahead
