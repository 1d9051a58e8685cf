"""Week-by-week summaries of a weight history.

Samples are grouped into calendar weeks (Sunday start by default). Each week
with at least one weigh-in gets its average, the change from the previous
week's average and its lightest weigh-in. Only the most recent weeks are
summarized, newest first.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from weighttrend.tracking.ema import sort_samples
from weighttrend.tracking.models import WeightSample
from weighttrend.units import WeightUnit

logger = logging.getLogger(__name__)

# Weekday numbers as returned by date.weekday()
MONDAY = 0
SUNDAY = 6

# Week-over-week changes smaller than this (in the display unit) are stable
STABLE_THRESHOLD = 0.5

# Only this many of the most recent calendar weeks are considered
MAX_WEEKS = 12


class WeeklyTrend(Enum):
    """Direction of the week-over-week change in average weight."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


def _average(samples: tuple[WeightSample, ...], unit: WeightUnit) -> Optional[float]:
    if not samples:
        return None
    return sum(s.weight_in(unit) for s in samples) / len(samples)


@dataclass(frozen=True)
class WeeklySummary:
    """
    Statistics for one calendar week.

    Attributes:
        week_start: First day of the week
        week_end: Last day of the week (week_start + 6 days)
        entries: Weigh-ins in the week, oldest first
        previous_week_entries: Weigh-ins in the week before, oldest first
        unit: Unit all derived values are reported in
    """

    week_start: date
    week_end: date
    entries: tuple[WeightSample, ...]
    previous_week_entries: tuple[WeightSample, ...]
    unit: WeightUnit

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def average_weight(self) -> Optional[float]:
        return _average(self.entries, self.unit)

    @property
    def previous_week_average(self) -> Optional[float]:
        return _average(self.previous_week_entries, self.unit)

    @property
    def change_from_last_week(self) -> Optional[float]:
        """This week's average minus last week's, or None if either is missing."""
        current = self.average_weight
        previous = self.previous_week_average
        if current is None or previous is None:
            return None
        return current - previous

    @property
    def best_day(self) -> Optional[tuple[datetime, float]]:
        """Timestamp and weight of the lightest weigh-in (earliest on ties)."""
        if not self.entries:
            return None
        best = min(self.entries, key=lambda s: s.weight_in(self.unit))
        return best.timestamp, best.weight_in(self.unit)

    @property
    def trend(self) -> WeeklyTrend:
        change = self.change_from_last_week
        if change is None or abs(change) < STABLE_THRESHOLD:
            return WeeklyTrend.STABLE
        return WeeklyTrend.DOWN if change < 0 else WeeklyTrend.UP


def week_start_for(day: date, first_weekday: int = SUNDAY) -> date:
    """
    First day of the week containing `day`.

    Example:
        >>> week_start_for(date(2026, 1, 1))  # a Thursday
        datetime.date(2025, 12, 28)
    """
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)


def weekly_summaries(
    samples: Iterable[WeightSample],
    unit: WeightUnit,
    first_weekday: int = SUNDAY,
    max_weeks: int = MAX_WEEKS,
) -> list[WeeklySummary]:
    """
    Summarize the most recent calendar weeks of a weight history.

    The window is the `max_weeks` calendar weeks ending with the week of the
    newest weigh-in. Weeks in that window without weigh-ins are skipped, so
    fewer than `max_weeks` summaries may come back.

    Args:
        samples: Weight samples in any order and any unit
        unit: Unit for averages, changes and best-day weights
        first_weekday: Weekday a week starts on (SUNDAY or MONDAY, 0-6)
        max_weeks: Number of calendar weeks to consider

    Returns:
        WeeklySummary list, newest week first
    """
    if not 0 <= first_weekday <= 6:
        raise ValueError(f"first_weekday must be in 0..6, got {first_weekday}")
    if max_weeks < 1:
        raise ValueError(f"max_weeks must be a positive integer, got {max_weeks}")

    ordered = sort_samples(samples)
    if not ordered:
        return []

    by_week: dict[date, list[WeightSample]] = defaultdict(list)
    for sample in ordered:
        by_week[week_start_for(sample.day, first_weekday)].append(sample)

    newest_week = week_start_for(ordered[-1].day, first_weekday)
    oldest_week = week_start_for(ordered[0].day, first_weekday)

    summaries = []
    week = newest_week
    for _ in range(max_weeks):
        if week < oldest_week:
            break
        entries = by_week.get(week)
        if entries:
            previous = by_week.get(week - timedelta(weeks=1), [])
            summaries.append(
                WeeklySummary(
                    week_start=week,
                    week_end=week + timedelta(days=6),
                    entries=tuple(entries),
                    previous_week_entries=tuple(previous),
                    unit=unit,
                )
            )
        week -= timedelta(weeks=1)

    logger.debug("Summarized %d of %d logged weeks", len(summaries), len(by_week))
    return summaries
