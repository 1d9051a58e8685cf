"""Goal date prediction from a least-squares line through recent weigh-ins.

The model is weight = slope × days + intercept, where days is the time since
the first sample. The predicted goal date is where that line meets the goal
weight. Weekly velocity is simply slope × 7.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from weighttrend.tracking.ema import sort_samples
from weighttrend.tracking.models import WeightSample
from weighttrend.units import WeightUnit

logger = logging.getLogger(__name__)

# First and last sample must be at least this far apart. Two entries logged
# seconds apart give a near-vertical regression line.
MIN_TIMESPAN = timedelta(hours=1)

# Distinct logged days needed before a date is shown
MIN_DISTINCT_DAYS = 7

# Predictions further out than this are reported as too slow
MAX_DAYS_TO_GOAL = 730.0

# Within this distance of the goal counts as reached
GOAL_TOLERANCE = {
    WeightUnit.LB: 0.5,
    WeightUnit.KG: 0.25,
}


class PredictionState(Enum):
    """Outcome category of a goal prediction."""

    ON_TRACK = "on_track"
    AT_GOAL = "at_goal"
    WRONG_DIRECTION = "wrong_direction"
    TOO_SLOW = "too_slow"
    INSUFFICIENT_DATA = "insufficient_data"
    NO_DATA = "no_data"


@dataclass(frozen=True)
class GoalPredictionStatus:
    """
    Prediction status. Only ON_TRACK carries a payload (the predicted date).

    Build instances with the classmethods, e.g. `GoalPredictionStatus.on_track(d)`.
    """

    state: PredictionState
    date: Optional[datetime] = None

    def __post_init__(self) -> None:
        if (self.state is PredictionState.ON_TRACK) != (self.date is not None):
            raise ValueError("A date is required for on_track and only for on_track")

    @classmethod
    def on_track(cls, date: datetime) -> "GoalPredictionStatus":
        return cls(PredictionState.ON_TRACK, date)

    @classmethod
    def at_goal(cls) -> "GoalPredictionStatus":
        return cls(PredictionState.AT_GOAL)

    @classmethod
    def wrong_direction(cls) -> "GoalPredictionStatus":
        return cls(PredictionState.WRONG_DIRECTION)

    @classmethod
    def too_slow(cls) -> "GoalPredictionStatus":
        return cls(PredictionState.TOO_SLOW)

    @classmethod
    def insufficient_data(cls) -> "GoalPredictionStatus":
        return cls(PredictionState.INSUFFICIENT_DATA)

    @classmethod
    def no_data(cls) -> "GoalPredictionStatus":
        return cls(PredictionState.NO_DATA)

    @property
    def message(self) -> str:
        """User-facing one-line description."""
        if self.state is PredictionState.ON_TRACK and self.date is not None:
            when = f"{self.date:%b} {self.date.day}, {self.date.year}"
            return f"On track to reach goal by {when}"
        return _STATUS_MESSAGES[self.state]

    @property
    def is_positive(self) -> bool:
        """Whether this is an encouraging status."""
        return self.state in (PredictionState.AT_GOAL, PredictionState.ON_TRACK)


_STATUS_MESSAGES = {
    PredictionState.AT_GOAL: "You've reached your goal!",
    PredictionState.WRONG_DIRECTION: "Currently moving away from goal",
    PredictionState.TOO_SLOW: "At current pace, goal is over 2 years away",
    PredictionState.INSUFFICIENT_DATA: "Keep logging to see goal prediction",
    PredictionState.NO_DATA: "Start logging to track progress",
}


@dataclass(frozen=True)
class GoalPrediction:
    """Result of goal date prediction."""

    predicted_date: Optional[datetime]
    weekly_velocity: float  # unit/week, negative = losing
    status: GoalPredictionStatus
    weight_to_goal: float  # current - goal: positive = need to lose
    unit: WeightUnit


def fit_line(x: np.ndarray, y: np.ndarray) -> Optional[tuple[float, float]]:
    """
    Ordinary least squares fit of y = slope × x + intercept.

    Uses the normal equations directly:
        slope = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)
        intercept = (Σy - slope × Σx) / n

    Returns:
        (slope, intercept), or None if all x values coincide
    """
    n = len(x)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_xx = float(np.sum(x * x))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def predict_goal_date(
    samples: Iterable[WeightSample],
    goal_weight: float,
    unit: WeightUnit,
) -> Optional[GoalPrediction]:
    """
    Predict when the goal weight will be reached at the current pace.

    Checks run in this order: no samples, too little history (fewer than 2
    samples or under an hour between first and last), at goal, fewer than
    7 distinct days, wrong direction, too slow, on track.

    Args:
        samples: Weight samples in any order and any unit
        goal_weight: Target weight in `unit`
        unit: Unit for the goal, velocity and weight_to_goal

    Returns:
        GoalPrediction, or None when the regression is degenerate
    """
    ordered = sort_samples(samples)
    if not ordered:
        return GoalPrediction(None, 0.0, GoalPredictionStatus.no_data(), 0.0, unit)

    current_weight = ordered[-1].weight_in(unit)
    weight_to_goal = current_weight - goal_weight

    if len(ordered) < 2 or ordered[-1].timestamp - ordered[0].timestamp < MIN_TIMESPAN:
        logger.debug("Not enough history to fit a goal line (%d samples)", len(ordered))
        return GoalPrediction(
            None, 0.0, GoalPredictionStatus.insufficient_data(), weight_to_goal, unit
        )

    start = ordered[0].timestamp
    days = np.array([(s.timestamp - start) / timedelta(days=1) for s in ordered])
    weights = np.array([s.weight_in(unit) for s in ordered])

    fit = fit_line(days, weights)
    if fit is None:
        logger.debug("Degenerate regression, no goal prediction")
        return None
    slope, intercept = fit
    weekly_velocity = slope * 7

    def result(status: GoalPredictionStatus, date: Optional[datetime] = None) -> GoalPrediction:
        return GoalPrediction(date, weekly_velocity, status, weight_to_goal, unit)

    if abs(weight_to_goal) <= GOAL_TOLERANCE[unit]:
        return result(GoalPredictionStatus.at_goal())

    if len({s.day for s in ordered}) < MIN_DISTINCT_DAYS:
        return result(GoalPredictionStatus.insufficient_data())

    need_to_lose = weight_to_goal > 0
    if (need_to_lose and slope > 0) or (not need_to_lose and slope < 0):
        return result(GoalPredictionStatus.wrong_direction())

    if slope == 0:
        return result(GoalPredictionStatus.too_slow())

    # Days since the first sample at which the line hits the goal. If the
    # line is already past the goal, predict the latest sample's date.
    goal_day = (goal_weight - intercept) / slope
    days_remaining = max(0.0, goal_day - float(days[-1]))
    if days_remaining > MAX_DAYS_TO_GOAL:
        return result(GoalPredictionStatus.too_slow())

    predicted = ordered[-1].timestamp + timedelta(days=days_remaining)
    return result(GoalPredictionStatus.on_track(predicted), predicted)
