"""Weight trend smoothing and forecasting.

This module implements Hacker's Diet-style exponentially smoothed moving
average (EWMA) for weight trend lines, Holt's double exponential smoothing
for short-term forecasts, and a least-squares goal date predictor.

Key components:
- EWMA trend calculation (10% smoothing, ~10 day time constant)
- Holt level + trend forecaster (α=0.3, β=0.1)
- Goal prediction with on-track / wrong-direction / too-slow statuses
- Weekly summaries (average, change from last week, best day)
"""

from __future__ import annotations

from weighttrend.tracking.ema import (
    DEFAULT_SMOOTHING,
    calculate_daily_ewma,
    calculate_ewma,
    exponential_moving_average,
    with_trend_rates,
)
from weighttrend.tracking.holt import calculate_holt
from weighttrend.tracking.models import HoltResult, TrendPoint, WeightSample
from weighttrend.tracking.prediction import (
    GoalPrediction,
    GoalPredictionStatus,
    PredictionState,
    predict_goal_date,
)
from weighttrend.tracking.summary import WeeklySummary, WeeklyTrend, weekly_summaries

__all__ = [
    "DEFAULT_SMOOTHING",
    "GoalPrediction",
    "GoalPredictionStatus",
    "HoltResult",
    "PredictionState",
    "TrendPoint",
    "WeeklySummary",
    "WeeklyTrend",
    "WeightSample",
    "calculate_daily_ewma",
    "calculate_ewma",
    "calculate_holt",
    "exponential_moving_average",
    "predict_goal_date",
    "weekly_summaries",
    "with_trend_rates",
]
