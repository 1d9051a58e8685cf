"""Tests for goal date prediction."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import numpy as np
import pytest

from weighttrend.tracking.prediction import (
    GoalPredictionStatus,
    PredictionState,
    fit_line,
    predict_goal_date,
)
from weighttrend.units import WeightUnit


class TestFitLine:
    """Tests for the least-squares helper."""

    def test_exact_line(self) -> None:
        """A perfect line is recovered."""
        x = np.array([0.0, 1.0, 2.0, 3.0])
        y = 200.0 - 0.5 * x
        slope, intercept = fit_line(x, y)
        assert slope == pytest.approx(-0.5)
        assert intercept == pytest.approx(200.0)

    def test_degenerate_x(self) -> None:
        """Identical x values have no fit."""
        assert fit_line(np.array([2.0, 2.0]), np.array([180.0, 181.0])) is None


class TestPredictGoalDate:
    """Tests for predict_goal_date function."""

    def test_no_samples(self) -> None:
        """Empty history is NO_DATA."""
        prediction = predict_goal_date([], 160.0, WeightUnit.LB)
        assert prediction is not None
        assert prediction.status.state is PredictionState.NO_DATA
        assert prediction.predicted_date is None
        assert prediction.weekly_velocity == 0.0
        assert prediction.weight_to_goal == 0.0

    def test_single_sample(self, make_samples) -> None:
        """One sample is not enough to fit a line."""
        prediction = predict_goal_date(make_samples([180.0]), 160.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.INSUFFICIENT_DATA
        assert prediction.weight_to_goal == pytest.approx(20.0)

    def test_under_an_hour_of_history(self, make_samples) -> None:
        """Samples minutes apart are not enough."""
        samples = make_samples([180.0, 179.0], step=timedelta(minutes=30))
        prediction = predict_goal_date(samples, 160.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.INSUFFICIENT_DATA

    def test_fewer_than_seven_days(self, make_samples) -> None:
        """A date needs seven logged days."""
        samples = make_samples([200.0, 199.0, 198.0, 197.0, 196.0])
        prediction = predict_goal_date(samples, 180.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.INSUFFICIENT_DATA
        assert prediction.predicted_date is None
        assert prediction.weekly_velocity == pytest.approx(-7.0)

    def test_at_goal_before_day_count(self, make_samples) -> None:
        """Being within tolerance wins even with only a few days logged."""
        samples = make_samples([161.0, 160.6, 160.3])
        prediction = predict_goal_date(samples, 160.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.AT_GOAL
        assert prediction.weight_to_goal == pytest.approx(0.3)

    def test_at_goal_kg_tolerance(self, make_samples) -> None:
        """kg tolerance is 0.25."""
        samples = make_samples([71.0, 70.5, 70.2], unit=WeightUnit.KG)
        prediction = predict_goal_date(samples, 70.0, WeightUnit.KG)
        assert prediction.status.state is PredictionState.AT_GOAL

    def test_outside_kg_tolerance(self, make_samples) -> None:
        """0.3 kg away is not at goal."""
        samples = make_samples([71.0, 70.5, 70.3], unit=WeightUnit.KG)
        prediction = predict_goal_date(samples, 70.0, WeightUnit.KG)
        assert prediction.status.state is PredictionState.INSUFFICIENT_DATA

    def test_wrong_direction(self, make_samples) -> None:
        """Gaining on a loss goal."""
        samples = make_samples([180.0 + i for i in range(10)])
        prediction = predict_goal_date(samples, 170.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.WRONG_DIRECTION
        assert prediction.weekly_velocity == pytest.approx(7.0)

    def test_wrong_direction_when_gaining(self, make_samples) -> None:
        """Losing on a gain goal."""
        samples = make_samples([140.0 - 0.2 * i for i in range(10)])
        prediction = predict_goal_date(samples, 150.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.WRONG_DIRECTION

    def test_flat_is_too_slow(self, make_samples) -> None:
        """A flat line never reaches the goal."""
        samples = make_samples([200.0] * 10)
        prediction = predict_goal_date(samples, 180.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.TOO_SLOW

    def test_too_slow(self, make_samples) -> None:
        """More than two years away."""
        samples = make_samples([200.0 - 0.01 * i for i in range(10)])
        prediction = predict_goal_date(samples, 150.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.TOO_SLOW
        assert prediction.predicted_date is None

    def test_on_track(self, make_samples) -> None:
        """Line meets the goal on a known date."""
        samples = make_samples([200.0 - 0.5 * i for i in range(14)])
        prediction = predict_goal_date(samples, 190.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.ON_TRACK
        # Line hits 190 twenty days after the first sample
        assert prediction.predicted_date == datetime(2026, 1, 21, 7, 0)
        assert prediction.status.date == prediction.predicted_date
        assert prediction.weekly_velocity == pytest.approx(-3.5)
        assert prediction.weight_to_goal == pytest.approx(3.5)
        assert prediction.status.message == "On track to reach goal by Jan 21, 2026"

    def test_on_track_gaining(self, make_samples) -> None:
        """Gain goals are predicted the same way."""
        samples = make_samples([150.0 + 0.5 * i for i in range(14)])
        prediction = predict_goal_date(samples, 160.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.ON_TRACK
        assert prediction.predicted_date == datetime(2026, 1, 21, 7, 0)
        assert prediction.weight_to_goal == pytest.approx(-3.5)

    def test_line_already_past_goal(self, make_samples) -> None:
        """A line that met the goal before the latest sample predicts that sample's date."""
        # Steady loss to 188, then a rebound to 195: the fitted line reaches
        # 190 around day 11.8, before the last sample on day 13.
        samples = make_samples([200.0 - i for i in range(13)] + [195.0])
        prediction = predict_goal_date(samples, 190.0, WeightUnit.LB)
        assert prediction.status.state is PredictionState.ON_TRACK
        assert prediction.predicted_date == datetime(2026, 1, 14, 7, 0)
        assert prediction.predicted_date == samples[-1].timestamp
        assert prediction.weight_to_goal == pytest.approx(5.0)
        assert prediction.weekly_velocity == pytest.approx(-27 / 35 * 7)

    def test_unsorted_input(self, make_samples) -> None:
        """Input order does not matter."""
        samples = make_samples([200.0 - 0.5 * i for i in range(14)])
        prediction = predict_goal_date(list(reversed(samples)), 190.0, WeightUnit.LB)
        assert prediction.predicted_date == datetime(2026, 1, 21, 7, 0)

    def test_kg_goal(self, make_samples) -> None:
        """Velocity and distance are reported in kg."""
        samples = make_samples([90.0 - 0.2 * i for i in range(14)], unit=WeightUnit.KG)
        prediction = predict_goal_date(samples, 85.0, WeightUnit.KG)
        assert prediction.status.state is PredictionState.ON_TRACK
        assert prediction.unit is WeightUnit.KG
        assert prediction.weekly_velocity == pytest.approx(-1.4)
        assert prediction.weight_to_goal == pytest.approx(2.4)
        assert prediction.predicted_date.date() == date(2026, 1, 26)

    def test_lb_samples_kg_goal(self, make_samples) -> None:
        """lb samples are converted to the goal unit."""
        samples = make_samples([200.0 - 0.5 * i for i in range(14)])
        prediction = predict_goal_date(samples, 190.0 * 0.453592, WeightUnit.KG)
        assert prediction.weekly_velocity == pytest.approx(-3.5 * 0.453592)
        assert prediction.predicted_date.date() == date(2026, 1, 21)


class TestGoalPredictionStatus:
    """Tests for status construction and messages."""

    def test_on_track_requires_date(self) -> None:
        """ON_TRACK without a date is invalid."""
        with pytest.raises(ValueError):
            GoalPredictionStatus(PredictionState.ON_TRACK)

    def test_other_states_reject_date(self) -> None:
        """Only ON_TRACK carries a date."""
        with pytest.raises(ValueError):
            GoalPredictionStatus(PredictionState.TOO_SLOW, datetime(2026, 3, 1))

    @pytest.mark.parametrize(
        "status,message",
        [
            (GoalPredictionStatus.at_goal(), "You've reached your goal!"),
            (GoalPredictionStatus.wrong_direction(), "Currently moving away from goal"),
            (GoalPredictionStatus.too_slow(), "At current pace, goal is over 2 years away"),
            (GoalPredictionStatus.insufficient_data(), "Keep logging to see goal prediction"),
            (GoalPredictionStatus.no_data(), "Start logging to track progress"),
        ],
    )
    def test_messages(self, status: GoalPredictionStatus, message: str) -> None:
        """Fixed messages for dateless states."""
        assert status.message == message

    def test_on_track_message(self) -> None:
        """ON_TRACK formats its date."""
        status = GoalPredictionStatus.on_track(datetime(2026, 3, 5, 9, 30))
        assert status.message == "On track to reach goal by Mar 5, 2026"

    def test_is_positive(self) -> None:
        """Only at-goal and on-track are encouraging."""
        assert GoalPredictionStatus.at_goal().is_positive
        assert GoalPredictionStatus.on_track(datetime(2026, 3, 5)).is_positive
        assert not GoalPredictionStatus.wrong_direction().is_positive
        assert not GoalPredictionStatus.too_slow().is_positive
        assert not GoalPredictionStatus.insufficient_data().is_positive
        assert not GoalPredictionStatus.no_data().is_positive
