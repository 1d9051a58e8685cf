"""Tests for EWMA weight trend calculation."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from weighttrend.tracking.ema import (
    DEFAULT_SMOOTHING,
    calculate_daily_ewma,
    calculate_ewma,
    daily_averages,
    exponential_moving_average,
    smooth_series,
    span_to_smoothing,
    update_trend,
    with_trend_rates,
)
from weighttrend.tracking.models import TrendPoint, WeightSample
from weighttrend.units import WeightUnit


class TestUpdateTrend:
    """Tests for update_trend function."""

    def test_default_smoothing(self) -> None:
        """Default λ is 10%."""
        assert DEFAULT_SMOOTHING == 0.1
        assert update_trend(180.0, 182.0) == pytest.approx(180.2)

    def test_full_smoothing_returns_weight(self) -> None:
        """λ=1 must return today's weight exactly, not approximately."""
        assert update_trend(173.2, 171.5, smoothing=1.0) == 171.5

    def test_smooth_series(self) -> None:
        """First weight seeds the trend, later weights are blended in."""
        assert smooth_series([180.0, 182.0, 179.0]) == pytest.approx([180.0, 180.2, 180.08])

    def test_smooth_series_empty(self) -> None:
        """Empty input gives an empty series."""
        assert smooth_series([]) == []


class TestCalculateEwma:
    """Tests for calculate_ewma function."""

    def test_empty(self) -> None:
        """No samples, no trend points."""
        assert calculate_ewma([]) == []

    def test_single_sample_seeds_trend(self, make_samples) -> None:
        """One sample is its own trend value."""
        points = calculate_ewma(make_samples([180.0]))
        assert len(points) == 1
        assert points[0].raw_weight == 180.0
        assert points[0].smoothed_weight == 180.0

    def test_default_smoothing_sequence(self, make_samples) -> None:
        """Hand-computed λ=0.1 sequence."""
        points = calculate_ewma(make_samples([180.0, 182.0, 179.0]))
        assert [p.smoothed_weight for p in points] == pytest.approx([180.0, 180.2, 180.08])
        assert [p.raw_weight for p in points] == [180.0, 182.0, 179.0]

    def test_half_smoothing(self, make_samples) -> None:
        """Hand-computed λ=0.5 sequence."""
        points = calculate_ewma(make_samples([200.0, 190.0, 180.0]), smoothing=0.5)
        assert [p.smoothed_weight for p in points] == pytest.approx([200.0, 195.0, 187.5])

    def test_point_three_smoothing(self, make_samples) -> None:
        """Hand-computed λ=0.3 sequence."""
        # 0.3 * 170 + 0.7 * 180 = 177.0, then 0.3 * 175 + 0.7 * 177 = 176.4
        points = calculate_ewma(make_samples([180.0, 170.0, 175.0]), smoothing=0.3)
        assert [p.smoothed_weight for p in points] == pytest.approx([180.0, 177.0, 176.4])

    def test_full_smoothing_is_identity(self, make_samples) -> None:
        """λ=1 reproduces the raw weights exactly."""
        weights = [181.3, 179.9, 183.7, 180.1]
        points = calculate_ewma(make_samples(weights), smoothing=1.0)
        assert [p.smoothed_weight for p in points] == weights

    def test_one_point_per_sample(self, make_samples) -> None:
        """Same-day samples are not merged."""
        samples = make_samples([180.0, 182.0, 181.0], step=timedelta(hours=2))
        points = calculate_ewma(samples)
        assert len(points) == 3
        assert {p.date for p in points} == {date(2026, 1, 1)}

    def test_unsorted_input_is_sorted(self, make_samples) -> None:
        """Samples are smoothed in timestamp order."""
        samples = make_samples([180.0, 182.0, 179.0])
        shuffled = [samples[2], samples[0], samples[1]]
        points = calculate_ewma(shuffled)
        assert [p.date for p in points] == [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)]
        assert [p.smoothed_weight for p in points] == pytest.approx([180.0, 180.2, 180.08])

    def test_gap_treated_like_consecutive_days(self, make_samples) -> None:
        """A 9-day gap does not change the smoothing factor."""
        samples = make_samples([180.0, 190.0], step=timedelta(days=9))
        points = calculate_ewma(samples)
        assert points[1].smoothed_weight == pytest.approx(181.0)

    def test_kg_samples_normalized_to_lbs(self, make_samples) -> None:
        """kg entries are stored in lbs."""
        points = calculate_ewma(make_samples([100.0], unit=WeightUnit.KG))
        assert points[0].raw_weight == pytest.approx(220.462)

    def test_mixed_units(self) -> None:
        """lb and kg entries blend after normalization."""
        samples = [
            WeightSample(datetime(2026, 1, 1, 7), 180.0, WeightUnit.LB),
            WeightSample(datetime(2026, 1, 2, 7), 100.0, WeightUnit.KG),
        ]
        points = calculate_ewma(samples, smoothing=0.5)
        assert points[1].raw_weight == pytest.approx(220.462)
        assert points[1].smoothed_weight == pytest.approx(200.231)

    @pytest.mark.parametrize("smoothing", [0.0, -0.1, 1.5])
    def test_invalid_smoothing(self, make_samples, smoothing: float) -> None:
        """λ outside (0, 1] is rejected."""
        with pytest.raises(ValueError):
            calculate_ewma(make_samples([180.0]), smoothing=smoothing)

    def test_trend_rate_left_unset(self, make_samples) -> None:
        """calculate_ewma does not compute rates."""
        points = calculate_ewma(make_samples([180.0, 182.0]))
        assert all(p.trend_rate is None for p in points)


class TestDailyEwma:
    """Tests for per-day averaged EWMA."""

    def test_same_day_samples_averaged(self) -> None:
        """Two weigh-ins on one day collapse to their mean."""
        samples = [
            WeightSample(datetime(2026, 1, 1, 7), 180.0),
            WeightSample(datetime(2026, 1, 1, 21), 182.0),
        ]
        points = calculate_daily_ewma(samples)
        assert len(points) == 1
        assert points[0].raw_weight == pytest.approx(181.0)
        assert points[0].smoothed_weight == pytest.approx(181.0)

    def test_one_point_per_day(self) -> None:
        """Days are smoothed in order after averaging."""
        samples = [
            WeightSample(datetime(2026, 1, 2, 7), 184.0),
            WeightSample(datetime(2026, 1, 1, 7), 180.0),
            WeightSample(datetime(2026, 1, 1, 20), 182.0),
        ]
        points = calculate_daily_ewma(samples, smoothing=0.5)
        assert [p.date for p in points] == [date(2026, 1, 1), date(2026, 1, 2)]
        assert [p.raw_weight for p in points] == pytest.approx([181.0, 184.0])
        assert [p.smoothed_weight for p in points] == pytest.approx([181.0, 182.5])

    def test_daily_averages_mixed_units(self) -> None:
        """Daily averages are taken in lbs."""
        samples = [
            WeightSample(datetime(2026, 1, 1, 7), 100.0, WeightUnit.KG),
            WeightSample(datetime(2026, 1, 1, 19), 220.0, WeightUnit.LB),
        ]
        [(day, average)] = daily_averages(samples)
        assert day == date(2026, 1, 1)
        assert average == pytest.approx(220.231)

    def test_empty(self) -> None:
        """No samples, no daily points."""
        assert calculate_daily_ewma([]) == []


class TestSpanEma:
    """Tests for span-parameterised EMA."""

    def test_span_to_smoothing(self) -> None:
        """α = 2 / (span + 1)."""
        assert span_to_smoothing(10) == pytest.approx(2 / 11)
        assert span_to_smoothing(1) == 1.0

    def test_span_invalid(self) -> None:
        """Span below one is rejected."""
        with pytest.raises(ValueError):
            span_to_smoothing(0)

    def test_span_ten(self, make_samples) -> None:
        """Default span smooths with α = 2/11."""
        # α = 2/11: 2/11 * 111 + 9/11 * 100 = 102
        points = exponential_moving_average(make_samples([100.0, 111.0]))
        assert points[1].smoothed_weight == pytest.approx(102.0)

    def test_span_one_tracks_raw(self, make_samples) -> None:
        """Span 1 means α = 1."""
        points = exponential_moving_average(make_samples([180.0, 175.0, 190.0]), span=1)
        assert [p.smoothed_weight for p in points] == [180.0, 175.0, 190.0]


class TestTrendRates:
    """Tests for with_trend_rates function."""

    def test_rates_per_day(self) -> None:
        """Rate is the smoothed change divided by days elapsed."""
        samples = [
            WeightSample(datetime(2026, 1, 1, 7), 180.0),
            WeightSample(datetime(2026, 1, 2, 7), 184.0),
            WeightSample(datetime(2026, 1, 4, 7), 186.0),
        ]
        points = with_trend_rates(calculate_ewma(samples, smoothing=0.5))
        # smoothed: 180, 182, 184
        assert points[0].trend_rate is None
        assert points[1].trend_rate == pytest.approx(2.0)
        assert points[2].trend_rate == pytest.approx(1.0)

    def test_same_day_has_no_rate(self, make_samples) -> None:
        """Zero days between points leaves the rate unset."""
        samples = make_samples([180.0, 182.0], step=timedelta(hours=3))
        points = with_trend_rates(calculate_ewma(samples))
        assert points[1].trend_rate is None

    def test_rate_in_kg(self) -> None:
        """Rates convert like weights."""
        point = TrendPoint(date(2026, 1, 2), 180.0, 180.0, trend_rate=-1.0)
        assert point.trend_rate_in(WeightUnit.KG) == pytest.approx(-0.453592)

    def test_empty(self) -> None:
        """Empty series stays empty."""
        assert with_trend_rates([]) == []


class TestTrendPoint:
    """Tests for TrendPoint model."""

    def test_equality_ignores_trend_rate(self) -> None:
        """trend_rate does not take part in equality."""
        a = TrendPoint(date(2026, 1, 1), 180.0, 180.5, trend_rate=0.2)
        b = TrendPoint(date(2026, 1, 1), 180.0, 180.5)
        assert a == b

    def test_unit_accessors(self) -> None:
        """Stored lbs are converted on read."""
        point = TrendPoint(date(2026, 1, 1), 180.0, 180.0)
        assert point.raw_weight_in(WeightUnit.KG) == pytest.approx(81.6466, abs=1e-4)
        assert point.smoothed_weight_in(WeightUnit.LB) == 180.0
        assert point.trend_rate_in(WeightUnit.KG) is None
