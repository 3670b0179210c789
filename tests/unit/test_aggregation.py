"""Unit tests for trial dashboard aggregation."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from fieldpay.sdk.aggregation import (
    aggregate,
    classify_performance,
    current_trial_day,
    efficiency_score,
    make_trial_window,
)
from fieldpay.sdk.inputs import InvalidInputError
from fieldpay.sdk.schemas import DailyEntry, DailyWorkData, PerformanceThresholds


def make_entry(day: date, **work) -> DailyEntry:
    return DailyEntry(entry_date=day, work=DailyWorkData.model_validate(work))


def six_hundred_day(day: date) -> DailyEntry:
    """Day rate 500 + 5% GST + 75 subsistence = 600.00."""
    return make_entry(day, day_rate=500, day_rate_used=True, subsistence=75)


@pytest.fixture
def window():
    """15-day trial starting 2024-01-01."""
    return make_trial_window("2024-01-01", "2024-01-16")


@pytest.fixture
def ten_days():
    return [six_hundred_day(date(2024, 1, 1) + timedelta(days=i)) for i in range(10)]


class TestTrialWindow:

    def test_total_days(self, window):
        assert window.total_days == 15
        assert window.start_date == date(2024, 1, 1)

    def test_partial_day_rounds_up(self):
        assert make_trial_window("2024-01-01T00:00:00", "2024-01-15T06:00:00").total_days == 15

    def test_end_must_follow_start(self):
        with pytest.raises(InvalidInputError):
            make_trial_window("2024-01-10", "2024-01-10")

    def test_current_trial_day_is_clamped(self, window):
        assert current_trial_day(window, "2023-12-25") == 1
        assert current_trial_day(window, "2024-01-01T15:00:00") == 1
        assert current_trial_day(window, "2024-01-10") == 10
        assert current_trial_day(window, "2024-03-01") == 15


class TestAggregate:

    def test_ten_days_of_six_hundred(self, window, ten_days):
        summary = aggregate(window, ten_days, now="2024-01-16")

        assert summary.total_earned == Decimal("6000.00")
        assert summary.days_worked == 10
        assert summary.average_daily_earnings == Decimal("600.00")
        assert summary.projected_total == Decimal("9000.00")
        assert summary.current_day == 15
        assert summary.trial_days_remaining == 0
        assert summary.completion_rate == Decimal("66.67")

    def test_series_and_best_day(self, window, ten_days):
        summary = aggregate(window, ten_days, now="2024-01-16")

        assert len(summary.weekly_series) == 15
        assert summary.weekly_series[:10] == [Decimal("600.00")] * 10
        assert summary.weekly_series[10:] == [Decimal("0")] * 5
        # Ties keep the earliest date
        assert summary.best_day.entry_date == date(2024, 1, 1)
        assert summary.best_day.earnings == Decimal("600.00")

    def test_best_day_is_highest_total(self, window):
        entries = [
            make_entry(date(2024, 1, 5), day_rate=500, day_rate_used=True, subsistence=75),
            make_entry(date(2024, 1, 1), day_rate=400, day_rate_used=True),
            make_entry(date(2024, 1, 4), day_rate=800, day_rate_used=True),
            make_entry(date(2024, 1, 3), day_rate=800, day_rate_used=True),
            six_hundred_day(date(2024, 1, 2)),
        ]

        summary = aggregate(window, entries, now="2024-01-06")

        assert summary.best_day.entry_date == date(2024, 1, 3)
        assert summary.best_day.earnings == Decimal("840.00")

    def test_best_day_tie_after_lower_day_keeps_earliest(self, window):
        entries = [
            make_entry(date(2024, 1, 1), day_rate=400, day_rate_used=True),
            six_hundred_day(date(2024, 1, 3)),
            six_hundred_day(date(2024, 1, 2)),
        ]

        summary = aggregate(window, entries, now="2024-01-04")

        assert summary.best_day.entry_date == date(2024, 1, 2)
        assert summary.best_day.earnings == Decimal("600.00")

    def test_hours_and_efficiency(self, window, ten_days):
        summary = aggregate(window, ten_days, now="2024-01-10")

        assert summary.total_hours == Decimal("80.00")
        assert summary.avg_hours_per_day == Decimal("8.00")
        assert summary.completion_rate == Decimal("100.00")
        assert summary.efficiency_score == 100

    def test_performance_metrics(self, window, ten_days):
        metrics = aggregate(window, ten_days, now="2024-01-16").performance_metrics

        assert metrics.consistency == "excellent"
        assert metrics.productivity == "high"
        assert metrics.on_track is True

    def test_empty_input_is_all_zero(self, window):
        summary = aggregate(window, [], now="2024-01-05")

        assert summary.total_earned == Decimal("0")
        assert summary.days_worked == 0
        assert summary.average_daily_earnings == Decimal("0")
        assert summary.projected_total == Decimal("0")
        assert summary.completion_rate == Decimal("0")
        assert summary.best_day is None
        assert summary.weekly_series == [Decimal("0")] * 15
        assert summary.performance_metrics.consistency == "not_started"
        assert summary.performance_metrics.productivity == "none"
        assert summary.performance_metrics.on_track is False

    def test_not_worked_days_count_as_zero(self, window):
        entries = [
            six_hundred_day(date(2024, 1, 1)),
            make_entry(date(2024, 1, 2), worked=False, day_rate=500, day_rate_used=True),
        ]

        summary = aggregate(window, entries, now="2024-01-02")

        assert summary.days_worked == 1
        assert summary.total_earned == Decimal("600.00")
        assert summary.completion_rate == Decimal("50.00")

    def test_order_does_not_matter(self, window, ten_days):
        forward = aggregate(window, ten_days, now="2024-01-16")
        backward = aggregate(window, list(reversed(ten_days)), now="2024-01-16")

        assert forward == backward

    def test_completion_rate_is_capped(self, window, ten_days):
        summary = aggregate(window, ten_days, now="2024-01-02")

        assert summary.current_day == 2
        assert summary.completion_rate == Decimal("100.00")

    def test_duplicate_dates_raise(self, window):
        entries = [six_hundred_day(date(2024, 1, 1)), six_hundred_day(date(2024, 1, 1))]

        with pytest.raises(InvalidInputError):
            aggregate(window, entries, now="2024-01-05")

    def test_rate_override(self, window):
        entries = [make_entry(date(2024, 1, 1), travel_kms=100)]

        default = aggregate(window, entries, now="2024-01-02")
        overridden = aggregate(window, entries, rate_per_km="0.50", now="2024-01-02")

        assert default.total_earned == Decimal("68.00")
        assert overridden.total_earned == Decimal("50.00")

    def test_negative_rate_override_raises(self, window):
        entries = [make_entry(date(2024, 1, 1), travel_kms=100)]

        with pytest.raises(InvalidInputError):
            aggregate(window, entries, rate_per_km="-1", now="2024-01-02")

    @pytest.mark.parametrize("rate", ["fast", "1E+27", "100000"])
    def test_unusable_rate_override_raises(self, window, rate):
        entries = [make_entry(date(2024, 1, 1), travel_kms=100)]

        with pytest.raises(InvalidInputError):
            aggregate(window, entries, rate_per_km=rate, now="2024-01-02")

    def test_short_window_series(self):
        window = make_trial_window("2024-01-01", "2024-01-06")

        summary = aggregate(window, [six_hundred_day(date(2024, 1, 3))], now="2024-01-04")

        assert summary.weekly_series == [Decimal("0"), Decimal("0"), Decimal("600.00"), Decimal("0"), Decimal("0")]

    def test_idempotent(self, window, ten_days):
        assert aggregate(window, ten_days, now="2024-01-08") == aggregate(window, ten_days, now="2024-01-08")


class TestPerformanceBuckets:

    @pytest.mark.parametrize("days,expected", [(0, "not_started"), (1, "fair"), (5, "good"), (10, "excellent")])
    def test_consistency(self, days, expected):
        metrics = classify_performance(days, Decimal("0"), Decimal("0"))

        assert metrics.consistency == expected

    @pytest.mark.parametrize("average,expected", [("0", "none"), ("150", "low"), ("400", "moderate"), ("600", "high")])
    def test_productivity(self, average, expected):
        metrics = classify_performance(1, Decimal(average), Decimal("0"))

        assert metrics.productivity == expected

    def test_custom_thresholds(self):
        thresholds = PerformanceThresholds(on_track_projection=Decimal("10000"))

        metrics = classify_performance(10, Decimal("600"), Decimal("9000"), thresholds)

        assert metrics.on_track is False

    def test_efficiency_score_bounds(self):
        assert efficiency_score(Decimal("0"), Decimal("0")) == 20
        assert efficiency_score(Decimal("100"), Decimal("12")) == 100
        assert efficiency_score(Decimal("50"), Decimal("4")) == 60
