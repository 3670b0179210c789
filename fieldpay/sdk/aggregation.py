"""Trial dashboard analytics.

Rolls a sparse set of logged days up into the numbers shown on the trial
dashboard: earnings to date, projection over the window, completion rate,
a per-day earnings series, best day, an efficiency score and qualitative
performance buckets.

Every figure is derived from compute_daily_breakdown(), so the dashboard
always agrees with check-in and invoice totals.
"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Union

from .inputs import DateLike, InvalidInputError, parse_datetime, parse_work_payload
from .money import HUNDRED, ZERO, round_cents, round_whole, to_decimal
from .schemas import (
    STANDARD_HOURS_PER_DAY,
    AggregateSummary,
    BestDay,
    DailyEntry,
    PerformanceMetrics,
    PerformanceThresholds,
    TrialWindow,
)
from .taxes import compute_daily_breakdown

SECONDS_PER_DAY = 86400

# Days shown in the earnings series
SERIES_MAX_DAYS = 15

# Efficiency score weights
COMPLETION_WEIGHT = Decimal("0.4")
HOURS_WEIGHT = Decimal("40")
BASELINE_POINTS = Decimal("20")


def make_trial_window(start: DateLike, end: DateLike) -> TrialWindow:
    """Build a TrialWindow; total_days is the elapsed time rounded up to whole days.

    Raises:
        InvalidInputError: If either bound is unparsable or end is not after start.
    """
    start_dt = parse_datetime(start, "start_date")
    end_dt = parse_datetime(end, "end_date")
    seconds = (end_dt - start_dt).total_seconds()
    if seconds <= 0:
        raise InvalidInputError([f"end_date ({end}) must be after start_date ({start})"])
    return TrialWindow(
        start_date=start_dt.date(),
        end_date=end_dt.date(),
        total_days=math.ceil(seconds / SECONDS_PER_DAY),
    )


def current_trial_day(window: TrialWindow, now: Optional[DateLike] = None) -> int:
    """1-based day of the trial, clamped to [1, total_days]."""
    now_dt = datetime.now() if now is None else parse_datetime(now, "now")
    start_dt = datetime(window.start_date.year, window.start_date.month, window.start_date.day)
    elapsed_days = math.floor((now_dt - start_dt).total_seconds() / SECONDS_PER_DAY)
    return max(1, min(elapsed_days + 1, window.total_days))


def classify_performance(
    days_worked: int,
    average_daily_earnings: Decimal,
    projected_total: Decimal,
    thresholds: Optional[PerformanceThresholds] = None,
) -> PerformanceMetrics:
    """Bucket the headline numbers into consistency / productivity / on-track."""
    t = thresholds or PerformanceThresholds()

    if days_worked >= t.consistency_excellent_days:
        consistency = "excellent"
    elif days_worked >= t.consistency_good_days:
        consistency = "good"
    elif days_worked >= 1:
        consistency = "fair"
    else:
        consistency = "not_started"

    if average_daily_earnings >= t.productivity_high:
        productivity = "high"
    elif average_daily_earnings >= t.productivity_moderate:
        productivity = "moderate"
    elif average_daily_earnings > 0:
        productivity = "low"
    else:
        productivity = "none"

    return PerformanceMetrics(
        consistency=consistency,
        productivity=productivity,
        on_track=projected_total >= t.on_track_projection,
    )


def efficiency_score(completion_rate: Decimal, avg_hours_per_day: Decimal) -> int:
    """0-100 score: completion (40 pts), hours vs an 8h day (40 pts), plus 20 baseline."""
    hours_ratio = min(avg_hours_per_day / STANDARD_HOURS_PER_DAY, Decimal(1))
    score = completion_rate * COMPLETION_WEIGHT + hours_ratio * HOURS_WEIGHT + BASELINE_POINTS
    return round_whole(min(HUNDRED, score))


def aggregate(
    window: TrialWindow,
    entries: Sequence[DailyEntry],
    rate_per_km: Union[Decimal, float, str, None] = None,
    now: Optional[DateLike] = None,
    thresholds: Optional[PerformanceThresholds] = None,
) -> AggregateSummary:
    """Summarise logged days over a trial window.

    Args:
        window: The trial window.
        entries: At most one entry per date, in any order. Not-worked days
            may be included; they count as zero.
        rate_per_km: If given, overrides each entry's travel rate.
        now: Clock value for the current trial day. Defaults to now.
        thresholds: Performance bucket cutoffs (defaults if None).

    Returns:
        AggregateSummary. Empty input gives zero totals and a 0 completion rate.

    Raises:
        InvalidInputError: For duplicate dates or invalid entry inputs.
    """
    override_rate = None
    if rate_per_km is not None:
        try:
            override_rate = to_decimal(rate_per_km)
        except ValueError as e:
            raise InvalidInputError([f"rate_per_km: {e}"]) from e

    ordered = sorted(entries, key=lambda e: e.entry_date)
    seen = set()
    for entry in ordered:
        if entry.entry_date in seen:
            raise InvalidInputError([f"more than one entry for {entry.entry_date.isoformat()}"])
        seen.add(entry.entry_date)

    worked: List[tuple] = []
    for entry in ordered:
        work = entry.work
        if not work.worked:
            continue
        if override_rate is not None:
            work = parse_work_payload(work.model_copy(update={"rate_per_km": override_rate}))
        worked.append((entry, work, compute_daily_breakdown(work)))

    days_worked = len(worked)
    total_earned = sum((b.grand_total for _, _, b in worked), ZERO)
    total_hours = sum((w.hours_worked for _, w, _ in worked), ZERO)

    if days_worked:
        average = total_earned / days_worked
        avg_hours = total_hours / days_worked
    else:
        average = ZERO
        avg_hours = ZERO

    current_day = current_trial_day(window, now)
    if current_day > 0:
        completion = min(Decimal(days_worked) / Decimal(current_day) * HUNDRED, HUNDRED)
    else:
        completion = ZERO

    totals_by_date: Dict[date, Decimal] = {entry.entry_date: b.grand_total for entry, _, b in worked}
    series_days = min(window.total_days, SERIES_MAX_DAYS)
    weekly_series = [
        totals_by_date.get(window.start_date + timedelta(days=i), ZERO)
        for i in range(series_days)
    ]

    best_day: Optional[BestDay] = None
    for entry, _, breakdown in worked:
        # Strictly greater keeps the earliest date on ties
        if best_day is None or breakdown.grand_total > best_day.earnings:
            best_day = BestDay(entry_date=entry.entry_date, earnings=breakdown.grand_total)

    projected_total = round_cents(average * window.total_days)
    average_daily = round_cents(average)

    return AggregateSummary(
        total_earned=round_cents(total_earned),
        days_worked=days_worked,
        current_day=current_day,
        trial_days_remaining=max(window.total_days - current_day, 0),
        projected_total=projected_total,
        average_daily_earnings=average_daily,
        completion_rate=round_cents(completion),
        weekly_series=weekly_series,
        best_day=best_day,
        efficiency_score=efficiency_score(completion, avg_hours),
        total_hours=round_cents(total_hours),
        avg_hours_per_day=round_cents(avg_hours),
        performance_metrics=classify_performance(
            days_worked, average_daily, projected_total, thresholds
        ),
    )
