"""Pay-period schedule generation.

Three cadence modes:

canonical
    Back-to-back periods of period_length_days. The cutoff is the last day
    of the period and the invoice is due the next day.

weekday
    Manual weekly/bi-weekly setup with an explicit cutoff weekday and
    submission weekday. The cutoff is the first cutoff weekday on or after
    the start of the period's final week. Submission is the first
    submission weekday on or after the cutoff; when that is the cutoff day
    itself it moves to the following week, so an invoice is never due on
    the day logging closes.

custom
    A single period whose cutoff and submission dates are given verbatim.

Schedules are plain lists of PayPeriod, ordered by work_start.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .inputs import DateLike, InvalidInputError, format_validation_errors, parse_date
from .schemas import PayPeriod, WeekdayConfig

logger = logging.getLogger(__name__)

# Bi-weekly, one year of periods
DEFAULT_PERIOD_LENGTH_DAYS = 14
DEFAULT_PERIOD_COUNT = 26
DEFAULT_UPCOMING_HORIZON_DAYS = 30

# Furthest a submission or payday can land past the last cutoff
DEADLINE_SLACK_DAYS = 21

MODES = ("canonical", "weekday", "custom")

WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

PAYDAY_WEEKDAY = WEEKDAYS["friday"]

# (month, day) of the Canadian federal holidays that fall on fixed dates
STATUTORY_HOLIDAYS = (
    (1, 1),    # New Year's Day
    (7, 1),    # Canada Day
    (12, 25),  # Christmas Day
    (12, 26),  # Boxing Day
)


class ScheduleConfigError(ValueError):
    """Raised when a cadence or weekday configuration cannot produce a schedule."""
    pass


# =============================================================================
# Date helpers
# =============================================================================


def resolve_weekday(value: Union[int, str, None], name: str = "weekday") -> int:
    """Resolve a weekday name, abbreviation or number to 0=Monday..6=Sunday.

    Raises:
        ScheduleConfigError: If the value does not name a weekday.
    """
    if isinstance(value, bool) or value is None:
        raise ScheduleConfigError(f"{name}: unresolvable weekday {value!r}")
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise ScheduleConfigError(f"{name}: weekday number must be 0 (Monday) to 6 (Sunday), got {value}")
    if isinstance(value, str):
        key = value.strip().lower()
        if key.isdigit():
            return resolve_weekday(int(key), name)
        if key in WEEKDAYS:
            return WEEKDAYS[key]
        if len(key) >= 3:
            for day_name, number in WEEKDAYS.items():
                if day_name.startswith(key):
                    return number
    raise ScheduleConfigError(f"{name}: unresolvable weekday {value!r}")


def next_weekday_on_or_after(day: date, weekday: int) -> date:
    """First date on or after `day` that falls on `weekday`."""
    return day + timedelta(days=(weekday - day.weekday()) % 7)


def is_statutory_holiday(day: date) -> bool:
    return (day.month, day.day) in STATUTORY_HOLIDAYS


def adjust_payment_date(day: date) -> date:
    """Move a payment date past weekends and statutory holidays."""
    while day.weekday() >= 5 or is_statutory_holiday(day):
        day += timedelta(days=1)
    return day


def payment_date_for(cutoff_date: date) -> date:
    """Payday: the Friday after the cutoff, adjusted to a business day."""
    days_until_friday = (PAYDAY_WEEKDAY - cutoff_date.weekday()) % 7 or 7
    return adjust_payment_date(cutoff_date + timedelta(days=days_until_friday))


def _as_date(value: Union[DateLike, None]) -> date:
    if value is None:
        return datetime.now().date()
    return parse_date(value, "now")


# =============================================================================
# Schedule generation
# =============================================================================


def _check_positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ScheduleConfigError(f"{name} must be a whole number >= 1, got {value!r}")
    return value


def _period(
    number: int,
    work_start: date,
    cutoff_date: date,
    submission_date: date,
    days_in_period: int,
    period_type: Optional[str] = None,
) -> PayPeriod:
    if period_type is None:
        period_type = "initial" if number == 1 else "regular"
    return PayPeriod(
        period_number=number,
        work_start=work_start,
        cutoff_date=cutoff_date,
        submission_date=submission_date,
        type=period_type,
        payment_date=payment_date_for(cutoff_date),
        days_in_period=days_in_period,
    )


def _check_fits_calendar(start: date, length: int, count: int) -> None:
    if (date.max - start).days < count * length + DEADLINE_SLACK_DAYS:
        raise ScheduleConfigError(
            f"{count} periods of {length} days from {start} run past the end of the calendar"
        )


def _canonical_periods(start: date, length: int, count: int) -> List[PayPeriod]:
    periods = []
    for k in range(1, count + 1):
        work_start = start + timedelta(days=(k - 1) * length)
        cutoff = work_start + timedelta(days=length - 1)
        periods.append(_period(k, work_start, cutoff, cutoff + timedelta(days=1), length))
    return periods


def _weekday_periods(start: date, length: int, count: int, config: WeekdayConfig) -> List[PayPeriod]:
    if length % 7 != 0:
        raise ScheduleConfigError(
            f"weekday mode needs a period length that is a whole number of weeks, got {length} days"
        )
    cutoff_weekday = resolve_weekday(config.cutoff_weekday, "cutoff_weekday")
    submission_weekday = resolve_weekday(config.submission_weekday, "submission_weekday")

    periods = []
    for k in range(1, count + 1):
        work_start = start + timedelta(days=(k - 1) * length)
        final_week_start = work_start + timedelta(days=length - 7)
        cutoff = next_weekday_on_or_after(final_week_start, cutoff_weekday)
        submission = next_weekday_on_or_after(cutoff, submission_weekday)
        if submission == cutoff:
            # Never due the same day logging closes
            submission += timedelta(days=7)
        periods.append(_period(k, work_start, cutoff, submission, length))
    return periods


def _custom_period(start: date, config: WeekdayConfig) -> List[PayPeriod]:
    if config.cutoff_date is None or config.submission_date is None:
        raise ScheduleConfigError("custom mode needs both cutoff_date and submission_date")
    if config.cutoff_date < start:
        raise ScheduleConfigError(
            f"cutoff_date ({config.cutoff_date}) is before the start date ({start})"
        )
    if config.submission_date <= config.cutoff_date:
        raise ScheduleConfigError(
            f"submission_date ({config.submission_date}) must be after cutoff_date ({config.cutoff_date})"
        )
    days = (config.cutoff_date - start).days + 1
    return [_period(1, start, config.cutoff_date, config.submission_date, days, "custom")]


def generate_schedule(
    start_date: DateLike,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
    period_count: int = DEFAULT_PERIOD_COUNT,
    mode: str = "canonical",
    weekday_config: Optional[Union[WeekdayConfig, Mapping[str, Any]]] = None,
) -> List[PayPeriod]:
    """Generate an ordered list of pay periods.

    Args:
        start_date: First day of work (date, datetime or YYYY-MM-DD).
        period_length_days: Days per period (14 for bi-weekly).
        period_count: Number of periods to generate (ignored in custom mode).
        mode: "canonical", "weekday" or "custom".
        weekday_config: WeekdayConfig (or dict) for weekday/custom modes.

    Returns:
        Periods with strictly increasing work_start.

    Raises:
        ScheduleConfigError: For an unusable cadence, weekday or custom config.
        InvalidInputError: If start_date cannot be parsed.

    Example:
        generate_schedule("2024-01-01", 14, 3) ->
        2024-01-01..01-14 (submit 01-15), 01-15..01-28 (submit 01-29),
        01-29..02-11 (submit 02-12)
    """
    start = parse_date(start_date, "start_date")

    if mode not in MODES:
        raise ScheduleConfigError(f"Unknown schedule mode {mode!r}. Use one of: {', '.join(MODES)}")

    if weekday_config is None:
        config = WeekdayConfig()
    elif isinstance(weekday_config, WeekdayConfig):
        config = weekday_config
    else:
        try:
            config = WeekdayConfig.model_validate(dict(weekday_config))
        except ValidationError as e:
            raise ScheduleConfigError("; ".join(format_validation_errors(e))) from e

    try:
        if mode == "custom":
            return _custom_period(start, config)

        length = _check_positive_int(period_length_days, "period_length_days")
        count = _check_positive_int(period_count, "period_count")
        _check_fits_calendar(start, length, count)

        if mode == "weekday":
            return _weekday_periods(start, length, count, config)
        return _canonical_periods(start, length, count)
    except OverflowError as e:
        raise ScheduleConfigError(f"schedule runs past the end of the calendar ({e})") from e


def resolve_schedule(
    start_date: DateLike,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
    period_count: int = DEFAULT_PERIOD_COUNT,
    mode: str = "canonical",
    weekday_config: Optional[Union[WeekdayConfig, Mapping[str, Any]]] = None,
) -> Tuple[List[PayPeriod], bool]:
    """Generate a schedule, falling back to the default bi-weekly cadence.

    Setup flows should always end with a schedule; an unusable manual
    configuration is logged and replaced rather than aborting setup.

    Returns:
        Tuple of (periods, used_fallback).

    Raises:
        InvalidInputError: If start_date cannot be parsed, or is too close
            to the end of the calendar for even the default schedule.
    """
    try:
        return generate_schedule(start_date, period_length_days, period_count, mode, weekday_config), False
    except ScheduleConfigError as e:
        logger.warning(f"Schedule config rejected ({e}); using default bi-weekly cadence")

    try:
        periods = generate_schedule(start_date, DEFAULT_PERIOD_LENGTH_DAYS, period_count, "canonical")
    except ScheduleConfigError:
        try:
            periods = generate_schedule(start_date, DEFAULT_PERIOD_LENGTH_DAYS, DEFAULT_PERIOD_COUNT, "canonical")
        except ScheduleConfigError as e:
            raise InvalidInputError([f"start_date: {e}"]) from e
    return periods, True


# =============================================================================
# Queries
# =============================================================================


def current_period(schedule: List[PayPeriod], now: Optional[DateLike] = None) -> Optional[PayPeriod]:
    """Return the period whose [work_start, cutoff_date] contains `now`, else None."""
    today = _as_date(now)
    for period in schedule:
        if period.work_start <= today <= period.cutoff_date:
            return period
    return None


def next_period(schedule: List[PayPeriod], now: Optional[DateLike] = None) -> Optional[PayPeriod]:
    """Return the first period whose work_start is after `now`, else None."""
    today = _as_date(now)
    for period in schedule:
        if period.work_start > today:
            return period
    return None


def work_days(period: PayPeriod) -> int:
    """Weekdays (Monday to Friday) from work_start to cutoff_date inclusive."""
    total = (period.cutoff_date - period.work_start).days + 1
    full_weeks, remainder = divmod(total, 7)
    first = period.work_start.weekday()
    return full_weeks * 5 + sum(1 for i in range(remainder) if (first + i) % 7 < 5)


def upcoming_deadlines(
    schedule: List[PayPeriod],
    now: Optional[DateLike] = None,
    horizon_days: int = DEFAULT_UPCOMING_HORIZON_DAYS,
) -> List[PayPeriod]:
    """Periods whose submission date falls in (now, now + horizon_days], soonest first."""
    today = _as_date(now)
    horizon = today + timedelta(days=horizon_days)
    due = [p for p in schedule if today < p.submission_date <= horizon]
    return sorted(due, key=lambda p: p.submission_date)


def format_period(period: PayPeriod) -> str:
    """Human-readable summary of one period."""
    lines = [
        f"Period {period.period_number}: {period.work_start.isoformat()} - "
        f"{period.cutoff_date.isoformat()} ({period.days_in_period} days, "
        f"{work_days(period)} work days, {period.type})",
        f"    Submit by: {period.submission_date.isoformat()}",
    ]
    if period.payment_date:
        lines.append(f"    Payment: {period.payment_date.isoformat()}")
    return "\n".join(lines)
