"""Field Pay SDK - GST breakdowns, pay-period schedules and trial analytics."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_profile_path,
    load_profile,
    save_profile,
    load_contractor_profile,
    default_profile,
    get_data_path,
    ProfileNotFoundError,
    ProfileValidationError,
)

from .money import (
    ZERO,
    CENT,
    to_decimal,
    round_cents,
)

from .schemas import (
    DailyWorkData,
    DailyEntry,
    TaxBreakdown,
    BreakdownValidation,
    PayPeriod,
    WeekdayConfig,
    TrialWindow,
    PerformanceThresholds,
    PerformanceMetrics,
    BestDay,
    AggregateSummary,
    ClientCheckResult,
    CheckInResult,
    ContractorProfile,
    RateCard,
    ScheduleSettings,
)

from .inputs import (
    InvalidInputError,
    parse_work_payload,
    normalize_work_payload,
    parse_date,
)

from .taxes import (
    GST_RATE,
    TRAVEL_RATE_PER_KM,
    compute_daily_breakdown,
    validate_breakdown,
    sum_breakdowns,
    annual_gst_estimate,
    format_gst_number,
)

from .schedule import (
    ScheduleConfigError,
    generate_schedule,
    resolve_schedule,
    current_period,
    upcoming_deadlines,
    next_period,
    work_days,
    format_period,
)

from .aggregation import (
    make_trial_window,
    current_trial_day,
    aggregate,
)

from .guard import (
    ToleranceMismatchWarning,
    check_against_client,
)

from .entries import (
    EntryRepository,
    InMemoryEntryRepository,
    JsonEntryRepository,
)

from .checkin import (
    submit_daily_entry,
    collect_entries,
    build_dashboard,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "load_contractor_profile",
    "default_profile",
    "get_data_path",
    "ProfileNotFoundError",
    "ProfileValidationError",
    # Money
    "ZERO",
    "CENT",
    "to_decimal",
    "round_cents",
    # Schemas
    "DailyWorkData",
    "DailyEntry",
    "TaxBreakdown",
    "BreakdownValidation",
    "PayPeriod",
    "WeekdayConfig",
    "TrialWindow",
    "PerformanceThresholds",
    "PerformanceMetrics",
    "BestDay",
    "AggregateSummary",
    "ClientCheckResult",
    "CheckInResult",
    "ContractorProfile",
    "RateCard",
    "ScheduleSettings",
    # Inputs
    "InvalidInputError",
    "parse_work_payload",
    "normalize_work_payload",
    "parse_date",
    # Taxes
    "GST_RATE",
    "TRAVEL_RATE_PER_KM",
    "compute_daily_breakdown",
    "validate_breakdown",
    "sum_breakdowns",
    "annual_gst_estimate",
    "format_gst_number",
    # Schedule
    "ScheduleConfigError",
    "generate_schedule",
    "resolve_schedule",
    "current_period",
    "upcoming_deadlines",
    "next_period",
    "work_days",
    "format_period",
    # Aggregation
    "make_trial_window",
    "current_trial_day",
    "aggregate",
    # Guard
    "ToleranceMismatchWarning",
    "check_against_client",
    # Entry store
    "EntryRepository",
    "InMemoryEntryRepository",
    "JsonEntryRepository",
    # Check-in
    "submit_daily_entry",
    "collect_entries",
    "build_dashboard",
]
