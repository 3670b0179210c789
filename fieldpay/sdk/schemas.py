"""Pydantic schemas for field-pay data.

Result schemas use extra='forbid' and are frozen: they are computed fresh
for each request and never mutated. Input schemas accept the camelCase keys
sent by the check-in form as well as snake_case names.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .money import ZERO, to_decimal

STANDARD_TRAVEL_RATE_PER_KM = Decimal("0.68")
STANDARD_HOURS_PER_DAY = Decimal("8")

# Per-field ceiling for a single day (dollars, km or hours)
MAX_WORK_VALUE = Decimal("100000")

# Accepted payload keys per field. The first entry is the canonical name.
WORK_FIELD_ALIASES: Dict[str, tuple] = {
    "worked": ("worked", "workedToday", "worked_today"),
    "day_rate": ("day_rate", "dayRate"),
    "day_rate_used": ("day_rate_used", "dayRateUsed"),
    "truck_rate": ("truck_rate", "truckRate"),
    "truck_used": ("truck_used", "truckUsed"),
    "travel_kms": ("travel_kms", "travelKms", "travelKMs"),
    "rate_per_km": ("rate_per_km", "ratePerKm", "travelRatePerKm"),
    "subsistence": ("subsistence",),
    "additional_charges": ("additional_charges", "additionalCharges"),
    "hours_worked": ("hours_worked", "hoursWorked"),
}

WORK_NUMERIC_FIELDS = (
    "day_rate",
    "truck_rate",
    "travel_kms",
    "rate_per_km",
    "subsistence",
    "additional_charges",
    "hours_worked",
)


def _aliases(name: str) -> AliasChoices:
    return AliasChoices(*WORK_FIELD_ALIASES[name])


# =============================================================================
# Daily work inputs
# =============================================================================


class DailyWorkData(BaseModel):
    """One day's raw work inputs for a contractor.

    Every amount and quantity is a non-negative Decimal. A day that was not
    worked still validates, but contributes nothing to any total.
    """

    # Check-in payloads carry notes, location, photos etc. that are not ours
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    worked: bool = Field(default=True, validation_alias=_aliases("worked"))
    day_rate: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE, validation_alias=_aliases("day_rate"))
    day_rate_used: bool = Field(default=False, validation_alias=_aliases("day_rate_used"))
    truck_rate: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE, validation_alias=_aliases("truck_rate"))
    truck_used: bool = Field(default=False, validation_alias=_aliases("truck_used"))
    travel_kms: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE, validation_alias=_aliases("travel_kms"))
    rate_per_km: Decimal = Field(
        default=STANDARD_TRAVEL_RATE_PER_KM, ge=0, lt=MAX_WORK_VALUE,
        validation_alias=_aliases("rate_per_km"),
        description="Travel reimbursement per km (CRA guideline rate by default)",
    )
    subsistence: Decimal = Field(
        default=ZERO, ge=0, lt=MAX_WORK_VALUE, validation_alias=_aliases("subsistence"),
        description="Non-taxable per-diem for food and lodging",
    )
    additional_charges: Decimal = Field(
        default=ZERO, ge=0, lt=MAX_WORK_VALUE, validation_alias=_aliases("additional_charges"),
        description="Incidental reimbursable charges; not subject to GST",
    )
    hours_worked: Decimal = Field(
        default=STANDARD_HOURS_PER_DAY, ge=0, lt=MAX_WORK_VALUE, validation_alias=_aliases("hours_worked"),
    )

    @field_validator(*WORK_NUMERIC_FIELDS, mode="before")
    @classmethod
    def coerce_number(cls, value: Any, info: ValidationInfo) -> Any:
        """Missing values take the field default; everything else must be numeric."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return to_decimal(value)


class DailyEntry(BaseModel):
    """A logged day: the work inputs plus the calendar date they belong to."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    entry_date: date
    work: DailyWorkData


# =============================================================================
# Tax breakdown
# =============================================================================


class TaxBreakdown(BaseModel):
    """GST breakdown for one day (or a sum of days).

    Deliberately unconstrained so externally supplied breakdowns can be
    loaded and then checked with validate_breakdown().
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    taxable_subtotal: Decimal = Field(..., description="Labour + equipment subject to GST")
    gst_amount: Decimal = Field(..., description="5% GST on the taxable subtotal")
    after_tax_subtotal: Decimal
    travel_reimbursement: Decimal
    non_taxable_total: Decimal = Field(..., description="Travel + subsistence + additional charges")
    grand_total: Decimal

    # Line items, informational
    day_rate_total: Decimal = ZERO
    truck_rate_total: Decimal = ZERO
    subsistence: Decimal = ZERO
    additional_charges: Decimal = ZERO

    @field_validator("*", mode="before")
    @classmethod
    def coerce_number(cls, value: Any) -> Decimal:
        return to_decimal(value)

    @classmethod
    def zero(cls) -> "TaxBreakdown":
        """Breakdown for a day that was not worked."""
        return cls(
            taxable_subtotal=ZERO,
            gst_amount=ZERO,
            after_tax_subtotal=ZERO,
            travel_reimbursement=ZERO,
            non_taxable_total=ZERO,
            grand_total=ZERO,
        )


class BreakdownValidation(BaseModel):
    """Result of validate_breakdown."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# Pay periods
# =============================================================================

PeriodType = Literal["initial", "regular", "custom"]
ScheduleMode = Literal["canonical", "weekday", "custom"]


class PayPeriod(BaseModel):
    """One pay period: when work starts, when logging closes, when to invoice."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    period_number: int = Field(..., ge=1)
    work_start: date
    cutoff_date: date = Field(..., description="Last day work can be logged")
    submission_date: date = Field(..., description="Invoice submission deadline")
    type: PeriodType
    payment_date: Optional[date] = Field(
        None, description="Expected payday, moved past weekends and statutory holidays"
    )
    days_in_period: int = Field(..., ge=1)


class WeekdayConfig(BaseModel):
    """Manual cadence settings.

    weekday mode uses cutoff_weekday/submission_weekday (names like
    "thursday" or 0=Monday..6=Sunday). custom mode uses the explicit dates.
    """

    model_config = ConfigDict(extra="forbid")

    cutoff_weekday: Optional[Union[int, str]] = None
    submission_weekday: Optional[Union[int, str]] = None
    cutoff_date: Optional[date] = None
    submission_date: Optional[date] = None


# =============================================================================
# Trial analytics
# =============================================================================


class TrialWindow(BaseModel):
    """Fixed-length evaluation window (typically 15 days)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    start_date: date
    end_date: date
    total_days: int = Field(..., ge=1)

    @model_validator(mode="after")
    def check_order(self) -> "TrialWindow":
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) is before start_date ({self.start_date})"
            )
        return self


class PerformanceThresholds(BaseModel):
    """Cutoffs for the qualitative performance buckets."""

    model_config = ConfigDict(extra="forbid")

    consistency_excellent_days: int = Field(default=10, ge=1)
    consistency_good_days: int = Field(default=5, ge=1)
    productivity_high: Decimal = Field(default=Decimal("600"), ge=0)
    productivity_moderate: Decimal = Field(default=Decimal("400"), ge=0)
    on_track_projection: Decimal = Field(default=Decimal("5000"), ge=0)


class PerformanceMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    consistency: Literal["excellent", "good", "fair", "not_started"]
    productivity: Literal["high", "moderate", "low", "none"]
    on_track: bool


class BestDay(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    entry_date: date
    earnings: Decimal


class AggregateSummary(BaseModel):
    """Dashboard roll-up over a trial window."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_earned: Decimal
    days_worked: int
    current_day: int
    trial_days_remaining: int
    projected_total: Decimal
    average_daily_earnings: Decimal
    completion_rate: Decimal = Field(..., description="Percent of elapsed days worked, 0-100")
    weekly_series: List[Decimal] = Field(
        ..., description="Grand total per calendar date from the window start (max 15)"
    )
    best_day: Optional[BestDay]
    efficiency_score: int = Field(..., ge=0, le=100)
    total_hours: Decimal
    avg_hours_per_day: Decimal
    performance_metrics: PerformanceMetrics


# =============================================================================
# Client total check and check-in results
# =============================================================================


class ClientCheckResult(BaseModel):
    """Server-side recomputation compared with a client-submitted total."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    matches: bool
    delta: Decimal = Field(..., description="client_total - server_total")
    server_total: Decimal = Field(..., description="Authoritative total to use")
    client_total: Decimal


class CheckInResult(BaseModel):
    """Outcome of submitting one day's log."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    trial_id: str
    entry_date: date
    work: DailyWorkData
    breakdown: TaxBreakdown
    client_check: Optional[ClientCheckResult] = None
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# Profile (profile.yaml)
# =============================================================================


class RateCard(BaseModel):
    """Contractor's standing rates, used as check-in defaults."""

    model_config = ConfigDict(extra="forbid")

    day_rate: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE)
    truck_rate: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE)
    rate_per_km: Decimal = Field(default=STANDARD_TRAVEL_RATE_PER_KM, ge=0, lt=MAX_WORK_VALUE)
    travel_kms: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE)
    subsistence: Decimal = Field(default=ZERO, ge=0, lt=MAX_WORK_VALUE)


class ScheduleSettings(BaseModel):
    """Preferred pay-period cadence."""

    model_config = ConfigDict(extra="forbid")

    mode: ScheduleMode = "canonical"
    period_length_days: int = 14
    period_count: int = 26
    cutoff_weekday: Optional[Union[int, str]] = None
    submission_weekday: Optional[Union[int, str]] = None


class ContractorProfile(BaseModel):
    """Validated contents of profile.yaml."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    gst_number: Optional[str] = None
    rates: RateCard = Field(default_factory=RateCard)
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    performance: PerformanceThresholds = Field(default_factory=PerformanceThresholds)
