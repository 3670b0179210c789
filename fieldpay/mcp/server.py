"""Field Pay MCP Server - FastMCP implementation for GST and pay-period tools."""

import logging
from datetime import timedelta
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from fieldpay.sdk import (
    JsonEntryRepository,
    ProfileValidationError,
    WeekdayConfig,
    build_dashboard,
    check_against_client,
    compute_daily_breakdown,
    current_period,
    load_contractor_profile,
    make_trial_window,
    next_period,
    parse_date,
    resolve_schedule,
    submit_daily_entry,
    upcoming_deadlines,
    validate_breakdown,
    work_days,
)

logger = logging.getLogger(__name__)

TRIAL_LENGTH_DAYS = 15

# Initialize FastMCP server
mcp = FastMCP("field-pay")


# --- Tools ---

@mcp.tool()
async def compute_breakdown(
    work: dict[str, Any] = Field(description=(
        "One day's work inputs: worked, dayRate, dayRateUsed, truckRate, truckUsed, "
        "travelKms, ratePerKm, subsistence, additionalCharges, hoursWorked "
        "(snake_case names also accepted)"
    )),
) -> dict[str, Any]:
    """Compute the Alberta GST breakdown (5% on day rate and truck only) for one day of work."""
    try:
        breakdown = compute_daily_breakdown(work)
        validation = validate_breakdown(breakdown)
        return {
            "breakdown": breakdown.model_dump(mode="json"),
            "warnings": validation.warnings,
        }
    except ValueError as e:
        logger.error(f"Error computing breakdown: {e}")
        return {"error": str(e), "breakdown": None}


@mcp.tool()
async def generate_pay_schedule(
    start_date: str = Field(description="First day of work (YYYY-MM-DD)"),
    period_length_days: int = Field(default=14, description="Days per period (14 = bi-weekly)"),
    period_count: int = Field(default=26, description="Number of periods to generate"),
    mode: str = Field(default="canonical", description="'canonical', 'weekday' or 'custom'"),
    cutoff_weekday: str | None = Field(default=None, description="Weekday logging closes (weekday mode)"),
    submission_weekday: str | None = Field(default=None, description="Weekday invoices are due (weekday mode)"),
    cutoff_date: str | None = Field(default=None, description="Cutoff date YYYY-MM-DD (custom mode)"),
    submission_date: str | None = Field(default=None, description="Submission date YYYY-MM-DD (custom mode)"),
    today: str | None = Field(default=None, description="Reference date for current/upcoming (default: today)"),
) -> dict[str, Any]:
    """Generate pay periods with cutoff, submission and payment dates. Falls back to bi-weekly if the config is unusable."""
    try:
        weekday_config = WeekdayConfig(
            cutoff_weekday=cutoff_weekday,
            submission_weekday=submission_weekday,
            cutoff_date=parse_date(cutoff_date, "cutoff_date") if cutoff_date else None,
            submission_date=parse_date(submission_date, "submission_date") if submission_date else None,
        )
        periods, used_fallback = resolve_schedule(
            start_date, period_length_days, period_count, mode, weekday_config
        )
        now = parse_date(today, "today") if today else None
        current = current_period(periods, now)
        following = next_period(periods, now)
        return {
            "periods": [{**p.model_dump(mode="json"), "work_days": work_days(p)} for p in periods],
            "used_fallback": used_fallback,
            "current_period": current.model_dump(mode="json") if current else None,
            "next_period": following.period_number if following else None,
            "upcoming": [p.period_number for p in upcoming_deadlines(periods, now)],
        }
    except ValueError as e:
        logger.error(f"Error generating schedule: {e}")
        return {"error": str(e), "periods": []}


@mcp.tool()
async def check_client_total(
    work: dict[str, Any] = Field(description="The day's work inputs as submitted"),
    client_total: str = Field(description="Grand total the client computed"),
) -> dict[str, Any]:
    """Recompute a day's grand total server-side and compare it with the client's (tolerance $0.01)."""
    try:
        result = check_against_client(work, client_total)
        return result.model_dump(mode="json")
    except ValueError as e:
        logger.error(f"Error checking client total: {e}")
        return {"error": str(e)}


@mcp.tool()
async def submit_check_in(
    trial_id: str = Field(description="Trial identifier (letters, digits, '-' and '_')"),
    entry_date: str = Field(description="Date of the work (YYYY-MM-DD)"),
    work: dict[str, Any] = Field(description="The day's work inputs"),
    client_total: str | None = Field(default=None, description="Grand total shown to the user, if any"),
) -> dict[str, Any]:
    """Log one day of work for a trial. Re-submitting a date replaces the earlier entry."""
    try:
        result = submit_daily_entry(JsonEntryRepository(), trial_id, entry_date, work, client_total)
        return result.model_dump(mode="json")
    except ValueError as e:
        logger.error(f"Error submitting check-in: {e}")
        return {"error": str(e)}


@mcp.tool()
async def trial_dashboard(
    trial_id: str = Field(description="Trial identifier"),
    start_date: str = Field(description="Trial start date (YYYY-MM-DD)"),
    end_date: str | None = Field(default=None, description=f"Trial end date (default: start + {TRIAL_LENGTH_DAYS} days)"),
    rate_per_km: str | None = Field(default=None, description="Override the travel rate for every day"),
    today: str | None = Field(default=None, description="Reference date (default: today)"),
) -> dict[str, Any]:
    """Trial analytics: earnings to date, projection, completion rate, best day and performance buckets."""
    try:
        start = parse_date(start_date, "start_date")
        end = parse_date(end_date, "end_date") if end_date else start + timedelta(days=TRIAL_LENGTH_DAYS)
        summary = build_dashboard(
            JsonEntryRepository(),
            trial_id,
            make_trial_window(start, end),
            rate_per_km=rate_per_km,
            now=parse_date(today, "today") if today else None,
            thresholds=load_contractor_profile().performance,
        )
        return summary.model_dump(mode="json")
    except (ValueError, ProfileValidationError) as e:
        logger.error(f"Error building dashboard: {e}")
        return {"error": str(e)}


def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
