"""taxes - GST breakdowns for contractor work.

Scope:
- Daily breakdown: taxable labour/equipment, 5% GST, non-taxable reimbursements
- Consistency checks for breakdowns supplied by other systems
- Period totals and annual GST planning helpers

Constraints:
- Pure calculation - no storage, no clock, no config files
- Fixed Alberta regime (GST only, no PST)

Usage:
    from fieldpay.sdk.taxes import compute_daily_breakdown

    breakdown = compute_daily_breakdown({"dayRate": 450, "dayRateUsed": True})
"""

from .gst import (
    GST_RATE,
    PST_RATE,
    TOTAL_TAX_RATE,
    TRAVEL_RATE_PER_KM,
    TOLERANCE,
    gst_on,
    compute_daily_breakdown,
    validate_breakdown,
    sum_breakdowns,
    annual_gst_estimate,
    format_gst_number,
)

__all__ = [
    "GST_RATE",
    "PST_RATE",
    "TOTAL_TAX_RATE",
    "TRAVEL_RATE_PER_KM",
    "TOLERANCE",
    "gst_on",
    "compute_daily_breakdown",
    "validate_breakdown",
    "sum_breakdowns",
    "annual_gst_estimate",
    "format_gst_number",
]
