"""Alberta GST calculations for daily contractor work.

Alberta tax structure:
- GST: 5% federal goods and services tax
- PST: none (Alberta has no provincial sales tax)

Only labour (day rate) and equipment (truck rate) are taxable. Travel,
subsistence and additional charges are reimbursements and carry no GST.

This module is the single source of truth for the tax math used by the
check-in, dashboard and setup flows.
"""

import re
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Union

from pydantic import ValidationError

from ..inputs import format_validation_errors, parse_work_payload
from ..money import CENT, ZERO, round_cents
from ..schemas import STANDARD_TRAVEL_RATE_PER_KM, BreakdownValidation, DailyWorkData, TaxBreakdown

GST_RATE = Decimal("0.05")
PST_RATE = Decimal("0.00")
TOTAL_TAX_RATE = GST_RATE + PST_RATE

TRAVEL_RATE_PER_KM = STANDARD_TRAVEL_RATE_PER_KM

# Breakdowns are allowed to disagree with their re-derivation by one cent
TOLERANCE = CENT

# GST above this share of the taxable subtotal suggests a wrong rate
UNUSUAL_GST_RATIO = Decimal("0.15")


def gst_on(taxable: Decimal) -> Decimal:
    """GST for a taxable amount, rounded half-up to the cent."""
    return round_cents(taxable * TOTAL_TAX_RATE)


def compute_daily_breakdown(work: Union[DailyWorkData, Mapping[str, Any]]) -> TaxBreakdown:
    """Compute the GST breakdown for one day of work.

    Args:
        work: DailyWorkData, or a raw mapping validated strictly.

    Returns:
        TaxBreakdown with every amount rounded to the cent. A day that was
        not worked returns all zeros regardless of the other inputs.

    Raises:
        InvalidInputError: If any input is negative or unparsable.

    Example:
        day rate 450 + truck 150, 45 km at 0.68, subsistence 75 ->
        taxable 600.00, GST 30.00, travel 30.60, grand total 735.60
    """
    work = parse_work_payload(work)

    if not work.worked:
        return TaxBreakdown.zero()

    day_rate_total = round_cents(work.day_rate) if work.day_rate_used else ZERO
    truck_rate_total = round_cents(work.truck_rate) if work.truck_used else ZERO

    taxable_subtotal = day_rate_total + truck_rate_total
    gst_amount = gst_on(taxable_subtotal)
    after_tax_subtotal = taxable_subtotal + gst_amount

    travel_reimbursement = round_cents(work.travel_kms * work.rate_per_km)
    subsistence = round_cents(work.subsistence)
    additional_charges = round_cents(work.additional_charges)
    non_taxable_total = travel_reimbursement + subsistence + additional_charges

    return TaxBreakdown(
        taxable_subtotal=taxable_subtotal,
        gst_amount=gst_amount,
        after_tax_subtotal=after_tax_subtotal,
        travel_reimbursement=travel_reimbursement,
        non_taxable_total=non_taxable_total,
        grand_total=after_tax_subtotal + non_taxable_total,
        day_rate_total=day_rate_total,
        truck_rate_total=truck_rate_total,
        subsistence=subsistence,
        additional_charges=additional_charges,
    )


def validate_breakdown(breakdown: Union[TaxBreakdown, Mapping[str, Any]]) -> BreakdownValidation:
    """Check a breakdown for negative amounts and internal consistency.

    GST, after-tax subtotal and grand total are re-derived; a difference of
    more than one cent is an error. A breakdown that fails these checks is
    never valid, even when it came from somewhere we trust.

    Args:
        breakdown: TaxBreakdown or a mapping with the same keys.

    Returns:
        BreakdownValidation with errors (block) and warnings (review).
    """
    if not isinstance(breakdown, TaxBreakdown):
        if not isinstance(breakdown, Mapping):
            return BreakdownValidation(
                is_valid=False,
                errors=[f"expected a breakdown mapping, got {type(breakdown).__name__}"],
            )
        try:
            breakdown = TaxBreakdown.model_validate(dict(breakdown))
        except ValidationError as e:
            return BreakdownValidation(is_valid=False, errors=format_validation_errors(e))

    errors = []
    warnings = []

    for name in TaxBreakdown.model_fields:
        value = getattr(breakdown, name)
        if value < 0:
            errors.append(f"{name} cannot be negative: {value}")

    expected_gst = gst_on(breakdown.taxable_subtotal)
    if abs(breakdown.gst_amount - expected_gst) > TOLERANCE:
        errors.append(
            f"GST calculation incorrect. Expected: {expected_gst}, Got: {breakdown.gst_amount}"
        )

    expected_after_tax = breakdown.taxable_subtotal + breakdown.gst_amount
    if abs(breakdown.after_tax_subtotal - expected_after_tax) > TOLERANCE:
        errors.append(
            f"After-tax subtotal incorrect. Expected: {expected_after_tax}, "
            f"Got: {breakdown.after_tax_subtotal}"
        )

    expected_grand_total = breakdown.after_tax_subtotal + breakdown.non_taxable_total
    if abs(breakdown.grand_total - expected_grand_total) > TOLERANCE:
        errors.append(
            f"Grand total incorrect. Expected: {expected_grand_total}, Got: {breakdown.grand_total}"
        )

    if breakdown.gst_amount > breakdown.taxable_subtotal * UNUSUAL_GST_RATIO:
        warnings.append("GST seems unusually high - please verify tax rate")

    if breakdown.taxable_subtotal == 0 and breakdown.grand_total > 0:
        warnings.append("Invoice contains only reimbursements - no taxable services")

    return BreakdownValidation(is_valid=not errors, errors=errors, warnings=warnings)


def sum_breakdowns(breakdowns: Iterable[TaxBreakdown]) -> TaxBreakdown:
    """Total several daily breakdowns into one (e.g. a week or pay period).

    GST is the sum of the already-rounded daily amounts, so the period
    invoice always equals the sum of its days.
    """
    totals: Dict[str, Decimal] = {name: ZERO for name in TaxBreakdown.model_fields}
    for breakdown in breakdowns:
        for name in totals:
            totals[name] += getattr(breakdown, name)

    totals["after_tax_subtotal"] = totals["taxable_subtotal"] + totals["gst_amount"]
    totals["grand_total"] = totals["after_tax_subtotal"] + totals["non_taxable_total"]
    return TaxBreakdown(**totals)


def annual_gst_estimate(monthly_average: TaxBreakdown) -> Dict[str, Decimal]:
    """Project a year of GST from an average month, for remittance planning."""
    annual_taxable_income = monthly_average.taxable_subtotal * 12
    annual_gst_payable = round_cents(annual_taxable_income * GST_RATE)
    return {
        "annual_taxable_income": round_cents(annual_taxable_income),
        "annual_gst_payable": annual_gst_payable,
        "quarterly_gst_payment": round_cents(annual_gst_payable / 4),
        "monthly_gst_reserve": round_cents(annual_gst_payable / 12),
    }


def format_gst_number(gst_number: str) -> str:
    """Format a GST/HST registration number for invoices.

    Example: "123456789RT0001" -> "123456789 RT 0001". Anything that is not
    a 15-character business number is returned unchanged.
    """
    clean = re.sub(r"[^A-Za-z0-9]", "", gst_number).upper()
    if len(clean) == 15:
        return f"{clean[:9]} RT {clean[11:]}"
    return gst_number
