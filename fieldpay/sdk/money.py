"""Exact-cent money helpers.

All amounts are ``Decimal``. Rounding is half-up to the cent, matching how
invoices are totalled by hand (0.005 rounds to 0.01).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")

# Largest magnitude accepted; sums and cent rounding stay inside the
# 28-digit default context below this.
MAX_AMOUNT = Decimal("1e15")


class AmountOutOfRangeError(ValueError):
    """Raised when a number is too large to carry to the cent."""
    pass


def to_decimal(value: Any) -> Decimal:
    """Convert a raw number or numeric string to a finite Decimal.

    Floats go through ``str()`` so 0.68 becomes Decimal("0.68") rather than
    its binary expansion.

    Raises:
        ValueError: If the value is not a finite number.
        AmountOutOfRangeError: If its magnitude is MAX_AMOUNT or more.
    """
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got boolean {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$")
        if not text:
            raise ValueError("expected a number, got an empty string")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"not a number: {value!r}")
    else:
        raise ValueError(f"not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    if abs(result) >= MAX_AMOUNT:
        raise AmountOutOfRangeError(f"out of range: {value!r} (must be below {MAX_AMOUNT:,f})")
    return result


def round_cents(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(amount: Decimal) -> int:
    """Round to the nearest whole number, half-up."""
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
