"""Server-side check of client-computed totals.

Clients (the check-in form, offline apps) compute their own grand total
for display. Whenever one is submitted we recompute from the trusted
inputs and compare. A mismatch is audited but never blocks the request,
and the server total is always the one used.
"""

import logging
import warnings
from decimal import Decimal
from typing import Any, Mapping, Union

from .inputs import normalize_amount
from .money import CENT, ZERO, AmountOutOfRangeError
from .schemas import ClientCheckResult, DailyWorkData
from .taxes import compute_daily_breakdown

audit_logger = logging.getLogger("fieldpay.audit")


class ToleranceMismatchWarning(UserWarning):
    """Client total differs from the server-computed total by more than a cent."""
    pass


def check_against_client(
    trusted: Union[DailyWorkData, Mapping[str, Any]],
    client_total: Any,
    tolerance: Decimal = CENT,
) -> ClientCheckResult:
    """Compare a client-submitted grand total with the server's.

    Args:
        trusted: Work inputs as validated by the server.
        client_total: The total the client displayed. Unparsable or
            out-of-range values are read as 0 (and will therefore usually
            mismatch).
        tolerance: Allowed absolute difference (default $0.01).

    Returns:
        ClientCheckResult; server_total is the authoritative amount.

    Raises:
        InvalidInputError: If the trusted inputs themselves are invalid.
    """
    breakdown = compute_daily_breakdown(trusted)
    try:
        client_value, _ = normalize_amount(client_total, "client_total")
    except AmountOutOfRangeError as e:
        audit_logger.warning(f"client_total: {e}; using 0")
        client_value = ZERO

    delta = client_value - breakdown.grand_total
    matches = abs(delta) <= tolerance

    if not matches:
        message = (
            f"Client total {client_value} differs from server total "
            f"{breakdown.grand_total} by {delta}; using server total"
        )
        audit_logger.warning(message)
        warnings.warn(message, ToleranceMismatchWarning, stacklevel=2)

    return ClientCheckResult(
        matches=matches,
        delta=delta,
        server_total=breakdown.grand_total,
        client_total=client_value,
    )
