"""Check-in and dashboard flows.

Thin orchestration over the engine: parse the payload once at the
boundary, compute the breakdown, optionally audit the client's total,
persist, and roll logged days up for the dashboard. CLI and MCP tools
call these functions rather than the engine pieces directly.
"""

import logging
from datetime import timedelta
from typing import Any, List, Mapping, Optional, Union

from .aggregation import aggregate
from .entries import EntryRepository, check_trial_id
from .guard import check_against_client
from .inputs import DateLike, normalize_work_payload, parse_date
from .schemas import (
    AggregateSummary,
    CheckInResult,
    DailyEntry,
    DailyWorkData,
    PerformanceThresholds,
    TrialWindow,
)
from .taxes import compute_daily_breakdown

logger = logging.getLogger(__name__)


def submit_daily_entry(
    repo: EntryRepository,
    trial_id: str,
    entry_date: DateLike,
    payload: Union[DailyWorkData, Mapping[str, Any]],
    client_total: Any = None,
) -> CheckInResult:
    """Record one day's work.

    Malformed numbers in the payload become 0 (reported in warnings);
    negative values are rejected before anything is stored. When the
    client sends its own total it is checked against the server's, and a
    mismatch is audited but does not block the check-in.

    Args:
        repo: Entry store.
        trial_id: Trial (or contract) the day belongs to.
        entry_date: Calendar date of the work.
        payload: Raw check-in fields (camelCase or snake_case).
        client_total: Grand total shown to the user, if any.

    Returns:
        CheckInResult with the stored inputs and the authoritative breakdown.

    Raises:
        InvalidInputError: For negative inputs, a bad date or trial id.
    """
    check_trial_id(trial_id)
    day = parse_date(entry_date, "entry_date")
    work, warnings = normalize_work_payload(payload)
    breakdown = compute_daily_breakdown(work)

    client_check = None
    if client_total is not None:
        client_check = check_against_client(work, client_total)
        if not client_check.matches:
            warnings.append(
                f"client total {client_check.client_total} replaced by server total "
                f"{client_check.server_total}"
            )

    repo.upsert(trial_id, day, work)
    logger.info(f"Check-in {trial_id} {day.isoformat()}: {breakdown.grand_total}")

    return CheckInResult(
        trial_id=trial_id,
        entry_date=day,
        work=work,
        breakdown=breakdown,
        client_check=client_check,
        warnings=warnings,
    )


def collect_entries(repo: EntryRepository, trial_id: str, window: TrialWindow) -> List[DailyEntry]:
    """Logged days inside the window, in date order."""
    entries = []
    for offset in range(window.total_days):
        day = window.start_date + timedelta(days=offset)
        work = repo.get(trial_id, day)
        if work is not None:
            entries.append(DailyEntry(entry_date=day, work=work))
    return entries


def build_dashboard(
    repo: EntryRepository,
    trial_id: str,
    window: TrialWindow,
    rate_per_km: Any = None,
    now: Optional[DateLike] = None,
    thresholds: Optional[PerformanceThresholds] = None,
) -> AggregateSummary:
    """Aggregate the stored days of a trial for the dashboard."""
    entries = collect_entries(repo, trial_id, window)
    return aggregate(window, entries, rate_per_km=rate_per_km, now=now, thresholds=thresholds)
