"""Boundary parsing for raw request payloads.

Everything a collaborator receives (form posts, JSON bodies, CLI options)
passes through here exactly once before reaching the calculators, so
InvalidInputError is raised from a single place.

Two modes:

- parse_work_payload(): strict. Unparsable or negative values raise.
- normalize_work_payload(): lenient for malformed numbers. A value that
  cannot be read as a number becomes 0 and a warning is recorded, so it
  never leaks into a total as NaN. Negative values still raise.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Mapping, Tuple, Union

from pydantic import ValidationError

from .money import ZERO, AmountOutOfRangeError, to_decimal
from .schemas import MAX_WORK_VALUE, WORK_FIELD_ALIASES, WORK_NUMERIC_FIELDS, DailyWorkData

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


class InvalidInputError(ValueError):
    """Raised when work inputs are negative or cannot be parsed."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid input: {'; '.join(self.errors)}")


def format_validation_errors(exc: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into 'field: message' strings."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "root"
        messages.append(f"{loc}: {err.get('msg')}")
    return messages


def parse_work_payload(payload: Union[DailyWorkData, Mapping[str, Any]]) -> DailyWorkData:
    """Validate a day's work inputs strictly.

    Args:
        payload: A DailyWorkData or a mapping with snake_case or camelCase keys.

    Returns:
        Validated DailyWorkData.

    Raises:
        InvalidInputError: If any value is negative or unparsable.
    """
    if isinstance(payload, DailyWorkData):
        # Instances built with model_construct/model_copy skip validation
        errors = []
        for name in WORK_NUMERIC_FIELDS:
            value = getattr(payload, name)
            if value < 0:
                errors.append(f"{name}: cannot be negative ({value})")
            elif value >= MAX_WORK_VALUE:
                errors.append(f"{name}: must be less than {MAX_WORK_VALUE} ({value})")
        if errors:
            raise InvalidInputError(errors)
        return payload

    if not isinstance(payload, Mapping):
        raise InvalidInputError([f"expected a mapping of work inputs, got {type(payload).__name__}"])

    try:
        return DailyWorkData.model_validate(dict(payload))
    except ValidationError as e:
        raise InvalidInputError(format_validation_errors(e)) from e


def normalize_amount(value: Any, name: str) -> Tuple[Decimal, List[str]]:
    """Read one numeric value, falling back to 0 with a warning.

    Returns:
        Tuple of (amount, warnings).

    Raises:
        AmountOutOfRangeError: If the value is a number but too large.
    """
    try:
        return to_decimal(value), []
    except AmountOutOfRangeError:
        raise
    except ValueError:
        message = f"{name}: could not read {value!r} as a number; using 0"
        logger.warning(message)
        return ZERO, [message]


def normalize_work_payload(payload: Mapping[str, Any]) -> Tuple[DailyWorkData, List[str]]:
    """Validate a check-in payload, zeroing malformed numbers.

    Missing or blank values take their field defaults. Unparsable numbers
    (text, NaN, infinity) are replaced with 0 and reported in the returned
    warnings.

    Returns:
        Tuple of (DailyWorkData, warnings).

    Raises:
        InvalidInputError: For negative or out-of-range values, or non-numeric problems
            (e.g. a flag that is not a boolean).
    """
    if isinstance(payload, DailyWorkData):
        return parse_work_payload(payload), []
    if not isinstance(payload, Mapping):
        raise InvalidInputError([f"expected a mapping of work inputs, got {type(payload).__name__}"])

    cleaned = dict(payload)
    warnings: List[str] = []

    for field in WORK_NUMERIC_FIELDS:
        for key in WORK_FIELD_ALIASES[field]:
            if key not in cleaned:
                continue
            raw = cleaned[key]
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            try:
                amount, field_warnings = normalize_amount(raw, key)
            except AmountOutOfRangeError:
                # A real number, just too big; strict validation rejects it
                continue
            if field_warnings:
                cleaned[key] = amount
                warnings.extend(field_warnings)

    return parse_work_payload(cleaned), warnings


def parse_date(value: DateLike, name: str = "date") -> date:
    """Parse a calendar date from a date, datetime or ISO string.

    Raises:
        InvalidInputError: If the value is not a recognisable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        # Full timestamps, e.g. "2024-01-05T09:30:00Z"
        if len(text) > 10 and text[10] in "T ":
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                return datetime.fromisoformat(text).date()
            except ValueError:
                pass
    raise InvalidInputError([f"{name}: invalid date {value!r} (expected YYYY-MM-DD)"])


def parse_datetime(value: DateLike, name: str = "datetime") -> datetime:
    """Parse a point in time. Dates become midnight; timezone info is dropped.

    Raises:
        InvalidInputError: If the value is not a recognisable date/time.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            pass
    raise InvalidInputError([f"{name}: invalid date/time {value!r}"])
