"""Unit tests for boundary parsing of work payloads, amounts and dates."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fieldpay.sdk.inputs import (
    InvalidInputError,
    normalize_amount,
    normalize_work_payload,
    parse_date,
    parse_datetime,
    parse_work_payload,
)
from fieldpay.sdk.money import AmountOutOfRangeError, round_cents, to_decimal
from fieldpay.sdk.schemas import DailyWorkData


class TestToDecimal:

    def test_float_goes_through_str(self):
        assert to_decimal(0.68) == Decimal("0.68")

    def test_currency_string(self):
        assert to_decimal(" $1,234.50 ") == Decimal("1234.50")

    @pytest.mark.parametrize("bad", [True, "abc", "", "NaN", float("inf"), None, [1]])
    def test_rejects_non_numbers(self, bad):
        with pytest.raises(ValueError):
            to_decimal(bad)

    @pytest.mark.parametrize("huge", ["1E+27", 10**15, Decimal("-1e20")])
    def test_rejects_out_of_range(self, huge):
        with pytest.raises(AmountOutOfRangeError):
            to_decimal(huge)

    def test_round_cents_half_up(self):
        assert round_cents(Decimal("2.675")) == Decimal("2.68")
        assert round_cents(Decimal("2.665")) == Decimal("2.67")


class TestParseWorkPayload:
    """Strict parsing: anything unreadable raises."""

    def test_camel_and_snake_case(self):
        camel = parse_work_payload({"dayRate": "450", "dayRateUsed": True, "travelKMs": 10})
        snake = parse_work_payload({"day_rate": 450, "day_rate_used": True, "travel_kms": "10"})

        assert camel == snake
        assert camel.day_rate == Decimal("450")

    def test_defaults(self):
        work = parse_work_payload({})

        assert work.worked is True
        assert work.rate_per_km == Decimal("0.68")
        assert work.hours_worked == Decimal("8")
        assert work.day_rate == Decimal("0")

    def test_blank_values_take_defaults(self):
        work = parse_work_payload({"ratePerKm": "", "hoursWorked": None})

        assert work.rate_per_km == Decimal("0.68")
        assert work.hours_worked == Decimal("8")

    def test_unknown_keys_are_ignored(self):
        work = parse_work_payload({"dayRate": 450, "notes": "rig move", "location": "Nisku"})

        assert work.day_rate == Decimal("450")

    def test_negative_raises(self):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_work_payload({"truckRate": -1})

        assert exc_info.value.errors

    def test_negative_on_copied_instance_raises(self):
        work = DailyWorkData().model_copy(update={"day_rate": Decimal("-1")})

        with pytest.raises(InvalidInputError):
            parse_work_payload(work)

    def test_too_large_raises(self):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_work_payload({"travelKms": 100000})

        assert "travel_kms" in str(exc_info.value)

    def test_too_large_on_copied_instance_raises(self):
        work = DailyWorkData().model_copy(update={"subsistence": Decimal("1e9")})

        with pytest.raises(InvalidInputError):
            parse_work_payload(work)

    def test_non_mapping_raises(self):
        with pytest.raises(InvalidInputError):
            parse_work_payload("dayRate=450")


class TestNormalizeWorkPayload:
    """Lenient parsing: malformed numbers become 0 with a warning."""

    def test_malformed_number_becomes_zero(self):
        work, warnings = normalize_work_payload({"dayRate": "abc", "dayRateUsed": True})

        assert work.day_rate == Decimal("0")
        assert len(warnings) == 1
        assert "dayRate" in warnings[0]

    def test_nan_becomes_zero(self):
        work, warnings = normalize_work_payload({"travel_kms": "NaN", "subsistence": 75})

        assert work.travel_kms == Decimal("0")
        assert work.subsistence == Decimal("75")
        assert len(warnings) == 1

    def test_clean_payload_has_no_warnings(self):
        work, warnings = normalize_work_payload({"dayRate": 450, "ratePerKm": ""})

        assert warnings == []
        assert work.rate_per_km == Decimal("0.68")

    def test_negative_still_raises(self):
        with pytest.raises(InvalidInputError):
            normalize_work_payload({"subsistence": "-75"})

    def test_huge_amount_is_rejected_not_zeroed(self):
        with pytest.raises(InvalidInputError) as exc_info:
            normalize_work_payload({"dayRate": "1e30", "dayRateUsed": True})

        assert "day_rate" in str(exc_info.value)

    def test_malformed_amount_is_logged(self, caplog):
        amount, warnings = normalize_amount("n/a", "client_total")

        assert amount == Decimal("0.00")
        assert warnings
        assert "client_total" in caplog.text


class TestParseDates:

    def test_parse_date_variants(self):
        assert parse_date("2024-01-05") == date(2024, 1, 5)
        assert parse_date("2024-01-05T10:30:00") == date(2024, 1, 5)
        assert parse_date(datetime(2024, 1, 5, 23, 59)) == date(2024, 1, 5)
        assert parse_date(date(2024, 1, 5)) == date(2024, 1, 5)
        assert parse_date("2024-01-05T23:30:00Z") == date(2024, 1, 5)

    @pytest.mark.parametrize("bad", [
        "01/05/2024", "", None, 20240105, "2024-01-01garbage", "2024-01-01 junk", "2024-13-01",
    ])
    def test_parse_date_rejects(self, bad):
        with pytest.raises(InvalidInputError):
            parse_date(bad, "start_date")

    def test_parse_datetime_drops_timezone(self):
        assert parse_datetime("2024-01-05T10:00:00Z") == datetime(2024, 1, 5, 10, 0)
        assert parse_datetime(date(2024, 1, 5)) == datetime(2024, 1, 5)
