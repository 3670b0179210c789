"""Unit tests for the server-side check of client totals."""

import logging
import warnings
from decimal import Decimal

import pytest

from fieldpay.sdk.guard import ToleranceMismatchWarning, check_against_client
from fieldpay.sdk.inputs import InvalidInputError


@pytest.fixture
def trusted():
    return {
        "dayRate": 450, "dayRateUsed": True,
        "truckRate": 150, "truckUsed": True,
        "travelKms": 45, "subsistence": 75,
    }


class TestCheckAgainstClient:

    def test_exact_match(self, trusted):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = check_against_client(trusted, "735.60")

        assert result.matches
        assert result.delta == Decimal("0.00")
        assert result.server_total == Decimal("735.60")

    def test_one_cent_is_within_tolerance(self, trusted):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = check_against_client(trusted, 735.61)

        assert result.matches
        assert result.delta == Decimal("0.01")

    def test_mismatch_warns_and_keeps_server_total(self, trusted):
        with pytest.warns(ToleranceMismatchWarning):
            result = check_against_client(trusted, "700.00")

        assert not result.matches
        assert result.delta == Decimal("-35.60")
        assert result.server_total == Decimal("735.60")
        assert result.client_total == Decimal("700.00")

    def test_mismatch_is_audited(self, trusted, caplog):
        with caplog.at_level(logging.WARNING, logger="fieldpay.audit"):
            with pytest.warns(ToleranceMismatchWarning):
                check_against_client(trusted, "736.00")

        audit = [r for r in caplog.records if r.name == "fieldpay.audit"]
        assert len(audit) == 1
        assert "735.60" in audit[0].getMessage()

    def test_unparsable_client_total_reads_as_zero(self, trusted):
        with pytest.warns(ToleranceMismatchWarning):
            result = check_against_client(trusted, "seven hundred")

        assert result.client_total == Decimal("0")
        assert not result.matches

    def test_huge_client_total_reads_as_zero(self, trusted):
        with pytest.warns(ToleranceMismatchWarning):
            result = check_against_client(trusted, "1E+30")

        assert result.client_total == Decimal("0")
        assert result.server_total == Decimal("735.60")

    def test_invalid_trusted_inputs_raise(self):
        with pytest.raises(InvalidInputError):
            check_against_client({"dayRate": -450, "dayRateUsed": True}, "0")
