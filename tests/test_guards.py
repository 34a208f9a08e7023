"""Unit tests for the financial guards on ride requests."""

import logging
from dataclasses import replace

import pytest

from src.domain.enums import PaymentSource
from src.domain.guards import (
    FinancialEngineUnlocked,
    RideRequestGuardInput,
    assert_financial_engine_locked,
    validate_ride_request,
)


@pytest.fixture
def request_input() -> RideRequestGuardInput:
    return RideRequestGuardInput(
        user_id="user-1",
        is_tester=False,
        wallet_currency="USD",
        trip_currency="USD",
        country_code="US",
        available_balance=20.0,
        wallet_frozen=False,
        user_suspended=False,
        resolved_payment_source=PaymentSource.MAIN_WALLET,
    )


class TestValidateRideRequest:
    def test_allowed(self, request_input):
        result = validate_ride_request(request_input)
        assert result.allowed
        assert result.code is None

    def test_frozen_wallet_checked_first(self, request_input):
        result = validate_ride_request(
            replace(request_input, wallet_frozen=True, user_suspended=True)
        )
        assert result.code == "WALLET_FROZEN"

    def test_suspended_user(self, request_input):
        result = validate_ride_request(replace(request_input, user_suspended=True))
        assert not result.allowed
        assert result.code == "USER_SUSPENDED"

    def test_currency_mismatch(self, request_input):
        result = validate_ride_request(replace(request_input, trip_currency="NGN"))
        assert result.code == "CURRENCY_MISMATCH"
        assert result.details == {"wallet_currency": "USD", "trip_currency": "NGN"}

    def test_tester_must_use_test_wallet(self, request_input):
        result = validate_ride_request(replace(request_input, is_tester=True))
        assert result.code == "INVALID_PAYMENT_SOURCE"
        assert result.message == "Test users must use TEST_WALLET"

    def test_regular_user_cannot_use_test_wallet(self, request_input):
        result = validate_ride_request(
            replace(request_input, resolved_payment_source=PaymentSource.TEST_WALLET)
        )
        assert result.code == "INVALID_PAYMENT_SOURCE"
        assert result.message == "Regular users cannot use TEST_WALLET"

    def test_tester_with_test_wallet_allowed(self, request_input):
        result = validate_ride_request(
            replace(
                request_input,
                is_tester=True,
                resolved_payment_source=PaymentSource.TEST_WALLET,
            )
        )
        assert result.allowed

    def test_insufficient_balance(self, request_input):
        result = validate_ride_request(replace(request_input, available_balance=4.99))
        assert result.code == "INSUFFICIENT_BALANCE"
        assert result.message == "Minimum balance required: $5"
        assert result.details["currency"] == "USD"

    def test_rejection_is_logged(self, request_input, caplog):
        with caplog.at_level(logging.WARNING, logger="src.domain.guards"):
            validate_ride_request(replace(request_input, is_tester=True))
        assert "code=TESTER_INVALID_SOURCE" in caplog.text
        assert "user_id=user-1" in caplog.text


class TestFinancialLock:
    def test_locked_passes(self):
        assert_financial_engine_locked(True)

    def test_unlocked_raises(self):
        with pytest.raises(FinancialEngineUnlocked, match="not locked"):
            assert_financial_engine_locked(False)
