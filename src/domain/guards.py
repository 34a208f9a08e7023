"""
Financial guards run before a ride request is accepted.

Checks run in a fixed order and the first failure wins.  Rejections are
returned as data with a stable ``code`` the client can branch on, and are
logged for the compliance trail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import PaymentSource
from .money import get_country_config

logger = logging.getLogger(__name__)


class FinancialEngineUnlocked(RuntimeError):
    """The financial engine must be locked before any money moves."""


@dataclass(frozen=True)
class RideRequestGuardInput:
    user_id: str
    is_tester: bool
    wallet_currency: str
    trip_currency: str
    country_code: str
    available_balance: float
    wallet_frozen: bool
    user_suspended: bool
    resolved_payment_source: PaymentSource


@dataclass(frozen=True)
class GuardResult:
    allowed: bool
    code: Optional[str] = None
    message: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)


def validate_ride_request(data: RideRequestGuardInput) -> GuardResult:
    country = get_country_config(data.country_code)

    if data.wallet_frozen:
        return _reject(
            "WALLET_FROZEN", data, "Your wallet is frozen. Please contact support."
        )

    if data.user_suspended:
        return _reject(
            "USER_SUSPENDED", data, "Your account is suspended. Please contact support."
        )

    if data.wallet_currency != data.trip_currency:
        return _reject(
            "CURRENCY_MISMATCH",
            data,
            f"Currency mismatch: Your wallet is {data.wallet_currency} "
            f"but trip is {data.trip_currency}",
            details={
                "wallet_currency": data.wallet_currency,
                "trip_currency": data.trip_currency,
            },
        )

    is_test_wallet = data.resolved_payment_source == PaymentSource.TEST_WALLET
    if data.is_tester and not is_test_wallet:
        return _reject(
            "INVALID_PAYMENT_SOURCE",
            data,
            "Test users must use TEST_WALLET",
            log_code="TESTER_INVALID_SOURCE",
        )
    if not data.is_tester and is_test_wallet:
        return _reject(
            "INVALID_PAYMENT_SOURCE",
            data,
            "Regular users cannot use TEST_WALLET",
            log_code="NON_TESTER_TEST_WALLET",
        )

    if data.available_balance < country.min_balance_for_ride:
        return _reject(
            "INSUFFICIENT_BALANCE",
            data,
            f"Minimum balance required: "
            f"{country.currency_symbol}{country.min_balance_for_ride:g}",
            details={
                "required": country.min_balance_for_ride,
                "available": data.available_balance,
                "currency": country.currency_code,
            },
        )

    return GuardResult(allowed=True)


def assert_financial_engine_locked(locked: bool) -> None:
    if not locked:
        raise FinancialEngineUnlocked(
            "CRITICAL: Financial engine is not locked. This is a security violation."
        )


def _reject(
    code: str,
    data: RideRequestGuardInput,
    message: str,
    *,
    details: Optional[dict[str, Any]] = None,
    log_code: Optional[str] = None,
) -> GuardResult:
    logger.warning(
        "Financial guard rejection code=%s user_id=%s country=%s tester=%s "
        "payment_source=%s balance=%s",
        log_code or code,
        data.user_id,
        data.country_code,
        data.is_tester,
        data.resolved_payment_source.value,
        data.available_balance,
    )
    return GuardResult(allowed=False, code=code, message=message, details=details or {})
