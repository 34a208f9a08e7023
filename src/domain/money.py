"""
Money rounding and per-country currency configuration.

Rounding
--------
Amounts are rounded to cents *half-up* (``floor(x * 100 + 0.5) / 100``),
not with Python's banker's ``round``.  Fares computed here must match the
figures already shown on receipts and wallets to the cent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

DRIVER_SHARE_PERCENT = 80
PLATFORM_SHARE_PERCENT = 20

DEFAULT_COUNTRY = "NG"


def round_money(value: float, decimals: int = 2) -> float:
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class CountryConfig:
    code: str
    name: str
    currency_code: str
    currency_symbol: str
    min_balance_for_ride: float


COUNTRIES: dict[str, CountryConfig] = {
    "NG": CountryConfig("NG", "Nigeria", "NGN", "₦", 500.0),
    "US": CountryConfig("US", "United States", "USD", "$", 5.0),
    "ZA": CountryConfig("ZA", "South Africa", "ZAR", "R", 50.0),
}


def get_country_config(country_code: str) -> CountryConfig:
    """Unknown countries fall back to the default market."""
    return COUNTRIES.get(country_code.upper(), COUNTRIES[DEFAULT_COUNTRY])


def get_currency_from_country(country_code: str) -> str:
    return get_country_config(country_code).currency_code


def get_currency_symbol(currency_code: str) -> str:
    for config in COUNTRIES.values():
        if config.currency_code == currency_code:
            return config.currency_symbol
    return currency_code


def format_currency(amount: float | str, currency_code: str) -> str:
    """``format_currency(1234.5, "USD") -> "$1,234.50"``."""
    value = float(amount)
    return f"{get_currency_symbol(currency_code)}{value:,.2f}"
