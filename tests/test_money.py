"""Unit tests for money rounding and currency helpers."""

import pytest

from src.domain.money import (
    format_currency,
    get_country_config,
    get_currency_from_country,
    get_currency_symbol,
    round_money,
)


class TestRoundMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [(0.125, 0.13), (0.625, 0.63), (1.004, 1.0), (19.5, 19.5), (-0.125, -0.12)],
    )
    def test_half_up_to_cents(self, value, expected):
        assert round_money(value) == expected


class TestCurrency:
    def test_country_lookup(self):
        assert get_currency_from_country("US") == "USD"
        assert get_currency_from_country("za") == "ZAR"

    def test_unknown_country_defaults_to_nigeria(self):
        assert get_country_config("XX").currency_code == "NGN"

    def test_symbols(self):
        assert get_currency_symbol("NGN") == "₦"
        assert get_currency_symbol("EUR") == "EUR"

    def test_format(self):
        assert format_currency(1234.5, "USD") == "$1,234.50"
        assert format_currency("99", "ZAR") == "R99.00"
