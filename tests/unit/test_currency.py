"""Tests for currency code validation and the display registry."""

import pytest

from billing_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from billing_kernel.exceptions import InvalidCurrencyError


class TestCurrencyValidation:
    """Shape validation of three-letter codes."""

    def test_valid_codes_accepted(self):
        for code in ["USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD"]:
            assert CurrencyRegistry.validate(code) == code

    def test_lowercase_codes_normalized(self):
        assert CurrencyRegistry.validate("usd") == "USD"
        assert CurrencyRegistry.validate("eur") == "EUR"

    def test_whitespace_trimmed(self):
        assert CurrencyRegistry.validate(" USD ") == "USD"

    def test_unregistered_but_well_formed_code_accepted(self):
        """Validation checks shape only; rate coverage is the converter's job."""
        assert CurrencyRegistry.validate("SEK") == "SEK"

    @pytest.mark.parametrize("bad", ["US", "USDD", "123", "U$D", "", None, 840])
    def test_malformed_codes_rejected(self, bad):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            CurrencyRegistry.validate(bad)
        assert exc_info.value.code == "INVALID_CURRENCY"

    def test_non_ascii_letters_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            CurrencyRegistry.validate("ÜSD")


class TestCurrencyRegistry:
    """Registry lookups."""

    def test_ten_supported_currencies(self):
        assert CurrencyRegistry.all_codes() == frozenset(
            {"USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CNY", "INR", "BRL", "CHF"}
        )

    def test_default_currency(self):
        assert CurrencyRegistry.DEFAULT_CURRENCY == "USD"

    def test_get_info(self):
        info = CurrencyRegistry.get_info("eur")
        assert info == CurrencyInfo("EUR", "Euro", "€")

    def test_get_info_unknown(self):
        assert CurrencyRegistry.get_info("SEK") is None
        assert CurrencyRegistry.get_info("") is None

    def test_symbols(self):
        assert CurrencyRegistry.get_symbol("USD") == "$"
        assert CurrencyRegistry.get_symbol("INR") == "₹"
        assert CurrencyRegistry.get_symbol("SEK") == "SEK"

    def test_is_supported(self):
        assert CurrencyRegistry.is_supported("brl")
        assert not CurrencyRegistry.is_supported("SEK")
        assert not CurrencyRegistry.is_supported(None)

    def test_all_currencies_is_a_copy(self):
        currencies = CurrencyRegistry.all_currencies()
        currencies.pop("USD")
        assert CurrencyRegistry.is_supported("USD")
