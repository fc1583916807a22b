"""
Unit tests for Money and decimal handling.

Verifies:
- Half-up rounding from decimal input
- Integer minor-unit arithmetic
- Currency safety of arithmetic and comparison
- Rendering with exactly two fractional digits
"""

from decimal import Decimal

import pytest

from billing_kernel.domain.values import Money, format_money, round_half_up, to_decimal
from billing_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidAmountError,
    InvalidCurrencyError,
)


class TestMoneyFromDecimal:
    """Tests for Money.from_decimal."""

    def test_simple_decimal(self):
        """Two-digit input maps straight to cents."""
        result = Money.from_decimal("100.50", "USD")
        assert result.minor_units == 10050
        assert result.currency == "USD"

    def test_rounds_half_up(self):
        """Exactly half a cent rounds up."""
        assert Money.from_decimal("10.005", "USD").minor_units == 1001

    def test_rounds_up_to_whole(self):
        """19.999 becomes 20.00."""
        result = Money.from_decimal("19.999", "USD")
        assert result.minor_units == 2000
        assert result.to_decimal_string() == "20.00"

    def test_rounds_down_below_half(self):
        assert Money.from_decimal("10.004", "USD").minor_units == 1000

    def test_negative_half_rounds_away_from_zero(self):
        assert Money.from_decimal("-10.005", "USD").minor_units == -1001

    def test_float_read_as_literal(self):
        """A float is read through its repr, not its binary expansion."""
        assert Money.from_decimal(19.999, "USD").minor_units == 2000
        assert Money.from_decimal(0.1, "USD").minor_units == 10

    def test_int_and_decimal_input(self):
        assert Money.from_decimal(7, "USD").minor_units == 700
        assert Money.from_decimal(Decimal("1.10"), "USD").minor_units == 110

    def test_whitespace_trimmed(self):
        assert Money.from_decimal("  12.30 ", "USD").minor_units == 1230

    def test_lowercase_currency_normalized(self):
        assert Money.from_decimal("1", "eur").currency == "EUR"

    @pytest.mark.parametrize("bad", ["not a number", "", "NaN", "Infinity", "-inf"])
    def test_invalid_string_raises(self, bad):
        with pytest.raises(InvalidAmountError):
            Money.from_decimal(bad, "USD")

    def test_non_finite_float_raises(self):
        with pytest.raises(InvalidAmountError):
            Money.from_decimal(float("nan"), "USD")

    @pytest.mark.parametrize(
        "huge",
        ["1e30", "12345678901234567890123456789.00", 1e30, "1e999999"],
    )
    def test_amount_beyond_storage_range_raises(self, huge):
        """Amounts too large for a 64-bit minor-unit column are rejected."""
        with pytest.raises(InvalidAmountError):
            Money.from_decimal(huge, "USD")

    def test_largest_storable_amount(self):
        result = Money.from_decimal("92233720368547758.07", "USD")
        assert result.minor_units == 2**63 - 1

    def test_one_cent_past_largest_storable_amount_raises(self):
        with pytest.raises(InvalidAmountError):
            Money.from_decimal("92233720368547758.08", "USD")

    def test_bool_rejected(self):
        with pytest.raises(InvalidAmountError):
            Money.from_decimal(True, "USD")

    def test_none_rejected(self):
        with pytest.raises(InvalidAmountError):
            Money.from_decimal(None, "USD")

    @pytest.mark.parametrize("bad", ["US", "USDD", "12$", "", None])
    def test_invalid_currency_raises(self, bad):
        with pytest.raises(InvalidCurrencyError):
            Money.from_decimal("1.00", bad)


class TestMoneyConstruction:
    """Direct construction and helpers."""

    def test_float_minor_units_rejected(self):
        with pytest.raises(InvalidAmountError):
            Money(10.5, "USD")

    def test_zero(self):
        zero = Money.zero("GBP")
        assert zero.is_zero
        assert zero.to_decimal_string() == "0.00"

    def test_from_minor_units(self):
        assert Money.from_minor_units(199, "USD").amount == Decimal("1.99")

    def test_sum_chains_add(self):
        amounts = [Money.from_decimal(v, "USD") for v in ("100.00", "250.50", "49.50")]
        assert Money.sum(amounts, "USD").to_decimal_string() == "400.00"

    def test_sum_of_nothing_is_zero(self):
        assert Money.sum([], "EUR") == Money.zero("EUR")

    def test_sum_rejects_mixed_currency(self):
        with pytest.raises(CurrencyMismatchError):
            Money.sum([Money.from_decimal("1", "USD")], "EUR")

    def test_hashable_and_equal(self):
        a = Money.from_decimal("5.00", "USD")
        b = Money.from_minor_units(500, "USD")
        assert a == b
        assert len({a, b}) == 1


class TestMoneyArithmetic:
    """Tests for add, subtract, multiply, percentage_of."""

    def test_add(self):
        result = Money.from_decimal("0.10", "USD").add(Money.from_decimal("0.20", "USD"))
        assert result.to_decimal_string() == "0.30"

    def test_subtract_can_go_negative(self):
        result = Money.from_decimal("5.00", "USD") - Money.from_decimal("10.50", "USD")
        assert result.to_decimal_string() == "-5.50"

    def test_add_mismatch_raises(self):
        with pytest.raises(CurrencyMismatchError) as exc_info:
            Money.from_decimal("1", "USD").add(Money.from_decimal("1", "EUR"))
        assert exc_info.value.currency1 == "USD"
        assert exc_info.value.currency2 == "EUR"

    def test_subtract_mismatch_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money.from_decimal("1", "USD") - Money.from_decimal("1", "GBP")

    def test_multiply_rounds_half_up(self):
        # 19.99 * 3 = 59.97 exactly
        assert Money.from_decimal("19.99", "USD").multiply(3).to_decimal_string() == "59.97"
        # 0.05 * 0.5 = 0.025 -> 0.03
        assert Money.from_decimal("0.05", "USD").multiply("0.5").minor_units == 3

    def test_multiply_past_storage_range_raises(self):
        big = Money.from_minor_units(10**27, "USD")
        with pytest.raises(InvalidAmountError):
            big.multiply("10")
        with pytest.raises(InvalidAmountError):
            big.percentage_of("1e999999")

    def test_operator_mul(self):
        assert (Money.from_decimal("2.00", "USD") * Decimal("1.5")).minor_units == 300
        assert (2 * Money.from_decimal("2.00", "USD")).minor_units == 400

    def test_percentage_of_tax(self):
        """8.25% of 100.00 is 8.25."""
        tax = Money.from_decimal("100.00", "USD").percentage_of("8.25")
        assert tax.to_decimal_string() == "8.25"

    def test_percentage_of_rounds(self):
        """8.25% of 10.10 = 0.833... -> 0.83."""
        assert Money.from_decimal("10.10", "USD").percentage_of("8.25").minor_units == 83

    def test_with_tax(self):
        assert Money.from_decimal("200.00", "USD").with_tax(10).to_decimal_string() == "220.00"

    def test_neg_and_abs(self):
        m = Money.from_decimal("3.50", "USD")
        assert (-m).minor_units == -350
        assert abs(-m) == m


class TestMoneyComparison:
    """Comparisons are currency-checked."""

    def test_ordering(self):
        small = Money.from_decimal("1.00", "USD")
        big = Money.from_decimal("2.00", "USD")
        assert small < big
        assert big >= small
        assert small <= small

    def test_compare_mismatch_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money.from_decimal("1", "USD") < Money.from_decimal("2", "EUR")

    def test_equality_across_currencies_is_false(self):
        assert Money.from_decimal("1", "USD") != Money.from_decimal("1", "EUR")


class TestMoneyRendering:
    """Decimal-string and display rendering."""

    @pytest.mark.parametrize(
        "minor, expected",
        [(0, "0.00"), (5, "0.05"), (100, "1.00"), (123456, "1234.56"), (-7, "-0.07")],
    )
    def test_to_decimal_string(self, minor, expected):
        assert Money.from_minor_units(minor, "USD").to_decimal_string() == expected

    def test_str(self):
        assert str(Money.from_decimal("12.5", "EUR")) == "12.50 EUR"

    def test_format_money(self):
        assert format_money(Money.from_decimal("1250.5", "USD")) == "$1,250.50"
        assert format_money(Money.from_decimal("-3", "GBP")) == "-£3.00"

    def test_format_money_unknown_symbol_uses_code(self):
        assert format_money(Money.from_decimal("1", "SEK")) == "SEK1.00"


class TestRoundingDeterminism:
    """Tests for deterministic rounding behavior."""

    def test_same_input_same_output(self):
        """Repeated conversions are identical."""
        first = Money.from_decimal("10.005", "USD")
        for _ in range(100):
            again = Money.from_decimal("10.005", "USD")
            assert again == first
            assert repr(again) == repr(first)

    def test_round_half_up_helper(self):
        assert round_half_up(Decimal("2.5")) == 3
        assert round_half_up(Decimal("-2.5")) == -3
        assert round_half_up(Decimal("2.49")) == 2

    def test_round_half_up_rejects_out_of_range(self):
        with pytest.raises(InvalidAmountError):
            round_half_up(Decimal("1e40"))
        with pytest.raises(InvalidAmountError):
            round_half_up(Decimal(2**63))

    def test_to_decimal_rejects_garbage(self):
        with pytest.raises(InvalidAmountError):
            to_decimal(object())
