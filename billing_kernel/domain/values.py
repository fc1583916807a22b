"""
Values -- Immutable, self-validating monetary value object.

Responsibility:
    Provides Money, the single representation of an amount anywhere in the
    billing kernel.  Money holds an integer count of minor units (cents)
    together with its currency code, so sums over many line items never
    accumulate floating-point drift.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module.  No outward dependencies except
    billing_kernel.domain.currency and billing_kernel.exceptions.

Invariants enforced:
    - Amounts are integers of minor units; never float.
    - Arithmetic and comparison between two Money values require the same
      currency (CurrencyMismatchError otherwise, never a silent result).
    - Rounding happens only when converting from a decimal or scaling by a
      factor, and is always ROUND_HALF_UP.

Failure modes:
    - InvalidAmountError on non-finite or unparseable decimal input, or when
      a rounded result exceeds the 64-bit minor-unit range.
    - InvalidCurrencyError on a malformed currency code.
    - CurrencyMismatchError when two operands carry different currencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation

from billing_kernel.domain.currency import (
    MINOR_UNIT_DIGITS,
    MINOR_UNIT_SCALE,
    CurrencyRegistry,
)
from billing_kernel.exceptions import CurrencyMismatchError, InvalidAmountError

_HUNDRED = Decimal("100")

# Largest magnitude a signed 64-bit amount column holds.
MAX_MINOR_UNITS = 2**63 - 1


def to_decimal(value: Decimal | str | int | float) -> Decimal:
    """
    Parse a finite decimal number.

    Floats are converted through their shortest ``repr`` so that ``19.999``
    is read as the literal the caller wrote, not its binary approximation.

    Raises:
        InvalidAmountError: If the value is not a finite, parseable number.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(value)
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as e:
            raise InvalidAmountError(value) from e
    else:
        raise InvalidAmountError(value)

    if not parsed.is_finite():
        raise InvalidAmountError(value)
    return parsed


def round_half_up(value: Decimal) -> int:
    """
    Round a Decimal to the nearest integer, halves away from zero.

    Raises:
        InvalidAmountError: If the result does not fit a BigInteger
            minor-unit column.
    """
    try:
        rounded = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except DecimalException as e:
        raise InvalidAmountError(value) from e
    if abs(rounded) > MAX_MINOR_UNITS:
        raise InvalidAmountError(value)
    return int(rounded)


def _product(left: Decimal, right: Decimal) -> Decimal:
    try:
        return left * right
    except DecimalException as e:
        raise InvalidAmountError(right) from e


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs an integer count of minor units with its currency code -- they
        are NEVER separated.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - minor_units is always an int
        - currency is always an upper-case three-letter code
        - No silent currency mixing in arithmetic or comparison

    Non-goals:
        - Does NOT perform currency conversion (use CurrencyConverter)
        - Does NOT model precisions other than two fractional digits
    """

    minor_units: int
    currency: str

    def __post_init__(self) -> None:
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise InvalidAmountError(self.minor_units)
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))

    # -----------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------

    @classmethod
    def from_decimal(cls, value: Decimal | str | int | float, currency: str) -> Money:
        """
        Build Money from a decimal amount in major units.

        Postconditions:
            - minor units are rounded half-up to the nearest cent, so
              ``"10.005"`` always becomes 1001 and ``"19.999"`` becomes 2000.

        Raises:
            InvalidAmountError: If value is not a finite, parseable number
                or is too large to store.
            InvalidCurrencyError: If currency is malformed.
        """
        amount = to_decimal(value)
        minor_units = round_half_up(_product(amount, MINOR_UNIT_SCALE))
        return cls(minor_units=minor_units, currency=currency)

    @classmethod
    def from_minor_units(cls, minor_units: int, currency: str) -> Money:
        """Build Money directly from an integer count of minor units."""
        return cls(minor_units=minor_units, currency=currency)

    @classmethod
    def zero(cls, currency: str) -> Money:
        """Create a zero amount in the given currency."""
        return cls(minor_units=0, currency=currency)

    @classmethod
    def sum(cls, amounts: Iterable[Money], currency: str) -> Money:
        """
        Add up amounts by chaining ``add`` from zero in ``currency``.

        Raises:
            CurrencyMismatchError: If any amount is in another currency.
        """
        total = cls.zero(currency)
        for amount in amounts:
            total = total.add(amount)
        return total

    # -----------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------

    @property
    def amount(self) -> Decimal:
        """Amount in major units as an exact Decimal."""
        return Decimal(self.minor_units).scaleb(-MINOR_UNIT_DIGITS)

    @property
    def is_zero(self) -> bool:
        return self.minor_units == 0

    @property
    def is_positive(self) -> bool:
        return self.minor_units > 0

    @property
    def is_negative(self) -> bool:
        return self.minor_units < 0

    # -----------------------------------------------------------------
    # Arithmetic
    # -----------------------------------------------------------------

    def _require_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def add(self, other: Money) -> Money:
        """Add two Money values. Must be same currency."""
        self._require_same_currency(other)
        return Money(self.minor_units + other.minor_units, self.currency)

    def subtract(self, other: Money) -> Money:
        """Subtract ``other`` from this value. Must be same currency."""
        self._require_same_currency(other)
        return Money(self.minor_units - other.minor_units, self.currency)

    def multiply(self, factor: Decimal | str | int | float) -> Money:
        """Scale by ``factor``, rounding half-up to the nearest minor unit."""
        scaled = _product(Decimal(self.minor_units), to_decimal(factor))
        return Money(round_half_up(scaled), self.currency)

    def percentage_of(self, percent: Decimal | str | int | float) -> Money:
        """
        Compute ``percent`` percent of this amount (8.25 means 8.25%).

        Used for tax computation; rounded half-up to the nearest minor unit.
        """
        scaled = _product(Decimal(self.minor_units), to_decimal(percent)) / _HUNDRED
        return Money(round_half_up(scaled), self.currency)

    def with_tax(self, percent: Decimal | str | int | float) -> Money:
        """Amount plus ``percent`` percent tax."""
        return self.add(self.percentage_of(percent))

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if not isinstance(factor, (Decimal, int, str, float)) or isinstance(factor, bool):
            return NotImplemented
        return self.multiply(factor)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __neg__(self) -> Money:
        return Money(-self.minor_units, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.minor_units), self.currency)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.minor_units < other.minor_units

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.minor_units <= other.minor_units

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.minor_units > other.minor_units

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other)
        return self.minor_units >= other.minor_units

    # -----------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------

    def to_decimal_string(self) -> str:
        """Render with exactly two fractional digits, e.g. ``"20.00"``."""
        sign = "-" if self.minor_units < 0 else ""
        whole, cents = divmod(abs(self.minor_units), int(MINOR_UNIT_SCALE))
        return f"{sign}{whole}.{cents:0{MINOR_UNIT_DIGITS}d}"

    def __str__(self) -> str:
        return f"{self.to_decimal_string()} {self.currency}"

    def __repr__(self) -> str:
        return f"Money({self.to_decimal_string()!r}, {self.currency!r})"


def format_money(money: Money) -> str:
    """Render with the currency symbol and thousands separators, e.g. ``$1,250.50``."""
    sign = "-" if money.is_negative else ""
    whole, cents = divmod(abs(money.minor_units), int(MINOR_UNIT_SCALE))
    symbol = CurrencyRegistry.get_symbol(money.currency)
    return f"{sign}{symbol}{whole:,}.{cents:0{MINOR_UNIT_DIGITS}d}"
