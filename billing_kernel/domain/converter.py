"""
Converter -- static exchange-rate table and cross-rate conversion.

Responsibility:
    Converts Money between currencies using a fixed, in-process rate table
    keyed by currency code.  Every rate is quoted against one base currency;
    conversions between two non-base currencies go amount -> base -> target.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    The table is built once at startup (see billing_config.bridges) and
    injected into CurrencyConverter.  There is no module-level rate state.

Invariants enforced:
    - The rate table is read-only after construction (mapping proxy).
    - The base currency is always present with rate 1.
    - Every rate is a positive Decimal, never float.
    - Conversion rounds exactly once, half-up, at the end.

Failure modes:
    - UnsupportedCurrencyError when either side is missing from the table.
    - ValueError on construction with a non-positive rate or a base rate
      other than 1.

Non-goals:
    - No live rate fetching, no effective dates.
    - A -> B -> A is not guaranteed to return the original amount.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.domain.values import Money, round_half_up, to_decimal
from billing_kernel.exceptions import UnsupportedCurrencyError
from billing_kernel.logging_config import get_logger

logger = get_logger("domain.converter")

_ONE = Decimal("1")


@dataclass(frozen=True)
class ExchangeRateTable:
    """
    Exchange rates quoted as units of each currency per one unit of base.

    Contract:
        ``rates["EUR"] == Decimal("0.92")`` means 1 base = 0.92 EUR.

    Guarantees:
        - ``rates`` is an immutable mapping with normalized codes.
        - ``rates[base_currency] == 1``.
    """

    base_currency: str
    rates: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        base = CurrencyRegistry.validate(self.base_currency)
        normalized: dict[str, Decimal] = {}
        for code, raw_rate in self.rates.items():
            rate = to_decimal(raw_rate)
            if rate <= 0:
                raise ValueError(f"Exchange rate must be positive: {code}={raw_rate}")
            normalized[CurrencyRegistry.validate(code)] = rate

        if normalized.setdefault(base, _ONE) != _ONE:
            raise ValueError(
                f"Base currency {base} must have rate 1, got {normalized[base]}"
            )

        object.__setattr__(self, "base_currency", base)
        object.__setattr__(self, "rates", MappingProxyType(normalized))

    def rate_for(self, currency: str) -> Decimal:
        """
        Units of ``currency`` per one unit of base.

        Raises:
            UnsupportedCurrencyError: If the code has no rate.
        """
        code = CurrencyRegistry.validate(currency)
        try:
            return self.rates[code]
        except KeyError:
            raise UnsupportedCurrencyError(code) from None

    @property
    def currencies(self) -> frozenset[str]:
        return frozenset(self.rates)


class CurrencyConverter:
    """
    Converts Money between currencies of an injected ExchangeRateTable.

    Contract:
        ``convert(amount, to_currency)`` returns ``amount`` unchanged when the
        currencies already match; otherwise the cross rate through the base
        currency is applied and the result rounded half-up once.
    """

    def __init__(self, table: ExchangeRateTable):
        self._table = table

    @property
    def table(self) -> ExchangeRateTable:
        return self._table

    def supports(self, currency: str) -> bool:
        """Check whether ``currency`` has a configured rate."""
        return CurrencyRegistry.validate(currency) in self._table.rates

    def convert(self, amount: Money, to_currency: str) -> Money:
        """
        Convert ``amount`` into ``to_currency``.

        Raises:
            UnsupportedCurrencyError: If either currency is absent from the table.
        """
        target = CurrencyRegistry.validate(to_currency)
        if amount.currency == target:
            return amount

        from_rate = self._table.rate_for(amount.currency)
        to_rate = self._table.rate_for(target)

        converted = Decimal(amount.minor_units) / from_rate * to_rate
        result = Money(round_half_up(converted), target)

        logger.debug(
            "currency_converted",
            extra={
                "from_currency": amount.currency,
                "to_currency": target,
                "from_amount": amount.to_decimal_string(),
                "to_amount": result.to_decimal_string(),
            },
        )
        return result
