"""Currency -- code validation, display registry, and minor-unit precision."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from billing_kernel.exceptions import InvalidCurrencyError

# Every amount in the ledger is tracked in hundredths of its major unit,
# including currencies whose ISO precision differs.
MINOR_UNIT_DIGITS = 2
MINOR_UNIT_SCALE = Decimal(10) ** MINOR_UNIT_DIGITS


@dataclass(frozen=True)
class CurrencyInfo:
    """Display information about a single supported currency."""

    code: str
    name: str
    symbol: str


class CurrencyRegistry:
    """Registry of currencies offered for invoicing and display."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "USD": CurrencyInfo("USD", "US Dollar", "$"),
        "EUR": CurrencyInfo("EUR", "Euro", "€"),
        "GBP": CurrencyInfo("GBP", "British Pound", "£"),
        "CAD": CurrencyInfo("CAD", "Canadian Dollar", "CA$"),
        "AUD": CurrencyInfo("AUD", "Australian Dollar", "A$"),
        "JPY": CurrencyInfo("JPY", "Japanese Yen", "¥"),
        "CNY": CurrencyInfo("CNY", "Chinese Yuan", "¥"),
        "INR": CurrencyInfo("INR", "Indian Rupee", "₹"),
        "BRL": CurrencyInfo("BRL", "Brazilian Real", "R$"),
        "CHF": CurrencyInfo("CHF", "Swiss Franc", "CHF"),
    }

    DEFAULT_CURRENCY: ClassVar[str] = "USD"

    @classmethod
    def is_supported(cls, code: str) -> bool:
        """Check if a currency code is in the display registry."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_symbol(cls, code: str) -> str:
        """Get the display symbol, falling back to the code itself."""
        info = cls.get_info(code)
        return info.symbol if info else code

    @classmethod
    def validate(cls, code: str) -> str:
        """
        Validate and normalize a currency code.

        Only the shape is checked here (three ASCII letters).  Whether a rate
        exists for the code is the converter's concern.

        Raises:
            InvalidCurrencyError: If the code is not three letters.
        """
        if not code or not isinstance(code, str):
            raise InvalidCurrencyError(code)

        normalized = code.upper().strip()

        if len(normalized) != 3 or not (normalized.isascii() and normalized.isalpha()):
            raise InvalidCurrencyError(code)

        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        """Get all registered currency codes."""
        return frozenset(cls._CURRENCIES.keys())

    @classmethod
    def all_currencies(cls) -> dict[str, CurrencyInfo]:
        """Get all currency information."""
        return dict(cls._CURRENCIES)
