"""Read-only selectors over the billing ledger."""

from billing_kernel.selectors.base import BaseSelector
from billing_kernel.selectors.ledger_selector import LedgerFilter, LedgerSelector

__all__ = [
    "BaseSelector",
    "LedgerFilter",
    "LedgerSelector",
]
