"""
Ledger Domain Models (``billing_kernel.domain.ledger``).

Responsibility
--------------
Frozen dataclass value objects for the nouns of the billing ledger:
invoices, the payments recorded against them, and persisted report
snapshots.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.  Produced by
``LedgerSelector`` from ORM rows and consumed by the reconciliation and
aggregation engines.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields are ``Money`` -- NEVER ``float`` or bare ``Decimal``.
* An invoice is the aggregate root; a payment always names its invoice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from billing_kernel.domain.values import Money


class InvoiceStatus(str, Enum):
    """Invoice settlement states."""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class ReportType(str, Enum):
    """Kinds of persisted financial report."""

    MONTHLY = "monthly"
    YEARLY = "yearly"
    BALANCE_SHEET = "balance_sheet"
    INCOME_STATEMENT = "income_statement"


@dataclass(frozen=True)
class Invoice:
    """A bill issued to a client."""

    id: UUID
    title: str
    client_name: str
    amount: Money
    issue_date: date
    owner_id: UUID
    status: InvoiceStatus = InvoiceStatus.PENDING
    client_id: UUID | None = None
    version: int = 1

    @property
    def currency(self) -> str:
        return self.amount.currency


@dataclass(frozen=True)
class Payment:
    """Money received against a single invoice."""

    id: UUID
    invoice_id: UUID
    amount: Money
    payment_date: date
    owner_id: UUID
    receipt_generated: bool = False


@dataclass(frozen=True)
class Report:
    """A generated report with its materialized aggregation payload."""

    id: UUID
    title: str
    report_type: ReportType
    generated_at: datetime
    owner_id: UUID
    data: dict[str, Any] = field(default_factory=dict)
