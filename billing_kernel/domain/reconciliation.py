"""
Reconciliation -- invoice status derived from its payment set.

Responsibility:
    The single rule that maps (invoice, payments) to the invoice's settlement
    status.  Every payment mutation path ends in one evaluation of this rule
    via ReconciliationService; nothing else decides between pending and paid.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Rule:
    1. total_paid = chained Money.add over the payment amounts, starting from
       zero in the invoice currency.
    2. total_paid >= amount and status != paid  -> paid
    3. total_paid <  amount and status == paid  -> pending (reopen)
    4. overdue is never derived here and never rewritten to pending.
    5. Overpayment is accepted and still resolves to paid.

Invariants enforced:
    - Idempotence: evaluating an outcome's resulting status again with the
      same payments yields no transition.

Failure modes:
    - CurrencyMismatchError when any payment is not in the invoice currency.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from billing_kernel.domain.ledger import Invoice, InvoiceStatus, Payment
from billing_kernel.domain.values import Money


@dataclass(frozen=True)
class ReconciliationOutcome:
    """Result of evaluating the status rule for one invoice."""

    invoice_id: UUID
    previous_status: InvoiceStatus
    new_status: InvoiceStatus | None
    total_paid: Money
    invoice_amount: Money

    @property
    def changed(self) -> bool:
        return self.new_status is not None

    @property
    def resulting_status(self) -> InvoiceStatus:
        return self.new_status if self.new_status is not None else self.previous_status

    @property
    def balance_due(self) -> Money:
        """Amount still owed; negative when overpaid."""
        return self.invoice_amount.subtract(self.total_paid)


def total_paid(invoice: Invoice, payments: Iterable[Payment]) -> Money:
    """
    Sum payment amounts in the invoice currency.

    Raises:
        CurrencyMismatchError: If any payment is in another currency.
    """
    return Money.sum((p.amount for p in payments), invoice.currency)


def derive_status(
    status: InvoiceStatus,
    amount: Money,
    paid: Money,
) -> InvoiceStatus | None:
    """Return the status to transition to, or None when none applies."""
    settled = paid >= amount
    if settled and status != InvoiceStatus.PAID:
        return InvoiceStatus.PAID
    if not settled and status == InvoiceStatus.PAID:
        return InvoiceStatus.PENDING
    return None


def evaluate(invoice: Invoice, payments: Iterable[Payment]) -> ReconciliationOutcome:
    """Apply the status rule to an invoice and its full payment set."""
    paid = total_paid(invoice, payments)
    return ReconciliationOutcome(
        invoice_id=invoice.id,
        previous_status=invoice.status,
        new_status=derive_status(invoice.status, invoice.amount, paid),
        total_paid=paid,
        invoice_amount=invoice.amount,
    )
