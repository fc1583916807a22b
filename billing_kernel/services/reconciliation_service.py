"""
ReconciliationService -- keeps invoice status consistent with its payments.

Responsibility:
    Runs one reconciliation pass for an invoice: lock the invoice row, read
    its payment set, apply the pure status rule from
    ``billing_kernel.domain.reconciliation``, and when a transition applies,
    persist it through ``LedgerService.set_invoice_status``.

Architecture position:
    Kernel > Services -- imperative shell around the pure rule.  Called by
    PaymentService and InvoiceService after every mutation that can change
    an invoice's paid total; external callers that write payments by other
    means call the ``on_payment_*`` hooks.

Invariants enforced:
    - Consistent snapshot: the invoice row is read with SELECT ... FOR UPDATE
      before its payments, so a concurrent writer on the same invoice waits
      for this transaction to finish.
    - Compare-and-set: the status write carries the version the decision
      was computed from; a concurrent write is detected, never overwritten.
    - Idempotence: a second pass over unchanged inputs writes nothing.
    - overdue is never derived and never rewritten to pending.

Failure modes:
    - InvoiceNotFoundError if the invoice does not exist.
    - CurrencyMismatchError if a stored payment is in a foreign currency.
    - ReconciliationConflictError if the status write loses a race.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from billing_kernel.domain.ledger import Invoice, InvoiceStatus
from billing_kernel.domain.reconciliation import evaluate
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import ReconciliationConflictError
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.models.invoice import InvoiceModel
from billing_kernel.selectors.ledger_selector import LedgerSelector
from billing_kernel.services.base import BaseService
from billing_kernel.services.ledger_service import LedgerService

logger = get_logger("services.reconciliation")


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of one reconciliation pass."""

    invoice: Invoice
    previous_status: InvoiceStatus
    total_paid: Money

    @property
    def invoice_id(self) -> UUID:
        return self.invoice.id

    @property
    def status(self) -> InvoiceStatus:
        return self.invoice.status

    @property
    def changed(self) -> bool:
        return self.invoice.status != self.previous_status

    @property
    def balance_due(self) -> Money:
        """Amount still owed; negative when overpaid."""
        return self.invoice.amount.subtract(self.total_paid)


class ReconciliationService(BaseService[InvoiceModel]):
    """
    Derives and persists invoice status from the payment set.

    Contract:
        ``reconcile`` performs exactly one evaluate-and-write pass.  It does
        not retry on conflict; the caller's transaction decides what to do.
    """

    def __init__(
        self,
        session: Session,
        selector: LedgerSelector | None = None,
        ledger: LedgerService | None = None,
    ):
        super().__init__(session)
        self._selector = selector or LedgerSelector(session)
        self._ledger = ledger or LedgerService(session)

    def reconcile(self, invoice_id: UUID) -> ReconciliationResult:
        """
        Bring an invoice's status in line with its payments.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist.
            CurrencyMismatchError: If a payment's currency differs.
            ReconciliationConflictError: If the invoice was written
                concurrently between the read and the status write.
        """
        with LogContext.bind(invoice_id=str(invoice_id)):
            invoice = self._selector.get_invoice(invoice_id, for_update=True)
            payments = self._selector.get_payments_for_invoice(invoice_id)
            outcome = evaluate(invoice, payments)

            if not outcome.changed:
                logger.debug(
                    "reconciliation_noop",
                    extra={
                        "status": invoice.status.value,
                        "total_paid_minor": outcome.total_paid.minor_units,
                        "amount_minor": invoice.amount.minor_units,
                    },
                )
                return ReconciliationResult(
                    invoice=invoice,
                    previous_status=invoice.status,
                    total_paid=outcome.total_paid,
                )

            try:
                updated = self._ledger.set_invoice_status(
                    invoice_id,
                    outcome.new_status,
                    expected_version=invoice.version,
                )
            except ReconciliationConflictError:
                logger.warning(
                    "reconciliation_conflict",
                    extra={
                        "expected_version": invoice.version,
                        "attempted_status": outcome.new_status.value,
                    },
                )
                raise

            logger.info(
                "invoice_status_transition",
                extra={
                    "from_status": invoice.status.value,
                    "to_status": updated.status.value,
                    "total_paid_minor": outcome.total_paid.minor_units,
                    "amount_minor": invoice.amount.minor_units,
                    "currency": invoice.currency,
                    "version": updated.version,
                },
            )
            return ReconciliationResult(
                invoice=updated,
                previous_status=invoice.status,
                total_paid=outcome.total_paid,
            )

    # =========================================================================
    # Trigger points
    # =========================================================================

    def on_payment_created(self, invoice_id: UUID) -> ReconciliationResult:
        logger.debug("reconciliation_triggered", extra={"trigger": "payment_created"})
        return self.reconcile(invoice_id)

    def on_payment_updated(self, invoice_id: UUID) -> ReconciliationResult:
        logger.debug("reconciliation_triggered", extra={"trigger": "payment_updated"})
        return self.reconcile(invoice_id)

    def on_payment_deleted(self, invoice_id: UUID) -> ReconciliationResult:
        logger.debug("reconciliation_triggered", extra={"trigger": "payment_deleted"})
        return self.reconcile(invoice_id)
