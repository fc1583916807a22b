"""
PaymentService -- payment mutations with reconciliation in the same unit.

Responsibility:
    Records, edits and deletes payments.  Every write that can change an
    invoice's paid total is followed by a reconciliation pass for each
    affected invoice, and the write plus the pass run inside one SAVEPOINT.

Architecture position:
    Kernel > Services -- the API collaborator's entry point for payments.

Invariants enforced:
    - A payment is always in its invoice's currency.  The check runs before
      any row is written.
    - A payment names an existing invoice.  The check runs before any row
      is written.
    - All-or-nothing: if reconciliation fails, the payment write is rolled
      back with it and the error propagates.
    - The invoice row is locked before any payment row is written.
    - Moving a payment to another invoice reconciles both invoices, locked
      in id order.

Failure modes:
    - InvoiceNotFoundError, PaymentNotFoundError for unknown ids.
    - CurrencyMismatchError when the payment currency differs from the
      invoice currency.
    - InvalidAmountError when a payment amount is not positive.
    - ReconciliationConflictError from the reconciliation pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from billing_kernel.domain.ledger import Invoice, Payment
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import CurrencyMismatchError, InvalidAmountError
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.models.payment import PaymentModel
from billing_kernel.selectors.ledger_selector import LedgerSelector
from billing_kernel.services.base import BaseService
from billing_kernel.services.ledger_service import LedgerService
from billing_kernel.services.reconciliation_service import (
    ReconciliationResult,
    ReconciliationService,
)

logger = get_logger("services.payment")


@dataclass(frozen=True)
class PaymentResult:
    """A payment mutation and the reconciliation passes it triggered."""

    payment: Payment
    reconciliations: tuple[ReconciliationResult, ...]

    @property
    def invoice(self) -> Invoice:
        """The invoice the payment now belongs to, after reconciliation."""
        for result in self.reconciliations:
            if result.invoice_id == self.payment.invoice_id:
                return result.invoice
        raise LookupError(f"No reconciliation for invoice {self.payment.invoice_id}")


class PaymentService(BaseService[PaymentModel]):
    """
    Payment create/update/delete with automatic reconciliation.

    Contract:
        Flushes inside a SAVEPOINT; never commits the outer transaction.
    """

    def __init__(
        self,
        session: Session,
        reconciliation: ReconciliationService | None = None,
    ):
        super().__init__(session)
        self._selector = LedgerSelector(session)
        self._ledger = LedgerService(session)
        self._reconciliation = reconciliation or ReconciliationService(
            session, selector=self._selector, ledger=self._ledger
        )

    @staticmethod
    def _check_amount(amount: Money, invoice: Invoice) -> None:
        if amount.currency != invoice.currency:
            raise CurrencyMismatchError(invoice.currency, amount.currency)
        if not amount.is_positive:
            raise InvalidAmountError(amount.to_decimal_string())

    # =========================================================================
    # Mutations
    # =========================================================================

    def record_payment(
        self,
        invoice_id: UUID,
        amount: Money,
        payment_date: date,
        owner_id: UUID,
        payment_id: UUID | None = None,
    ) -> PaymentResult:
        """
        Record a payment against an invoice and reconcile the invoice.

        Raises:
            InvoiceNotFoundError: Before any write, if the invoice is unknown.
            CurrencyMismatchError: Before any write, on a currency mismatch.
        """
        # Lock before the insert: the payment FK takes a shared lock on the
        # invoice row, and upgrading it later deadlocks concurrent writers.
        invoice = self._selector.get_invoice(invoice_id, for_update=True)
        self._check_amount(amount, invoice)

        payment = Payment(
            id=payment_id or uuid4(),
            invoice_id=invoice_id,
            amount=amount,
            payment_date=payment_date,
            owner_id=owner_id,
        )

        with LogContext.bind(invoice_id=str(invoice_id), payment_id=str(payment.id)):
            with self.savepoint("record_payment"):
                stored = self._ledger.add_payment(payment)
                result = self._reconciliation.on_payment_created(invoice_id)
            outcome = PaymentResult(payment=stored, reconciliations=(result,))
            logger.info(
                "payment_recorded",
                extra={
                    "amount_minor": amount.minor_units,
                    "currency": amount.currency,
                    "invoice_status": outcome.invoice.status.value,
                },
            )
        return outcome

    def update_payment(
        self,
        payment_id: UUID,
        *,
        amount: Money | None = None,
        payment_date: date | None = None,
        invoice_id: UUID | None = None,
    ) -> PaymentResult:
        """
        Edit a payment and reconcile every invoice whose total it touched.

        Raises:
            PaymentNotFoundError: If the payment is unknown.
            InvoiceNotFoundError: If ``invoice_id`` names an unknown invoice.
            CurrencyMismatchError: If the new amount does not match the
                target invoice currency.
        """
        existing = self._selector.get_payment(payment_id)
        target_id = invoice_id or existing.invoice_id
        affected = sorted({existing.invoice_id, target_id}, key=str)
        locked = {
            affected_id: self._selector.get_invoice(affected_id, for_update=True)
            for affected_id in affected
        }
        self._check_amount(amount or existing.amount, locked[target_id])

        with LogContext.bind(invoice_id=str(target_id), payment_id=str(payment_id)):
            with self.savepoint("update_payment"):
                stored = self._ledger.update_payment(
                    payment_id,
                    amount=amount,
                    payment_date=payment_date,
                    invoice_id=invoice_id,
                )
                results = tuple(
                    self._reconciliation.on_payment_updated(affected_id)
                    for affected_id in affected
                )
            outcome = PaymentResult(payment=stored, reconciliations=results)
            logger.info(
                "payment_updated",
                extra={
                    "amount_minor": outcome.payment.amount.minor_units,
                    "moved_from": (
                        str(existing.invoice_id)
                        if existing.invoice_id != target_id
                        else None
                    ),
                },
            )
        return outcome

    def delete_payment(self, payment_id: UUID) -> PaymentResult:
        """
        Delete a payment and reconcile its invoice.

        Raises:
            PaymentNotFoundError: If the payment is unknown.
        """
        existing = self._selector.get_payment(payment_id)
        self._selector.get_invoice(existing.invoice_id, for_update=True)

        with LogContext.bind(
            invoice_id=str(existing.invoice_id), payment_id=str(payment_id)
        ):
            with self.savepoint("delete_payment"):
                removed = self._ledger.remove_payment(payment_id)
                result = self._reconciliation.on_payment_deleted(removed.invoice_id)
            outcome = PaymentResult(payment=removed, reconciliations=(result,))
            logger.info(
                "payment_deleted",
                extra={
                    "amount_minor": existing.amount.minor_units,
                    "invoice_status": outcome.invoice.status.value,
                },
            )
        return outcome

    def mark_receipt_generated(self, payment_id: UUID) -> Payment:
        """Flag that a receipt was issued.  Totals are unchanged, so no pass runs."""
        payment = self._ledger.update_payment(payment_id, receipt_generated=True)
        logger.info(
            "payment_receipt_marked",
            extra={"payment_id": str(payment_id)},
        )
        return payment

    def get_payment(self, payment_id: UUID) -> Payment:
        return self._selector.get_payment(payment_id)

    def list_payments_for_invoice(self, invoice_id: UUID) -> list[Payment]:
        return self._selector.get_payments_for_invoice(invoice_id)
