"""
InvoiceService -- create, edit and delete invoices, the aggregate root.

Responsibility:
    Direct invoice edits coming from the API collaborator.  An invoice is
    reconciled when it is created and whenever its amount changes, so its
    status never disagrees with the payments on file.  Also carries the
    one status edit that reconciliation never makes: marking an invoice
    overdue, on behalf of the external time-based process.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - Deleting an invoice deletes its payments (no orphans).
    - Only pending invoices are marked overdue; a paid invoice stays paid.
    - An explicit status on create is subject to reconciliation: ``paid``
      with no payments resolves to ``pending``.

Failure modes:
    - InvoiceNotFoundError for unknown ids.
    - InvalidAmountError for a negative invoice amount.
    - CurrencyMismatchError when an edit changes the currency of an invoice
      that already has payments (raised by the reconciliation pass, which
      rolls the edit back).
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.ledger import Invoice, InvoiceStatus
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import InvalidAmountError
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.models.invoice import InvoiceModel
from billing_kernel.selectors.ledger_selector import LedgerFilter, LedgerSelector
from billing_kernel.services.base import BaseService
from billing_kernel.services.ledger_service import UNSET, LedgerService
from billing_kernel.services.reconciliation_service import ReconciliationService

logger = get_logger("services.invoice")


class InvoiceService(BaseService[InvoiceModel]):
    """Invoice CRUD with reconciliation on create and on amount edits."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        reconciliation: ReconciliationService | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._selector = LedgerSelector(session)
        self._ledger = LedgerService(session)
        self._reconciliation = reconciliation or ReconciliationService(
            session, selector=self._selector, ledger=self._ledger
        )

    def create_invoice(
        self,
        title: str,
        client_name: str,
        amount: Money,
        owner_id: UUID,
        issue_date: date | None = None,
        status: InvoiceStatus = InvoiceStatus.PENDING,
        client_id: UUID | None = None,
        invoice_id: UUID | None = None,
    ) -> Invoice:
        """
        Create an invoice and reconcile it.

        ``issue_date`` defaults to today on the injected clock.
        """
        if amount.is_negative:
            raise InvalidAmountError(amount.to_decimal_string())

        invoice = Invoice(
            id=invoice_id or uuid4(),
            title=title,
            client_name=client_name,
            client_id=client_id,
            amount=amount,
            issue_date=issue_date or self._clock.today(),
            owner_id=owner_id,
            status=InvoiceStatus(status),
        )

        with LogContext.bind(invoice_id=str(invoice.id)):
            with self.savepoint("create_invoice"):
                self._ledger.add_invoice(invoice)
                result = self._reconciliation.reconcile(invoice.id)
            logger.info(
                "invoice_created",
                extra={
                    "amount_minor": amount.minor_units,
                    "currency": amount.currency,
                    "status": result.status.value,
                },
            )
        return result.invoice

    def update_invoice(
        self,
        invoice_id: UUID,
        *,
        title: str | None = None,
        client_name: str | None = None,
        client_id: Any = UNSET,
        amount: Money | None = None,
        issue_date: date | None = None,
    ) -> Invoice:
        """
        Apply a direct edit.  Re-reconciles when the amount changes.

        Raises:
            InvoiceNotFoundError: If the invoice does not exist.
        """
        if amount is not None and amount.is_negative:
            raise InvalidAmountError(amount.to_decimal_string())

        current = self._selector.get_invoice(invoice_id)
        amount_changed = amount is not None and amount != current.amount

        with LogContext.bind(invoice_id=str(invoice_id)):
            with self.savepoint("update_invoice"):
                updated = self._ledger.update_invoice(
                    invoice_id,
                    title=title,
                    client_name=client_name,
                    client_id=client_id,
                    amount=amount,
                    issue_date=issue_date,
                )
                if amount_changed:
                    updated = self._reconciliation.reconcile(invoice_id).invoice
            logger.info(
                "invoice_updated",
                extra={"amount_changed": amount_changed, "status": updated.status.value},
            )
        return updated

    def delete_invoice(self, invoice_id: UUID) -> int:
        """
        Delete an invoice together with its payments.

        Returns:
            Number of payments deleted.
        """
        with LogContext.bind(invoice_id=str(invoice_id)):
            deleted = self._ledger.remove_invoice(invoice_id)
            logger.info("invoice_deleted", extra={"payments_deleted": deleted})
        return deleted

    def mark_overdue(self, invoice_id: UUID) -> Invoice:
        """
        Mark a pending invoice overdue.

        Paid and already-overdue invoices are returned unchanged.
        """
        invoice = self._selector.get_invoice(invoice_id, for_update=True)
        if invoice.status != InvoiceStatus.PENDING:
            return invoice
        updated = self._ledger.set_invoice_status(
            invoice_id, InvoiceStatus.OVERDUE, expected_version=invoice.version
        )
        logger.info(
            "invoice_marked_overdue",
            extra={"invoice_id": str(invoice_id), "issue_date": invoice.issue_date},
        )
        return updated

    def mark_overdue_before(
        self,
        cutoff: date,
        owner_id: UUID | None = None,
    ) -> list[Invoice]:
        """Mark every pending invoice issued before ``cutoff`` overdue."""
        candidates = self._selector.list_invoices(
            LedgerFilter(owner_id=owner_id, status=InvoiceStatus.PENDING)
        )
        marked = [
            self.mark_overdue(inv.id) for inv in candidates if inv.issue_date < cutoff
        ]
        logger.info(
            "overdue_sweep_completed",
            extra={"cutoff": cutoff, "marked_count": len(marked)},
        )
        return marked

    def get_invoice(self, invoice_id: UUID) -> Invoice:
        return self._selector.get_invoice(invoice_id)

    def list_invoices(self, filter: LedgerFilter | None = None) -> list[Invoice]:
        return self._selector.list_invoices(filter)
