"""
LedgerService -- plain persistence mutators for invoices, payments, reports.

Responsibility:
    The write half of the persistence collaborator.  Inserts, updates and
    deletes rows and returns fresh DTOs.  Holds no business rules: deciding
    an invoice's status is ReconciliationService's job, and deciding
    whether a payment may be written is PaymentService's.

Architecture position:
    Kernel > Services -- imperative shell.  Used by ReconciliationService,
    PaymentService, InvoiceService and ReportingService.

Invariants enforced:
    - Every invoice write increments ``version``.
    - set_invoice_status persists the status (and the version bump) and
      nothing else.  With ``expected_version`` it is a compare-and-set: the
      UPDATE only matches the row if nobody else wrote it since the caller
      read it.
    - Flush only; never commit.

Failure modes:
    - InvoiceNotFoundError / PaymentNotFoundError for unknown ids.
    - ReconciliationConflictError when a compare-and-set matches no row
      although the invoice exists.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import select, update

from billing_kernel.domain.ledger import (
    Invoice,
    InvoiceStatus,
    Payment,
    Report,
)
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import (
    InvoiceNotFoundError,
    PaymentNotFoundError,
    ReconciliationConflictError,
)
from billing_kernel.logging_config import get_logger
from billing_kernel.models.invoice import InvoiceModel
from billing_kernel.models.payment import PaymentModel
from billing_kernel.models.report import ReportModel
from billing_kernel.services.base import BaseService

logger = get_logger("services.ledger")

UNSET: Any = object()


class LedgerService(BaseService[InvoiceModel]):
    """
    Row-level writes against the ledger tables.

    Guarantees:
        - Returned DTOs reflect the flushed database state.
        - Status writes never touch amount, dates or client fields.
    """

    # =========================================================================
    # Invoices
    # =========================================================================

    def _load_invoice(self, invoice_id: UUID) -> InvoiceModel:
        model = self.session.execute(
            select(InvoiceModel)
            .where(InvoiceModel.id == invoice_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if model is None:
            raise InvoiceNotFoundError(str(invoice_id))
        return model

    def add_invoice(self, invoice: Invoice) -> Invoice:
        """Insert a new invoice row."""
        model = InvoiceModel.from_dto(invoice)
        self.session.add(model)
        self.session.flush()
        logger.debug(
            "invoice_row_inserted",
            extra={"invoice_id": str(model.id), "amount_minor": model.amount_minor},
        )
        return model.to_dto()

    def update_invoice(
        self,
        invoice_id: UUID,
        *,
        title: str | None = None,
        client_name: str | None = None,
        client_id: UUID | None = UNSET,
        amount: Money | None = None,
        issue_date: date | None = None,
        status: InvoiceStatus | None = None,
    ) -> Invoice:
        """
        Apply a direct edit to an invoice.

        Only the given fields change.  ``client_id=None`` clears the client
        reference; leaving it out keeps it.
        """
        model = self._load_invoice(invoice_id)
        if title is not None:
            model.title = title
        if client_name is not None:
            model.client_name = client_name
        if client_id is not UNSET:
            model.client_id = client_id
        if amount is not None:
            model.amount_minor = amount.minor_units
            model.currency = amount.currency
        if issue_date is not None:
            model.issue_date = issue_date
        if status is not None:
            model.status = InvoiceStatus(status).value
        model.version = model.version + 1
        self.session.flush()
        return model.to_dto()

    def remove_invoice(self, invoice_id: UUID) -> int:
        """
        Delete an invoice and its payments.

        Returns:
            Number of payments deleted with it.
        """
        model = self._load_invoice(invoice_id)
        payment_count = len(model.payments)
        self.session.delete(model)
        self.session.flush()
        logger.debug(
            "invoice_row_deleted",
            extra={"invoice_id": str(invoice_id), "payments_deleted": payment_count},
        )
        return payment_count

    def set_invoice_status(
        self,
        invoice_id: UUID,
        status: InvoiceStatus,
        expected_version: int | None = None,
    ) -> Invoice:
        """
        Persist a new invoice status.

        Args:
            invoice_id: Invoice to update.
            status: New status.
            expected_version: When given, the write only succeeds if the
                stored version still equals it.

        Returns:
            The updated invoice (version incremented).

        Raises:
            InvoiceNotFoundError: If the invoice does not exist.
            ReconciliationConflictError: If ``expected_version`` is stale.
        """
        self.session.flush()

        stmt = update(InvoiceModel).where(InvoiceModel.id == invoice_id)
        if expected_version is not None:
            stmt = stmt.where(InvoiceModel.version == expected_version)
        stmt = stmt.values(
            status=InvoiceStatus(status).value,
            version=InvoiceModel.version + 1,
        ).execution_options(synchronize_session=False)

        result = self.session.execute(stmt)
        if result.rowcount == 0:
            # Raises InvoiceNotFoundError when the row is gone
            self._load_invoice(invoice_id)
            raise ReconciliationConflictError(str(invoice_id), expected_version)

        return self._load_invoice(invoice_id).to_dto()

    # =========================================================================
    # Payments
    # =========================================================================

    def _load_payment(self, payment_id: UUID) -> PaymentModel:
        model = self.session.get(PaymentModel, payment_id)
        if model is None:
            raise PaymentNotFoundError(str(payment_id))
        return model

    def add_payment(self, payment: Payment) -> Payment:
        """Insert a new payment row."""
        model = PaymentModel.from_dto(payment)
        self.session.add(model)
        self.session.flush()
        logger.debug(
            "payment_row_inserted",
            extra={
                "payment_id": str(model.id),
                "invoice_id": str(model.invoice_id),
                "amount_minor": model.amount_minor,
            },
        )
        return model.to_dto()

    def update_payment(
        self,
        payment_id: UUID,
        *,
        amount: Money | None = None,
        payment_date: date | None = None,
        invoice_id: UUID | None = None,
        receipt_generated: bool | None = None,
    ) -> Payment:
        """Apply an edit to a payment.  Only the given fields change."""
        model = self._load_payment(payment_id)
        if amount is not None:
            model.amount_minor = amount.minor_units
            model.currency = amount.currency
        if payment_date is not None:
            model.payment_date = payment_date
        if invoice_id is not None:
            model.invoice_id = invoice_id
        if receipt_generated is not None:
            model.receipt_generated = receipt_generated
        self.session.flush()
        return model.to_dto()

    def remove_payment(self, payment_id: UUID) -> Payment:
        """Delete a payment row and return what was deleted."""
        model = self._load_payment(payment_id)
        dto = model.to_dto()
        self.session.delete(model)
        self.session.flush()
        logger.debug(
            "payment_row_deleted",
            extra={"payment_id": str(payment_id), "invoice_id": str(dto.invoice_id)},
        )
        return dto

    # =========================================================================
    # Reports
    # =========================================================================

    def add_report(self, report: Report) -> Report:
        """Insert a report snapshot."""
        model = ReportModel.from_dto(report)
        self.session.add(model)
        self.session.flush()
        return model.to_dto()
