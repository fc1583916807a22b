"""
Module: billing_kernel.selectors.ledger_selector
Responsibility: Read accessors over invoices, payments and report snapshots --
    the read half of the persistence collaborator used by reconciliation and
    aggregation.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - get_invoice(for_update=True) takes a row lock (SELECT ... FOR UPDATE on
      PostgreSQL) and refreshes the identity map, so a reconciliation pass
      reads the invoice and its payment set as one consistent snapshot.
    - Owner filters: owner_id=None means every owner (administrator view).

Failure modes:
    - InvoiceNotFoundError / PaymentNotFoundError / ReportNotFoundError when
      a single-row lookup misses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import select

from billing_kernel.domain.ledger import Invoice, InvoiceStatus, Payment, Report
from billing_kernel.exceptions import (
    InvoiceNotFoundError,
    PaymentNotFoundError,
    ReportNotFoundError,
)
from billing_kernel.models.invoice import InvoiceModel
from billing_kernel.models.payment import PaymentModel
from billing_kernel.models.report import ReportModel
from billing_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class LedgerFilter:
    """Optional restrictions for invoice and payment listings."""

    owner_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: InvoiceStatus | None = None
    invoice_id: UUID | None = None


class LedgerSelector(BaseSelector):
    """
    Selector for invoice, payment and report queries.

    All results are frozen DTOs from ``billing_kernel.domain.ledger``.
    """

    # =========================================================================
    # Invoices
    # =========================================================================

    def get_invoice(self, invoice_id: UUID, for_update: bool = False) -> Invoice:
        """
        Load one invoice.

        Args:
            invoice_id: Invoice primary key.
            for_update: Lock the row until the caller's transaction ends and
                bypass any cached copy in the session.

        Raises:
            InvoiceNotFoundError: If no such invoice exists.
        """
        stmt = select(InvoiceModel).where(InvoiceModel.id == invoice_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        model = self.session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise InvoiceNotFoundError(str(invoice_id))
        return model.to_dto()

    def invoice_exists(self, invoice_id: UUID) -> bool:
        return self.session.get(InvoiceModel, invoice_id) is not None

    def list_invoices(self, filter: LedgerFilter | None = None) -> list[Invoice]:
        """Invoices matching ``filter``, oldest issue date first."""
        f = filter or LedgerFilter()
        stmt = self._owned_by(select(InvoiceModel), InvoiceModel, f.owner_id)
        stmt = self._within(stmt, InvoiceModel.issue_date, f.start_date, f.end_date)
        if f.status is not None:
            stmt = stmt.where(InvoiceModel.status == f.status.value)
        if f.invoice_id is not None:
            stmt = stmt.where(InvoiceModel.id == f.invoice_id)
        stmt = stmt.order_by(InvoiceModel.issue_date, InvoiceModel.created_at)
        return self._dtos(stmt)

    # =========================================================================
    # Payments
    # =========================================================================

    def get_payment(self, payment_id: UUID) -> Payment:
        """
        Load one payment.

        Raises:
            PaymentNotFoundError: If no such payment exists.
        """
        model = self.session.get(PaymentModel, payment_id)
        if model is None:
            raise PaymentNotFoundError(str(payment_id))
        return model.to_dto()

    def get_payments_for_invoice(self, invoice_id: UUID) -> list[Payment]:
        """Every payment currently recorded against ``invoice_id``."""
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.invoice_id == invoice_id)
            .order_by(PaymentModel.payment_date, PaymentModel.created_at)
        )
        return self._dtos(stmt)

    def list_payments(self, filter: LedgerFilter | None = None) -> list[Payment]:
        """Payments matching ``filter``, oldest payment date first."""
        f = filter or LedgerFilter()
        stmt = self._owned_by(select(PaymentModel), PaymentModel, f.owner_id)
        stmt = self._within(stmt, PaymentModel.payment_date, f.start_date, f.end_date)
        if f.invoice_id is not None:
            stmt = stmt.where(PaymentModel.invoice_id == f.invoice_id)
        stmt = stmt.order_by(PaymentModel.payment_date, PaymentModel.created_at)
        return self._dtos(stmt)

    # =========================================================================
    # Reports
    # =========================================================================

    def get_report(self, report_id: UUID) -> Report:
        """
        Load one report snapshot.

        Raises:
            ReportNotFoundError: If no such report exists.
        """
        model = self.session.get(ReportModel, report_id)
        if model is None:
            raise ReportNotFoundError(str(report_id))
        return model.to_dto()

    def list_reports(self, owner_id: UUID | None = None) -> list[Report]:
        """Report snapshots, newest first."""
        stmt = self._owned_by(select(ReportModel), ReportModel, owner_id)
        stmt = stmt.order_by(ReportModel.generated_at.desc())
        return self._dtos(stmt)
