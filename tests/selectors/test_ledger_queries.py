"""
Tests for LedgerSelector read accessors and filters.
"""

from datetime import date
from uuid import uuid4

import pytest

from billing_kernel.domain.ledger import InvoiceStatus
from billing_kernel.exceptions import (
    InvoiceNotFoundError,
    PaymentNotFoundError,
    ReportNotFoundError,
)
from billing_kernel.selectors.ledger_selector import LedgerFilter


class TestInvoiceQueries:
    """get_invoice and list_invoices."""

    def test_get_missing_invoice(self, selector):
        missing = uuid4()
        with pytest.raises(InvoiceNotFoundError) as exc_info:
            selector.get_invoice(missing)
        assert exc_info.value.code == "INVOICE_NOT_FOUND"

    def test_get_for_update_returns_fresh_row(self, create_invoice, ledger_service, selector):
        invoice = create_invoice("10.00")
        ledger_service.set_invoice_status(invoice.id, InvoiceStatus.OVERDUE)
        locked = selector.get_invoice(invoice.id, for_update=True)
        assert locked.status == InvoiceStatus.OVERDUE
        assert locked.version == invoice.version + 1

    def test_list_ordered_by_issue_date(self, create_invoice, selector):
        late = create_invoice("1.00", issue_date=date(2025, 6, 1))
        early = create_invoice("2.00", issue_date=date(2025, 1, 1))
        assert [inv.id for inv in selector.list_invoices()] == [early.id, late.id]

    def test_filter_by_owner(self, create_invoice, selector):
        other = uuid4()
        create_invoice("1.00")
        theirs = create_invoice("2.00", owner=other)
        result = selector.list_invoices(LedgerFilter(owner_id=other))
        assert [inv.id for inv in result] == [theirs.id]

    def test_filter_by_date_range_inclusive(self, create_invoice, selector):
        create_invoice("1.00", issue_date=date(2025, 1, 31))
        inside_a = create_invoice("2.00", issue_date=date(2025, 2, 1))
        inside_b = create_invoice("3.00", issue_date=date(2025, 2, 28))
        create_invoice("4.00", issue_date=date(2025, 3, 1))

        result = selector.list_invoices(
            LedgerFilter(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
        )
        assert {inv.id for inv in result} == {inside_a.id, inside_b.id}

    def test_filter_by_status(self, create_invoice, record_payment, selector):
        paid = create_invoice("5.00")
        record_payment(paid, "5.00")
        pending = create_invoice("6.00")

        assert [i.id for i in selector.list_invoices(LedgerFilter(status=InvoiceStatus.PAID))] == [paid.id]
        assert [i.id for i in selector.list_invoices(LedgerFilter(status=InvoiceStatus.PENDING))] == [
            pending.id
        ]


class TestPaymentQueries:
    """Payment reads."""

    def test_payments_for_invoice(self, create_invoice, record_payment, selector):
        invoice = create_invoice("100.00")
        other = create_invoice("100.00")
        first = record_payment(invoice, "10.00", payment_date=date(2025, 6, 1))
        second = record_payment(invoice, "20.00", payment_date=date(2025, 6, 5))
        record_payment(other, "30.00")

        payments = selector.get_payments_for_invoice(invoice.id)
        assert [p.id for p in payments] == [first.id, second.id]

    def test_payments_for_invoice_empty(self, create_invoice, selector):
        assert selector.get_payments_for_invoice(create_invoice("1.00").id) == []

    def test_list_payments_by_date(self, create_invoice, record_payment, selector):
        invoice = create_invoice("100.00")
        record_payment(invoice, "10.00", payment_date=date(2025, 4, 30))
        may = record_payment(invoice, "20.00", payment_date=date(2025, 5, 15))

        result = selector.list_payments(LedgerFilter(start_date=date(2025, 5, 1)))
        assert [p.id for p in result] == [may.id]

    def test_get_missing_payment(self, selector):
        with pytest.raises(PaymentNotFoundError):
            selector.get_payment(uuid4())


class TestReportQueries:
    """Report reads."""

    def test_get_missing_report(self, selector):
        with pytest.raises(ReportNotFoundError):
            selector.get_report(uuid4())

    def test_list_reports_empty(self, selector, owner_id):
        assert selector.list_reports(owner_id) == []
