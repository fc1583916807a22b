"""Kernel services: write paths and the reporting read path."""

from billing_kernel.services.base import BaseService
from billing_kernel.services.invoice_service import InvoiceService
from billing_kernel.services.ledger_service import LedgerService
from billing_kernel.services.payment_service import PaymentResult, PaymentService
from billing_kernel.services.reconciliation_service import (
    ReconciliationResult,
    ReconciliationService,
)
from billing_kernel.services.reporting_service import (
    ReportingService,
    ReportingSettings,
)

__all__ = [
    "BaseService",
    "InvoiceService",
    "LedgerService",
    "PaymentResult",
    "PaymentService",
    "ReconciliationResult",
    "ReconciliationService",
    "ReportingService",
    "ReportingSettings",
]
