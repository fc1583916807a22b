"""ORM models for the billing ledger."""

from billing_kernel.models.invoice import InvoiceModel
from billing_kernel.models.payment import PaymentModel
from billing_kernel.models.report import ReportModel

__all__ = [
    "InvoiceModel",
    "PaymentModel",
    "ReportModel",
]
