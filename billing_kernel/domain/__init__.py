"""
Pure domain layer.

This module contains pure value objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (today is always passed in)
- I/O

All domain objects are immutable and deterministic.
"""

from billing_kernel.domain.aggregation import (
    DashboardStats,
    PeriodBucket,
    PeriodUnit,
    ReportSummary,
    aggregate,
    compute_dashboard_stats,
    summarize_buckets,
)
from billing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from billing_kernel.domain.converter import CurrencyConverter, ExchangeRateTable
from billing_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from billing_kernel.domain.ledger import (
    Invoice,
    InvoiceStatus,
    Payment,
    Report,
    ReportType,
)
from billing_kernel.domain.reconciliation import (
    ReconciliationOutcome,
    derive_status,
    evaluate,
)
from billing_kernel.domain.values import Money, format_money

__all__ = [
    # Values
    "Money",
    "format_money",
    "CurrencyInfo",
    "CurrencyRegistry",
    "CurrencyConverter",
    "ExchangeRateTable",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Ledger
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "Report",
    "ReportType",
    # Reconciliation
    "ReconciliationOutcome",
    "derive_status",
    "evaluate",
    # Aggregation
    "DashboardStats",
    "PeriodBucket",
    "PeriodUnit",
    "ReportSummary",
    "aggregate",
    "compute_dashboard_stats",
    "summarize_buckets",
]
