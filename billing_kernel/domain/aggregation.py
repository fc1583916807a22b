"""
Aggregation -- period-bucketed revenue and payment statistics.

Responsibility:
    Pure transformation functions that turn invoice and payment snapshots
    into the period buckets plotted on report charts and the scalar
    statistics shown on the dashboard.  No function in this module mutates
    or persists anything; ReportingService loads the snapshots and calls in.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  "Today" is always a
    parameter, supplied by the caller's injected Clock.

Invariants enforced:
    - Every sum is a chained Money.add over integer minor units.
    - Amounts in other currencies are converted to the reporting currency
      item by item before summing, so bucketed totals are additive over any
      split of the input.
    - estimated_expenses is a synthetic visualization value (a fixed ratio of
      revenue) and every bucket carries ``expenses_are_estimate=True``.  No
      expense records exist in the ledger.

Failure modes:
    - ValueError when period_count < 1 or the period unit is unknown.
    - CurrencyMismatchError when an amount is in a foreign currency and no
      converter was given.
    - UnsupportedCurrencyError from the converter.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from billing_kernel.domain.converter import CurrencyConverter
from billing_kernel.domain.ledger import Invoice, InvoiceStatus, Payment
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import CurrencyMismatchError

DEFAULT_EXPENSE_RATIO = Decimal("0.70")
DEFAULT_RECENT_LIMIT = 10

# Named report ranges offered to report consumers
REPORT_PERIODS: dict[str, int] = {
    "last_3_months": 3,
    "last_6_months": 6,
    "last_12_months": 12,
}


class PeriodUnit(str, Enum):
    """Width of one aggregation bucket."""

    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class PeriodWindow:
    """One calendar period; ``month`` is None for yearly windows."""

    year: int
    month: int | None
    label: str

    def contains(self, day: date) -> bool:
        if day.year != self.year:
            return False
        return self.month is None or day.month == self.month

    @property
    def start_date(self) -> date:
        return date(self.year, self.month or 1, 1)


@dataclass(frozen=True)
class PeriodBucket:
    """Aggregated totals for one period window."""

    label: str
    start_date: date
    revenue: Money
    payments_total: Money
    estimated_expenses: Money
    expenses_are_estimate: bool = True


@dataclass(frozen=True)
class DashboardStats:
    """Scalar statistics over the full, unbucketed ledger."""

    total_revenue: Money
    pending_invoices: int
    total_payments: Money
    outstanding_balance: Money
    recent_invoices: tuple[Invoice, ...] = ()


@dataclass(frozen=True)
class ReportSummary:
    """Totals across all buckets of a report."""

    total_revenue: Money
    total_payments: Money
    total_estimated_expenses: Money
    estimated_net_profit: Money


# =========================================================================
# Period windows
# =========================================================================


def period_windows(
    today: date,
    period_count: int,
    period_unit: PeriodUnit | str = PeriodUnit.MONTH,
) -> list[PeriodWindow]:
    """
    Consecutive calendar windows ending at the period containing ``today``.

    Returns oldest first.  The current period is always the last window.
    """
    if period_count < 1:
        raise ValueError(f"period_count must be at least 1, got {period_count}")
    unit = PeriodUnit(period_unit)

    windows: list[PeriodWindow] = []
    if unit is PeriodUnit.YEAR:
        for offset in range(period_count - 1, -1, -1):
            year = today.year - offset
            windows.append(PeriodWindow(year=year, month=None, label=str(year)))
        return windows

    current = today.year * 12 + (today.month - 1)
    for offset in range(period_count - 1, -1, -1):
        year, month_index = divmod(current - offset, 12)
        month = month_index + 1
        windows.append(
            PeriodWindow(
                year=year,
                month=month,
                label=f"{calendar.month_abbr[month]} {year}",
            )
        )
    return windows


# =========================================================================
# Summation helpers
# =========================================================================


def _in_currency(
    amount: Money,
    currency: str,
    converter: CurrencyConverter | None,
) -> Money:
    if amount.currency == currency:
        return amount
    if converter is None:
        raise CurrencyMismatchError(currency, amount.currency)
    return converter.convert(amount, currency)


def _sum_amounts(
    amounts: Iterable[Money],
    currency: str,
    converter: CurrencyConverter | None,
) -> Money:
    return Money.sum((_in_currency(a, currency, converter) for a in amounts), currency)


def estimate_expenses(revenue: Money, ratio: Decimal = DEFAULT_EXPENSE_RATIO) -> Money:
    """Synthetic expense figure for charts: a fixed share of revenue."""
    return revenue.multiply(ratio)


# =========================================================================
# Public aggregation entry points
# =========================================================================


def aggregate(
    invoices: Sequence[Invoice],
    payments: Sequence[Payment],
    period_count: int,
    period_unit: PeriodUnit | str = PeriodUnit.MONTH,
    *,
    today: date,
    currency: str,
    converter: CurrencyConverter | None = None,
    expense_ratio: Decimal = DEFAULT_EXPENSE_RATIO,
) -> list[PeriodBucket]:
    """
    Bucket invoices by issue date and payments by payment date.

    Postconditions:
        - Exactly ``period_count`` buckets, oldest first, the last one being
          the period that contains ``today``.
        - Items dated outside every window are ignored.
    """
    buckets: list[PeriodBucket] = []
    for window in period_windows(today, period_count, period_unit):
        revenue = _sum_amounts(
            (inv.amount for inv in invoices if window.contains(inv.issue_date)),
            currency,
            converter,
        )
        payments_total = _sum_amounts(
            (p.amount for p in payments if window.contains(p.payment_date)),
            currency,
            converter,
        )
        buckets.append(
            PeriodBucket(
                label=window.label,
                start_date=window.start_date,
                revenue=revenue,
                payments_total=payments_total,
                estimated_expenses=estimate_expenses(revenue, expense_ratio),
            )
        )
    return buckets


def compute_dashboard_stats(
    invoices: Sequence[Invoice],
    payments: Sequence[Payment],
    *,
    currency: str,
    converter: CurrencyConverter | None = None,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> DashboardStats:
    """Reduce the full invoice/payment sets to dashboard scalars."""
    total_revenue = _sum_amounts((inv.amount for inv in invoices), currency, converter)
    total_payments = _sum_amounts((p.amount for p in payments), currency, converter)
    pending = sum(1 for inv in invoices if inv.status == InvoiceStatus.PENDING)
    recent = sorted(invoices, key=lambda inv: inv.issue_date, reverse=True)[:recent_limit]

    return DashboardStats(
        total_revenue=total_revenue,
        pending_invoices=pending,
        total_payments=total_payments,
        outstanding_balance=total_revenue.subtract(total_payments),
        recent_invoices=tuple(recent),
    )


def summarize_buckets(buckets: Sequence[PeriodBucket], currency: str) -> ReportSummary:
    """Totals over a bucket series (all buckets share one currency)."""
    revenue = Money.sum((b.revenue for b in buckets), currency)
    expenses = Money.sum((b.estimated_expenses for b in buckets), currency)
    return ReportSummary(
        total_revenue=revenue,
        total_payments=Money.sum((b.payments_total for b in buckets), currency),
        total_estimated_expenses=expenses,
        estimated_net_profit=revenue.subtract(expenses),
    )


# =========================================================================
# Plain-data rendering for report consumers
# =========================================================================


def bucket_to_dict(bucket: PeriodBucket) -> dict[str, Any]:
    return {
        "label": bucket.label,
        "start_date": bucket.start_date.isoformat(),
        "currency": bucket.revenue.currency,
        "revenue": bucket.revenue.to_decimal_string(),
        "payments": bucket.payments_total.to_decimal_string(),
        "estimated_expenses": bucket.estimated_expenses.to_decimal_string(),
        "expenses_are_estimate": bucket.expenses_are_estimate,
    }


def summary_to_dict(summary: ReportSummary) -> dict[str, Any]:
    return {
        "currency": summary.total_revenue.currency,
        "total_revenue": summary.total_revenue.to_decimal_string(),
        "total_payments": summary.total_payments.to_decimal_string(),
        "total_estimated_expenses": summary.total_estimated_expenses.to_decimal_string(),
        "estimated_net_profit": summary.estimated_net_profit.to_decimal_string(),
    }


def stats_to_dict(stats: DashboardStats) -> dict[str, Any]:
    return {
        "currency": stats.total_revenue.currency,
        "total_revenue": stats.total_revenue.to_decimal_string(),
        "pending_invoices": stats.pending_invoices,
        "total_payments": stats.total_payments.to_decimal_string(),
        "outstanding_balance": stats.outstanding_balance.to_decimal_string(),
        "recent_invoices": [
            {
                "id": str(inv.id),
                "title": inv.title,
                "client_name": inv.client_name,
                "amount": inv.amount.to_decimal_string(),
                "currency": inv.currency,
                "issue_date": inv.issue_date.isoformat(),
                "status": inv.status.value,
            }
            for inv in stats.recent_invoices
        ],
    }
