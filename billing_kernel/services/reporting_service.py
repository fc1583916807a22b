"""
Reporting Service (``billing_kernel.services.reporting_service``).

Responsibility
--------------
Read path for the dashboard and the period reports.  Loads invoice and
payment snapshots through ``LedgerSelector`` and hands them to the pure
functions in ``billing_kernel.domain.aggregation``.  Also persists report
snapshots so a generated report can be listed and re-read later.

Architecture position
---------------------
**Kernel > Services** -- thin glue between selectors and the aggregation
core.  Constructor: ``session`` + ``converter`` + ``clock`` + ``settings``.

Invariants enforced
-------------------
* Dashboard statistics are recomputed from the ledger on every call.
* The current period comes from the injected clock, never the wall clock
  directly.
* Estimated expenses are labelled as estimates in every payload.

Failure modes
-------------
* ``ValueError`` for a period count below 1 or an unknown preset name.
* ``CurrencyMismatchError`` when a foreign-currency amount is found and no
  converter was configured.
* ``ReportNotFoundError`` for unknown report ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Self
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from billing_kernel.domain.aggregation import (
    DEFAULT_EXPENSE_RATIO,
    DEFAULT_RECENT_LIMIT,
    REPORT_PERIODS,
    DashboardStats,
    PeriodBucket,
    PeriodUnit,
    aggregate,
    bucket_to_dict,
    compute_dashboard_stats,
    period_windows,
    summarize_buckets,
    summary_to_dict,
)
from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.converter import CurrencyConverter
from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.domain.ledger import Report, ReportType
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.selectors.ledger_selector import LedgerFilter, LedgerSelector
from billing_kernel.services.ledger_service import LedgerService

logger = get_logger("services.reporting")


@dataclass(frozen=True)
class ReportingSettings:
    """Knobs for the reporting read path."""

    currency: str = CurrencyRegistry.DEFAULT_CURRENCY
    default_period_count: int = 6
    expense_ratio: Decimal = DEFAULT_EXPENSE_RATIO
    recent_limit: int = DEFAULT_RECENT_LIMIT

    def __post_init__(self) -> None:
        if self.default_period_count < 1:
            raise ValueError("default_period_count must be at least 1")
        if not Decimal(0) <= self.expense_ratio <= Decimal(1):
            raise ValueError("expense_ratio must be between 0 and 1")

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()


class ReportingService:
    """
    Dashboard statistics and period reports.

    Contract
    --------
    * ``compute_*`` methods are read-only.
    * ``generate_report`` writes exactly one report row (flush only).
    """

    def __init__(
        self,
        session: Session,
        converter: CurrencyConverter | None = None,
        clock: Clock | None = None,
        settings: ReportingSettings | None = None,
    ):
        self._session = session
        self._converter = converter
        self._clock = clock or SystemClock()
        self._settings = settings or ReportingSettings.with_defaults()
        self._selector = LedgerSelector(session)
        self._ledger = LedgerService(session)

    @property
    def settings(self) -> ReportingSettings:
        return self._settings

    def compute_dashboard_stats(self, owner_id: UUID | None = None) -> DashboardStats:
        """Scalar statistics over every invoice and payment of ``owner_id``."""
        scope = LedgerFilter(owner_id=owner_id)
        invoices = self._selector.list_invoices(scope)
        payments = self._selector.list_payments(scope)
        stats = compute_dashboard_stats(
            invoices,
            payments,
            currency=self._settings.currency,
            converter=self._converter,
            recent_limit=self._settings.recent_limit,
        )
        logger.debug(
            "dashboard_stats_computed",
            extra={
                "owner_id": str(owner_id) if owner_id else None,
                "invoice_count": len(invoices),
                "payment_count": len(payments),
            },
        )
        return stats

    def compute_report_buckets(
        self,
        period_count: int | None = None,
        owner_id: UUID | None = None,
        period_unit: PeriodUnit | str = PeriodUnit.MONTH,
    ) -> list[PeriodBucket]:
        """
        Period buckets ending at the current period, oldest first.

        Only rows dated inside the overall window are loaded.
        """
        count = period_count if period_count is not None else self._settings.default_period_count
        today = self._clock.today()
        windows = period_windows(today, count, period_unit)
        scope = LedgerFilter(owner_id=owner_id, start_date=windows[0].start_date)

        return aggregate(
            self._selector.list_invoices(scope),
            self._selector.list_payments(scope),
            count,
            period_unit,
            today=today,
            currency=self._settings.currency,
            converter=self._converter,
            expense_ratio=self._settings.expense_ratio,
        )

    def compute_preset_buckets(
        self,
        preset: str,
        owner_id: UUID | None = None,
    ) -> list[PeriodBucket]:
        """Buckets for a named range such as ``last_6_months``."""
        if preset not in REPORT_PERIODS:
            raise ValueError(
                f"Unknown report period {preset!r}; "
                f"expected one of {sorted(REPORT_PERIODS)}"
            )
        return self.compute_report_buckets(REPORT_PERIODS[preset], owner_id)

    def generate_report(
        self,
        title: str,
        report_type: ReportType | str,
        owner_id: UUID,
        period_count: int | None = None,
    ) -> Report:
        """
        Aggregate the owner's ledger and persist the result as a report.

        Yearly reports bucket by calendar year; every other type buckets
        by calendar month.
        """
        kind = ReportType(report_type)
        unit = PeriodUnit.YEAR if kind is ReportType.YEARLY else PeriodUnit.MONTH
        count = period_count if period_count is not None else self._settings.default_period_count

        buckets = self.compute_report_buckets(count, owner_id, unit)
        summary = summarize_buckets(buckets, self._settings.currency)
        data: dict[str, Any] = {
            "period_unit": unit.value,
            "period_count": count,
            "currency": self._settings.currency,
            "buckets": [bucket_to_dict(b) for b in buckets],
            "summary": summary_to_dict(summary),
        }

        report = self._ledger.add_report(
            Report(
                id=uuid4(),
                title=title,
                report_type=kind,
                generated_at=self._clock.now(),
                owner_id=owner_id,
                data=data,
            )
        )
        with LogContext.bind(report_id=str(report.id)):
            logger.info(
                "report_generated",
                extra={
                    "report_type": kind.value,
                    "period_unit": unit.value,
                    "period_count": count,
                    "total_revenue": summary.total_revenue.to_decimal_string(),
                },
            )
        return report

    def get_report(self, report_id: UUID) -> Report:
        return self._selector.get_report(report_id)

    def list_reports(self, owner_id: UUID | None = None) -> list[Report]:
        return self._selector.list_reports(owner_id)
