"""
Module: billing_kernel.models.report
Responsibility: ORM persistence for generated report snapshots.

Invariants enforced:
    - data holds the aggregation payload materialized at generation time.
      It is written once and read back as-is; it is never recomputed.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import TrackedBase
from billing_kernel.domain.ledger import Report, ReportType


class ReportModel(TrackedBase):
    """ORM model for reports.  Maps to the ``Report`` frozen dataclass."""

    __tablename__ = "reports"

    __table_args__ = (
        Index("idx_reports_generated_at", "generated_at"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    report_type: Mapped[str] = mapped_column(String(50), nullable=False)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def to_dto(self) -> Report:
        """Convert ORM model to frozen dataclass."""
        return Report(
            id=self.id,
            title=self.title,
            report_type=ReportType(self.report_type),
            generated_at=self.generated_at,
            owner_id=self.owner_id,
            data=dict(self.data or {}),
        )

    @classmethod
    def from_dto(cls, dto: Report) -> "ReportModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            title=dto.title,
            report_type=dto.report_type.value,
            generated_at=dto.generated_at,
            owner_id=dto.owner_id,
            data=dto.data,
        )

    def __repr__(self) -> str:
        return f"<ReportModel {self.id}: {self.title} ({self.report_type})>"
