"""
Module: billing_kernel.models.invoice
Responsibility: ORM persistence for invoices, the aggregate root of the
    billing ledger.
Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain DTOs it converts to.  MUST NOT import from services/ or
    selectors/.

Invariants enforced:
    - amount is stored as BigInteger minor units with its currency code.
    - status is a derived field: only ReconciliationService (through
      LedgerService.set_invoice_status) and explicit external edits write it.
    - version increments on every write, so a status write can be made
      conditional on the snapshot it was computed from.
    - Deleting an invoice deletes its payments (ORM and FK cascade).
"""

from datetime import date
from uuid import UUID

from sqlalchemy import BigInteger, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import MonetaryMixin, TrackedBase, UUIDString
from billing_kernel.domain.ledger import Invoice, InvoiceStatus
from billing_kernel.domain.values import Money


class InvoiceModel(MonetaryMixin, TrackedBase):
    """
    ORM model for invoices.

    Maps to the ``Invoice`` frozen dataclass.

    Guarantees:
        - amount_minor + currency round-trip to ``Money`` exactly.
        - status stored as the string enum value.
        - payments relationship cascades deletes.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoices_status", "status"),
        Index("idx_invoices_issue_date", "issue_date"),
        Index("idx_invoices_client_id", "client_id"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InvoiceStatus.PENDING.value
    )
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)

    payments: Mapped[list["PaymentModel"]] = relationship(  # noqa: F821
        back_populates="invoice",
        cascade="all, delete-orphan",
    )

    def to_dto(self) -> Invoice:
        """Convert ORM model to frozen dataclass."""
        return Invoice(
            id=self.id,
            title=self.title,
            client_name=self.client_name,
            client_id=self.client_id,
            amount=Money.from_minor_units(self.amount_minor, self.currency),
            issue_date=self.issue_date,
            owner_id=self.owner_id,
            status=InvoiceStatus(self.status),
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto: Invoice) -> "InvoiceModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            title=dto.title,
            client_name=dto.client_name,
            client_id=dto.client_id,
            amount_minor=dto.amount.minor_units,
            currency=dto.amount.currency,
            issue_date=dto.issue_date,
            owner_id=dto.owner_id,
            status=dto.status.value,
            version=dto.version,
        )

    def __repr__(self) -> str:
        return f"<InvoiceModel {self.id}: {self.title} [{self.status}]>"
