"""
Module: billing_kernel.models.payment
Responsibility: ORM persistence for payments recorded against invoices.
Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain DTOs it converts to.

Invariants enforced:
    - invoice_id is a required FK; the row disappears with its invoice.
    - amount is stored as BigInteger minor units in the invoice currency
      (checked by PaymentService before the row is written).
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import MonetaryMixin, TrackedBase, UUIDString
from billing_kernel.domain.ledger import Payment
from billing_kernel.domain.values import Money
from billing_kernel.models.invoice import InvoiceModel


class PaymentModel(MonetaryMixin, TrackedBase):
    """ORM model for payments.  Maps to the ``Payment`` frozen dataclass."""

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payments_invoice_id", "invoice_id"),
        Index("idx_payments_payment_date", "payment_date"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    receipt_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    invoice: Mapped[InvoiceModel] = relationship(back_populates="payments")

    def to_dto(self) -> Payment:
        """Convert ORM model to frozen dataclass."""
        return Payment(
            id=self.id,
            invoice_id=self.invoice_id,
            amount=Money.from_minor_units(self.amount_minor, self.currency),
            payment_date=self.payment_date,
            owner_id=self.owner_id,
            receipt_generated=self.receipt_generated,
        )

    @classmethod
    def from_dto(cls, dto: Payment) -> "PaymentModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            invoice_id=dto.invoice_id,
            amount_minor=dto.amount.minor_units,
            currency=dto.amount.currency,
            payment_date=dto.payment_date,
            owner_id=dto.owner_id,
            receipt_generated=dto.receipt_generated,
        )

    def __repr__(self) -> str:
        return f"<PaymentModel {self.id}: {self.amount_minor} {self.currency} -> {self.invoice_id}>"
