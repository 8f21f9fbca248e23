"""Payment ORM model for confirmed rent payments."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class PaymentMethod(str, Enum):
    """How the tenant paid."""

    BANK_TRANSFER = "bank-transfer"
    CREDIT_CARD = "credit-card"
    CASH = "cash"
    CHECK = "check"
    MPESA = "mpesa"


class PaymentStatus(str, Enum):
    """Payment processing status."""

    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class Payment(Base, BaseModel):
    """Model representing a payment received from a tenant.

    Only completed payments are applied to the rent ledger. rent_record_id
    is set when the payment was applied to a month's record.
    """

    __tablename__ = "payments"

    # Foreign keys
    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
        comment="Tenant who made the payment",
    )
    rent_record_id: Mapped[int | None] = mapped_column(
        ForeignKey("rent_records.id"),
        nullable=True,
        index=True,
        comment="Rent record the payment was applied to",
    )

    # Payment details
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Payment amount",
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Date of payment (billing timezone)",
    )
    method: Mapped[PaymentMethod] = mapped_column(
        String(20),
        nullable=False,
    )
    status: Mapped[PaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.COMPLETED,
    )
    reference: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        comment="External reference, e.g. M-Pesa receipt number",
    )
    comment: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Optional payment comment",
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship(  # noqa: F821
        "Tenant",
        foreign_keys=[tenant_id],
    )
    rent_record: Mapped["RentRecord | None"] = relationship(  # noqa: F821
        "RentRecord",
        foreign_keys=[rent_record_id],
    )

    # Indexes for common queries
    __table_args__ = (
        Index("idx_payment_tenant_date", "tenant_id", "payment_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, tenant_id={self.tenant_id}, amount={self.amount}, "
            f"payment_date={self.payment_date}, method={self.method})>"
        )


__all__ = ["Payment", "PaymentMethod", "PaymentStatus"]
