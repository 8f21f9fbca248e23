"""RentRecord ORM model: one rent obligation per tenant per billing month."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel

ZERO = Decimal("0.00")

UTILITY_FIELDS = ("water", "electricity", "garbage", "security")


class RentStatus(str, Enum):
    """Settlement status of a rent record."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class RentRecord(Base, BaseModel):
    """
    Monthly rent obligation for one tenant.

    Amounts:
    - amount: base rent plus the four utility charges (pre-arrears subtotal)
    - previous_balance: arrears inherited from the prior month
    - credit_balance: overpayment inherited from the prior month
    - carried_forward_amount: max(0, amount + previous_balance - credit_balance),
      the amount actually due this month
    - amount_paid: cumulative payments applied, never decreases

    (tenant_id, month) is unique. Records are never deleted by the ledger.
    """

    __tablename__ = "rent_records"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id"),
        nullable=True,
        index=True,
    )
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Billing month, YYYY-MM",
    )

    base_rent: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Tenant's monthly rent at the time the record was created",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Base rent + utilities",
    )

    # Utility line items
    water: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    electricity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    garbage: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    security: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)

    # Carry-forward
    previous_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=ZERO,
        comment="Arrears from the prior month",
    )
    credit_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=ZERO,
        comment="Overpayment from the prior month",
    )
    carried_forward_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Total due this month after arrears and credit",
    )

    amount_paid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=ZERO,
    )
    status: Mapped[RentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=RentStatus.PENDING,
        index=True,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    tenant: Mapped["Tenant"] = relationship(  # noqa: F821
        "Tenant",
        back_populates="rent_records",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("tenant_id", "month", name="uq_rent_record_tenant_month"),
        Index("idx_rent_record_month", "month"),
        Index("idx_rent_record_due", "status", "due_date"),
    )

    def __init__(self, **kwargs):
        for field in UTILITY_FIELDS + ("previous_balance", "credit_balance", "amount_paid"):
            kwargs.setdefault(field, ZERO)
        kwargs.setdefault("status", RentStatus.PENDING)
        super().__init__(**kwargs)

    @property
    def utilities_total(self) -> Decimal:
        return sum((getattr(self, field) for field in UTILITY_FIELDS), ZERO)

    @property
    def outstanding(self) -> Decimal:
        """Unclamped amount still owed; negative when the month holds spare credit."""
        return self.amount + self.previous_balance - self.credit_balance - self.amount_paid

    def __repr__(self) -> str:
        return (
            f"<RentRecord(id={self.id}, tenant_id={self.tenant_id}, month={self.month}, "
            f"due={self.carried_forward_amount}, paid={self.amount_paid}, status={self.status})>"
        )


__all__ = ["RentRecord", "RentStatus", "UTILITY_FIELDS", "ZERO"]
