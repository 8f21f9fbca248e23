"""Tenant ORM model holding lease terms and the running rent balance."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class TenantStatus(str, Enum):
    """Lease status. Only ACTIVE tenants are billed."""

    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"


class TenantPaymentStatus(str, Enum):
    """Payment standing for the tenant's current billing month."""

    PAID = "paid"
    PENDING = "pending"
    PARTIAL = "partial"
    OVERDUE = "overdue"


class Tenant(Base, BaseModel):
    """
    Model representing a tenant occupying a unit.

    The balance is signed: positive means money owed, negative means credit,
    zero means settled. balance and payment_status reflect the billing month
    stored in current_month (YYYY-MM).

    The version column is used for optimistic concurrency: a flush that finds
    the row changed underneath it raises StaleDataError.
    """

    __tablename__ = "tenants"

    # Identity fields
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Phone number used to match mobile-money payments",
    )
    unit_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id"),
        nullable=True,
        index=True,
    )

    # Lease terms
    lease_start: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Base rent per month, excluding utilities",
    )

    # Ledger state
    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Positive = owed, negative = credit",
    )
    current_month: Mapped[str | None] = mapped_column(
        String(7),
        nullable=True,
        comment="Billing month (YYYY-MM) that balance/payment_status reflect",
    )
    status: Mapped[TenantStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TenantStatus.ACTIVE,
        index=True,
    )
    payment_status: Mapped[TenantPaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TenantPaymentStatus.PENDING,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    property: Mapped["Property | None"] = relationship(  # noqa: F821
        "Property",
        back_populates="tenants",
    )
    rent_records: Mapped[list["RentRecord"]] = relationship(  # noqa: F821
        "RentRecord",
        back_populates="tenant",
        order_by="RentRecord.month.desc()",
    )

    __mapper_args__ = {"version_id_col": version}

    def __init__(self, **kwargs):
        # Numeric fields default at construction, not at every read site
        kwargs.setdefault("balance", Decimal("0.00"))
        kwargs.setdefault("status", TenantStatus.ACTIVE)
        kwargs.setdefault("payment_status", TenantPaymentStatus.PENDING)
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return (
            f"<Tenant(id={self.id}, name={self.name!r}, status={self.status}, "
            f"balance={self.balance}, current_month={self.current_month})>"
        )


__all__ = ["Tenant", "TenantStatus", "TenantPaymentStatus"]
