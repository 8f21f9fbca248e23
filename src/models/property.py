"""Property ORM model for rental buildings that tenants occupy."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Property(Base, BaseModel):
    """Model representing a rental property (building or compound).

    Only the fields the rent ledger reads are modelled here; property CRUD
    lives outside this service.
    """

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )
    address: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    units: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
        comment="Number of rentable units",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

    tenants: Mapped[list["Tenant"]] = relationship(  # noqa: F821
        "Tenant",
        back_populates="property",
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, units={self.units})>"


__all__ = ["Property"]
