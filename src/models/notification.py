"""Notification ORM model for messages shown in the tenant portal."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class NotificationType(str, Enum):
    """Severity of a notification."""

    INFO = "info"
    WARNING = "warning"
    URGENT = "urgent"
    ANNOUNCEMENT = "announcement"


class Notification(Base, BaseModel):
    """Message addressed to a single tenant."""

    __tablename__ = "notifications"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        String(20),
        nullable=False,
        default=NotificationType.INFO,
    )
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, tenant_id={self.tenant_id}, title={self.title!r})>"


__all__ = ["Notification", "NotificationType"]
