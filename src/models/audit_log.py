"""Audit log model for tracking ledger mutations."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for a change to a tenant or rent record.

    Records which entity (entity_type, entity_id) had which action applied,
    who triggered it (actor, "system" for the scheduler) and an optional JSON
    snapshot of the amounts involved.
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(String(30), index=False)
    """Entity type being audited: "tenant", "rent_record", "payment"."""

    entity_id: Mapped[int] = mapped_column(index=False)
    """Primary key of the entity being audited."""

    action: Mapped[str] = mapped_column(String(30), index=False)
    """Action performed: "generate", "payment", "utilities", "extend_lease", "reconcile"."""

    actor: Mapped[str] = mapped_column(String(100), default="system", index=False)
    """Who performed the action. "system" for scheduled runs."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, index=False)
    """Optional JSON snapshot: {"month": "2025-03", "amount_paid": "7000.00"}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor={self.actor}, created_at={self.created_at})>"
        )


__all__ = ["AuditLog"]
