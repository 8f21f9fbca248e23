"""Audit service for logging ledger mutations."""

from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from src.models.audit_log import AuditLog


def _jsonable(changes: dict[str, Any] | None) -> dict[str, Any] | None:
    # Decimal and date values are stored as strings in the JSON column
    if changes is None:
        return None
    return {
        key: str(value) if isinstance(value, Decimal) or hasattr(value, "isoformat") else value
        for key, value in changes.items()
    }


class AuditService:
    """Service for audit log operations.

    Provides static method to create minimal audit log entries. The entry is
    added to the session; the caller's commit persists it together with the
    change it describes.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        actor: str = "system",
        changes: dict | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            db: Database session
            entity_type: Type of entity ("tenant", "rent_record", "payment")
            entity_id: Primary key of the entity
            action: Action performed ("generate", "payment", "utilities", ...)
            actor: Who performed the action ("system" for scheduled runs)
            changes: Optional snapshot of changed fields

        Returns:
            Created AuditLog object
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor,
            changes=_jsonable(changes),
        )
        db.add(audit)
        return audit


__all__ = ["AuditService"]
