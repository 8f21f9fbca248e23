"""Notification service for tenant-portal messages."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.models.notification import Notification, NotificationType


class NotificationService:
    """Service for writing and reading tenant notifications.

    notify() only adds the row to the session; it is committed together with
    the ledger change that produced it.
    """

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        tenant_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> Notification:
        """Queue a notification for a tenant.

        Args:
            tenant_id: Recipient tenant ID
            title: Short heading
            message: Message body
            type: Severity (info, warning, urgent, announcement)
        """
        notification = Notification(tenant_id=tenant_id, title=title, message=message, type=type)
        self.db.add(notification)
        return notification

    def list_for_tenant(self, tenant_id: int, unread_only: bool = False) -> list[Notification]:
        """Notifications for a tenant, newest first."""
        stmt = select(Notification).where(Notification.tenant_id == tenant_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(self.db.scalars(stmt))

    def mark_read(self, notification_id: int) -> bool:
        """Mark a notification read.

        Returns:
            True if updated, False if notification not found
        """
        notification = self.db.get(Notification, notification_id)
        if notification is None:
            return False
        notification.read = True
        self.db.commit()
        return True


__all__ = ["NotificationService"]
