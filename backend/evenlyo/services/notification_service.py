# backend/evenlyo/services/notification_service.py
"""
In-app notification dispatcher.

Dispatch is fire-and-forget: every failure is logged and swallowed so the
booking operation that triggered it keeps its result. Each dispatch commits
on its own, so callers invoke it only after their own unit of work has been
committed.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..domain.multilingual import MultilingualText
from ..models.notification import Notification
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

MessageInput = Union[str, Dict[str, str], MultilingualText]


class NotificationService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_notification_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    def notify(
        self,
        user_id: str,
        message: MessageInput,
        booking_id: Optional[str] = None,
        notification_for: str = "client",
    ) -> Optional[Notification]:
        """Create one notification; returns None instead of raising on failure."""
        try:
            text = MultilingualText.of(message)
            notification = self.repository.create(
                user_id=user_id,
                booking_id=booking_id,
                notification_for=notification_for,
                message=text.to_dict(),
            )
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            prometheus_metrics.record_notification(notification_for, "failed")
            self.logger.error(
                "notification_dispatch_failed",
                extra={
                    "user_id": user_id,
                    "booking_id": booking_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return None
        prometheus_metrics.record_notification(notification_for, "created")
        return notification

    def notify_all_admins(
        self, message: MessageInput, booking_id: Optional[str] = None
    ) -> List[Notification]:
        """Notify every active admin; admins that fail are skipped."""
        try:
            admins = self.user_repository.list_active_admins()
        except Exception as exc:
            self.logger.error(f"Could not load admins for notification: {exc}")
            return []
        created: List[Notification] = []
        for admin in admins:
            notification = self.notify(admin.id, message, booking_id, notification_for="admin")
            if notification is not None:
                created.append(notification)
        return created

    @BaseService.measure_operation("notifications.list")
    def get_notifications(
        self, user_id: str, unread_only: bool = False, page: int = 1, per_page: int = 20
    ) -> Dict[str, Any]:
        items, total = self.repository.list_for_user(
            user_id, unread_only, offset=(page - 1) * per_page, limit=per_page
        )
        return {"items": items, "total": total, "unread": self.repository.unread_count(user_id)}

    def unread_count(self, user_id: str) -> int:
        return self.repository.unread_count(user_id)

    @BaseService.measure_operation("notifications.mark_read")
    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        with self.transaction():
            notification = self.repository.get_for_user(notification_id, user_id)
            if notification is None:
                raise NotFoundException(
                    "Notification not found",
                    code="NOTIFICATION_NOT_FOUND",
                    details={"notification_id": notification_id},
                )
            notification.is_read = True
        return notification

    @BaseService.measure_operation("notifications.mark_all_read")
    def mark_all_as_read(self, user_id: str) -> int:
        with self.transaction():
            updated = self.repository.mark_all_read(user_id)
        self.logger.info(f"Marked {updated} notification(s) read for user {user_id}")
        return updated
