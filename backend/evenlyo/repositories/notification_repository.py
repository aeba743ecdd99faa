# backend/evenlyo/repositories/notification_repository.py
"""Notification repository."""

from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.notification import Notification
from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: Session):
        super().__init__(db, Notification)

    def list_for_user(
        self, user_id: str, unread_only: bool, offset: int, limit: int
    ) -> Tuple[List[Notification], int]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return self._paginate(query.order_by(Notification.created_at.desc()), offset, limit)

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        return self.find_one_by(id=notification_id, user_id=user_id)

    def unread_count(self, user_id: str) -> int:
        return self.count(user_id=user_id, is_read=False)

    def list_for_booking(self, booking_id: str) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.booking_id == booking_id)
            .order_by(Notification.created_at)
            .all()
        )

    def mark_all_read(self, user_id: str) -> int:
        try:
            result = self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
                .execution_options(synchronize_session="fetch")
            )
            return int(result.rowcount or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking notifications read for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to mark notifications read: {str(e)}")
