"""
In-app notification model.

Notifications are append-only; the only mutation ever applied is flipping
``is_read``.
"""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.types import JSON
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base

NOTIFICATION_AUDIENCES = ("client", "vendor", "admin")


class Notification(Base):
    """Message addressed to one user, optionally tied to a booking."""

    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True, index=True)
    notification_for = Column(String(20), nullable=False)
    message = Column(JSON, nullable=False)  # {"en": ..., "nl": ...}
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        CheckConstraint(
            "notification_for IN ('client', 'vendor', 'admin')",
            name="ck_notifications_audience",
        ),
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "booking_id": self.booking_id,
            "notification_for": self.notification_for,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
