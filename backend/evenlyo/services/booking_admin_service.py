# backend/evenlyo/services/booking_admin_service.py
"""
Admin booking tracking.

Admins can look up any booking, read its status history and force a status
outside the normal lifecycle (dispute resolution, support corrections). A
forced change still writes a history entry attributed to the admin.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.booking import Booking, BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Actor
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_messages import booking_message
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (
    BookingStatus.ACCEPTED.value,
    BookingStatus.PAID.value,
    BookingStatus.ON_THE_WAY.value,
    BookingStatus.RECEIVED.value,
    BookingStatus.PICKED_UP.value,
)
COMPLETED_STATUSES = (BookingStatus.COMPLETED.value, BookingStatus.FINISHED.value)


class BookingAdminService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")

    def _find(self, booking_ref: str) -> Booking:
        booking = self.repository.get_by_tracking_id(booking_ref) or self.repository.get_by_id(
            booking_ref
        )
        if booking is None:
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking": booking_ref}
            )
        return booking

    @BaseService.measure_operation("force_status")
    def force_status(
        self, actor: Actor, booking_ref: str, status: str, admin_notes: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Set any valid status on a booking, bypassing lifecycle guards.

        Args:
            actor: Admin performing the change
            booking_ref: Booking id or tracking id
            status: Target status
            admin_notes: Free text stored in the history entry

        Returns:
            ``{"booking", "previous_status", "new_status"}``
        """
        self._require_admin(actor)
        try:
            new_status = BookingStatus(status).value
        except ValueError:
            raise ValidationException(
                f"Invalid status: {status}",
                code="INVALID_STATUS",
                details={"allowed": [s.value for s in BookingStatus]},
            )

        booking = self._find(booking_ref)
        previous_status = booking.status
        with self.transaction():
            booking.status = new_status
            booking.append_history(
                new_status,
                actor.as_history_actor(),
                admin_notes or f"Status changed by admin from {previous_status} to {new_status}",
            )

        prometheus_metrics.record_booking_transition("force_status", "success")
        self.logger.warning(
            f"Admin {actor.id} forced booking {booking.tracking_id} "
            f"from {previous_status} to {new_status}",
            extra={"booking_id": booking.id, "admin_id": actor.id},
        )
        message = booking_message(
            "booking_status_forced", tracking_id=booking.tracking_id, status=new_status
        )
        self.notification_service.notify(
            booking.client_id, message, booking_id=booking.id, notification_for="client"
        )
        self.notification_service.notify(
            booking.vendor_id, message, booking_id=booking.id, notification_for="vendor"
        )
        return {"booking": booking, "previous_status": previous_status, "new_status": new_status}

    @BaseService.measure_operation("get_tracking_stats")
    def get_tracking_stats(self, actor: Actor) -> Dict[str, Any]:
        self._require_admin(actor)
        distribution = self.repository.count_by_status()

        def total_of(statuses: Tuple[str, ...]) -> int:
            return sum(distribution.get(s, 0) for s in statuses)

        return {
            "total": sum(distribution.values()),
            "pending": distribution.get(BookingStatus.PENDING.value, 0),
            "active": total_of(ACTIVE_STATUSES),
            "completed": total_of(COMPLETED_STATUSES),
            "cancelled": distribution.get(BookingStatus.CANCELLED.value, 0),
            "claimed": distribution.get(BookingStatus.CLAIM.value, 0),
            "rejected": distribution.get(BookingStatus.REJECTED.value, 0),
            "status_distribution": distribution,
        }

    @BaseService.measure_operation("get_status_history")
    def get_status_history(self, actor: Actor, booking_ref: str) -> Dict[str, Any]:
        self._require_admin(actor)
        booking = self._find(booking_ref)
        return {
            "tracking_id": booking.tracking_id,
            "current_status": booking.status,
            "status_history": list(booking.status_history or []),
        }

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self, actor: Actor, status: Optional[str] = None, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Booking], int]:
        self._require_admin(actor)
        if status:
            try:
                status = BookingStatus(status).value
            except ValueError:
                raise ValidationException(f"Invalid status: {status}", code="INVALID_STATUS")
        return self.repository.list_all(status, (page - 1) * per_page, per_page)
