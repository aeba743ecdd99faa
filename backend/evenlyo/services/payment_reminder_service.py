# backend/evenlyo/services/payment_reminder_service.py
"""
Reminders and auto-cancellation for escrow bookings with an open balance.

Bookings paid upfront must settle the remainder before the event. A reminder
email goes out a few days ahead; bookings still unpaid when the event is
imminent are cancelled on behalf of the system.
"""

from datetime import date, timedelta
import logging
from typing import Any, Dict, List, Optional, TypedDict

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.timezone_utils import utc_now, utc_today
from ..models.booking import PRE_DELIVERY_STATUSES, Booking, BookingStatus, PaymentStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import SYSTEM_ACTOR
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .email_service import EmailService
from .notification_messages import booking_message
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class ReminderJobResults(TypedDict):
    reminders_sent: int
    auto_cancelled: int
    failed: int
    failures: List[Dict[str, Any]]
    processed_at: str


class PaymentReminderService(BaseService):
    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        notification_service: Optional[NotificationService] = None,
        reminder_days_before: Optional[int] = None,
        auto_cancel_days_before: Optional[int] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.email_service = email_service or EmailService()
        self.notification_service = notification_service or NotificationService(db)
        self.reminder_days_before = (
            reminder_days_before
            if reminder_days_before is not None
            else settings.payment_reminder_days_before
        )
        self.auto_cancel_days_before = (
            auto_cancel_days_before
            if auto_cancel_days_before is not None
            else settings.payment_auto_cancel_days_before
        )

    @BaseService.measure_operation("process_payment_reminders")
    def process(self, today: Optional[date] = None) -> ReminderJobResults:
        """
        Send due reminders and cancel overdue bookings.

        A failure on one booking is recorded and the run continues.
        """
        today = today or utc_today()
        horizon = today + timedelta(days=self.reminder_days_before)
        results: ReminderJobResults = {
            "reminders_sent": 0,
            "auto_cancelled": 0,
            "failed": 0,
            "failures": [],
            "processed_at": utc_now().isoformat(),
        }

        for booking in self.repository.find_unpaid_upfront_bookings(
            horizon, starting_on_or_after=today
        ):
            days_left = (booking.start_date - today).days
            try:
                if days_left <= self.auto_cancel_days_before:
                    if self._auto_cancel(booking):
                        results["auto_cancelled"] += 1
                elif days_left == self.reminder_days_before and not booking.reminder_sent:
                    self._send_reminder(booking, today)
                    results["reminders_sent"] += 1
            except Exception as exc:
                self.db.rollback()
                results["failed"] += 1
                results["failures"].append(
                    {"booking_id": booking.id, "error": str(exc), "type": type(exc).__name__}
                )
                self.logger.error(f"Payment reminder failed for booking {booking.id}: {exc}")

        if results["failed"]:
            self.logger.warning(f"Payment reminder job completed with {results['failed']} failures")
        self.logger.info(
            f"Payment reminder job completed: {results['reminders_sent']} reminders, "
            f"{results['auto_cancelled']} auto-cancelled"
        )
        return results

    def _send_reminder(self, booking: Booking, today: date) -> None:
        client = self.user_repository.get_by_id(booking.client_id)
        if client is None:
            raise LookupError(f"client {booking.client_id} not found")
        plan = (booking.pricing or {}).get("payment_plan") or {}
        title = (booking.details or {}).get("listing_title") or {}
        self.email_service.send_template(
            client.email,
            f"Payment reminder for booking {booking.tracking_id}",
            "email/payment_reminder.html",
            {
                "client_name": client.display_name,
                "tracking_id": booking.tracking_id,
                "booking_id": booking.id,
                "listing_title": title.get("en", "") if isinstance(title, dict) else title,
                "start_date": booking.start_date,
                "upfront_amount": plan.get("upfront_amount"),
                "remaining_amount": plan.get("remaining_amount"),
                "cancel_after": booking.start_date - timedelta(days=self.auto_cancel_days_before),
            },
            tags=["payment_reminder"],
        )
        booking.reminder_sent = True
        self.db.commit()

    def _auto_cancel(self, booking: Booking) -> bool:
        """Cancel for non-payment; False once the booking is out for delivery."""
        with self.transaction():
            changed = self.repository.transition_status(
                booking.id,
                sorted(PRE_DELIVERY_STATUSES),
                BookingStatus.CANCELLED.value,
                payment_status=PaymentStatus.CANCELLED_DUE_TO_NON_PAYMENT.value,
            )
            if not changed:
                return False
            booking.append_history(
                BookingStatus.CANCELLED.value,
                SYSTEM_ACTOR.as_history_actor(),
                "Cancelled due to non-payment of remaining amount",
            )
            booking.cancellation_details = {
                "reason": "non_payment",
                "cancelled_by": SYSTEM_ACTOR.as_history_actor(),
                "cancelled_at": utc_now().isoformat(),
            }

        prometheus_metrics.record_booking_transition("auto_cancel", "success")
        message = booking_message("cancelled_non_payment", tracking_id=booking.tracking_id)
        self.notification_service.notify(
            booking.vendor_id, message, booking_id=booking.id, notification_for="vendor"
        )
        self.notification_service.notify(
            booking.client_id, message, booking_id=booking.id, notification_for="client"
        )
        self.notification_service.notify_all_admins(message, booking_id=booking.id)
        return True
