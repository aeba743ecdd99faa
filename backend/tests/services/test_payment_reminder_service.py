from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from evenlyo.models.booking import Booking
from evenlyo.models.notification import Notification
from evenlyo.schemas.booking import PayBookingRequest
from evenlyo.services.email_service import EmailService
from evenlyo.services.payment_reminder_service import PaymentReminderService
from tests.factories.booking_builders import booking_request, future_day


@pytest.fixture
def escrow_listing(make_listing, escrow_sub_category):
    return make_listing(sub_category_id=escrow_sub_category.id)


@pytest.fixture
def upfront_booking(booking_service, client_actor, vendor_actor, escrow_listing) -> Booking:
    booking = booking_service.create_booking_request(
        client_actor, booking_request(escrow_listing, future_day(30))
    )
    booking_service.accept_booking(vendor_actor, booking.id)
    return booking_service.pay_booking(
        client_actor, booking.id, PayBookingRequest(payment_type="upfront")
    )


@pytest.fixture
def email_service():
    return MagicMock(spec=EmailService)


def make_service(db, email_service):
    return PaymentReminderService(
        db, email_service=email_service, reminder_days_before=3, auto_cancel_days_before=1
    )


def test_reminder_sent_three_days_before(db, email_service, upfront_booking, client_user):
    service = make_service(db, email_service)
    today = upfront_booking.start_date - timedelta(days=3)

    results = service.process(today=today)

    assert results["reminders_sent"] == 1
    assert results["auto_cancelled"] == 0
    email_service.send_template.assert_called_once()
    args, kwargs = email_service.send_template.call_args
    assert args[0] == client_user.email
    assert args[2] == "email/payment_reminder.html"
    assert args[3]["remaining_amount"] == 71.4
    db.refresh(upfront_booking)
    assert upfront_booking.reminder_sent is True

    # A second run on the same day does not send again
    assert service.process(today=today)["reminders_sent"] == 0


def test_nothing_due_yet(db, email_service, upfront_booking):
    service = make_service(db, email_service)
    results = service.process(today=upfront_booking.start_date - timedelta(days=10))
    assert results["reminders_sent"] == 0
    assert results["auto_cancelled"] == 0
    email_service.send_template.assert_not_called()


def test_auto_cancel_when_event_is_imminent(db, email_service, upfront_booking, admin_user):
    service = make_service(db, email_service)

    results = service.process(today=upfront_booking.start_date - timedelta(days=1))

    assert results["auto_cancelled"] == 1
    db.refresh(upfront_booking)
    assert upfront_booking.status == "cancelled"
    assert upfront_booking.payment_status == "cancelled_due_to_non_payment"
    entry = upfront_booking.status_history[-1]
    assert entry["status"] == "cancelled"
    assert entry["updated_by"]["user_type"] == "system"
    assert upfront_booking.cancellation_details["reason"] == "non_payment"

    audiences = {
        n.notification_for
        for n in db.query(Notification).filter(Notification.booking_id == upfront_booking.id)
    }
    assert {"client", "vendor", "admin"} <= audiences


def test_fully_paid_bookings_are_ignored(db, email_service, booking_service, client_actor, upfront_booking):
    booking_service.pay_remaining(client_actor, upfront_booking.id)
    service = make_service(db, email_service)
    results = service.process(today=upfront_booking.start_date - timedelta(days=1))
    assert results["auto_cancelled"] == 0
    db.refresh(upfront_booking)
    assert upfront_booking.status == "paid"


def test_delivered_booking_is_never_auto_cancelled(
    db, email_service, booking_service, client_actor, vendor_actor, upfront_booking
):
    booking_service.mark_on_the_way(vendor_actor, upfront_booking.id)
    booking_service.mark_received(client_actor, upfront_booking.id)
    service = make_service(db, email_service)

    results = service.process(today=upfront_booking.start_date - timedelta(days=1))

    assert results["auto_cancelled"] == 0
    db.refresh(upfront_booking)
    assert upfront_booking.status == "received"
    assert upfront_booking.payment_status == "upfront_paid"


def test_past_events_are_left_alone(db, email_service, upfront_booking):
    service = make_service(db, email_service)

    results = service.process(today=upfront_booking.start_date + timedelta(days=2))

    assert results["auto_cancelled"] == 0
    db.refresh(upfront_booking)
    assert upfront_booking.status == "paid"


def test_failure_is_recorded_and_run_continues(db, email_service, upfront_booking):
    email_service.send_template.side_effect = RuntimeError("smtp down")
    service = make_service(db, email_service)

    results = service.process(today=upfront_booking.start_date - timedelta(days=3))

    assert results["failed"] == 1
    assert results["failures"][0]["booking_id"] == upfront_booking.id
    assert results["failures"][0]["type"] == "RuntimeError"


def test_reminder_template_renders(db, upfront_booking):
    email_service = EmailService()
    service = make_service(db, email_service)
    with patch.object(EmailService, "send_email", return_value=True) as send:
        service.process(today=upfront_booking.start_date - timedelta(days=3))

    to_email, subject, body = send.call_args.args
    assert upfront_booking.tracking_id in subject
    assert "€30.60" in body
    assert "€71.40" in body
    assert "Round table" in body
