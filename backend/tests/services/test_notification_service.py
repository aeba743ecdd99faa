from unittest.mock import patch

import pytest

from evenlyo.core.exceptions import NotFoundException
from evenlyo.models.booking import Booking
from evenlyo.repositories.notification_repository import NotificationRepository
from evenlyo.services.notification_service import NotificationService
from tests.factories.booking_builders import booking_request, future_day


@pytest.fixture
def notification_service(db):
    return NotificationService(db)


def test_notify_accepts_plain_text(notification_service, client_user):
    notification = notification_service.notify(client_user.id, "Hello there")
    assert notification.message == {"en": "Hello there", "nl": "Hello there"}
    assert notification.is_read is False
    assert notification.notification_for == "client"


def test_notify_all_admins(notification_service, admin_user, db):
    from evenlyo.models.user import User

    db.add(User(email="admin2@example.com", role="admin"))
    db.add(User(email="retired@example.com", role="admin", is_active=False))
    db.commit()

    created = notification_service.notify_all_admins({"en": "Claim filed", "nl": "Claim ingediend"})
    assert len(created) == 2
    assert {n.notification_for for n in created} == {"admin"}


def test_failed_notification_does_not_undo_booking(db, booking_service, client_actor, listing):
    with patch.object(NotificationRepository, "create", side_effect=RuntimeError("db down")):
        booking = booking_service.create_booking_request(
            client_actor, booking_request(listing, future_day(30))
        )

    stored = db.get(Booking, booking.id)
    assert stored is not None
    assert stored.status == "pending"


def test_notify_returns_none_on_failure(notification_service, client_user):
    with patch.object(NotificationRepository, "create", side_effect=RuntimeError("db down")):
        assert notification_service.notify(client_user.id, "Hi") is None


def test_read_flow(notification_service, client_user, other_client_user):
    first = notification_service.notify(client_user.id, "One")
    notification_service.notify(client_user.id, "Two")
    notification_service.notify(other_client_user.id, "Someone else")

    result = notification_service.get_notifications(client_user.id)
    assert result["total"] == 2
    assert result["unread"] == 2

    notification_service.mark_as_read(first.id, client_user.id)
    assert notification_service.unread_count(client_user.id) == 1
    unread = notification_service.get_notifications(client_user.id, unread_only=True)
    assert unread["total"] == 1

    assert notification_service.mark_all_as_read(client_user.id) == 1
    assert notification_service.unread_count(client_user.id) == 0
    assert notification_service.unread_count(other_client_user.id) == 1


def test_cannot_read_someone_elses_notification(notification_service, client_user, other_client_user):
    notification = notification_service.notify(other_client_user.id, "Private")
    with pytest.raises(NotFoundException):
        notification_service.mark_as_read(notification.id, client_user.id)
