import pytest

from evenlyo.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from evenlyo.schemas.support import SupportTicketCreateRequest
from evenlyo.services.support_service import SupportService


@pytest.fixture
def support_service(db):
    return SupportService(db)


def ticket_request(details="My booking never arrived", category="Booking Problems"):
    return SupportTicketCreateRequest(issue_related_to=category, details=details)


def test_create_ticket(support_service, client_actor, client_user):
    ticket = support_service.create_ticket(client_actor, ticket_request())

    assert ticket.ticket_id.startswith("TICKET-")
    assert ticket.status == "open"
    assert ticket.user_email == client_user.email
    assert ticket.details == {"en": "My booking never arrived", "nl": "My booking never arrived"}


def test_details_too_short(support_service, client_actor):
    with pytest.raises(ValidationException) as exc:
        support_service.create_ticket(client_actor, ticket_request(details="too short"))
    assert exc.value.code == "DETAILS_TOO_SHORT"


def test_short_translation_counts(support_service, client_actor):
    request = ticket_request(details={"en": "The DJ did not show up", "nl": "Geen DJ"})
    with pytest.raises(ValidationException):
        support_service.create_ticket(client_actor, request)


def test_unknown_category(support_service, client_actor):
    with pytest.raises(ValidationException) as exc:
        support_service.create_ticket(client_actor, ticket_request(category="Weather"))
    assert exc.value.code == "INVALID_ISSUE_CATEGORY"


def test_toggle_twice_restores_open(support_service, client_actor, admin_actor):
    ticket = support_service.create_ticket(client_actor, ticket_request())

    closed = support_service.toggle_ticket_status(admin_actor, ticket.ticket_id)
    assert closed.status == "closed"
    assert closed.closed_at is not None

    reopened = support_service.toggle_ticket_status(admin_actor, ticket.ticket_id)
    assert reopened.status == "open"
    assert reopened.closed_at is None


def test_toggle_requires_admin(support_service, client_actor):
    ticket = support_service.create_ticket(client_actor, ticket_request())
    with pytest.raises(ForbiddenException):
        support_service.toggle_ticket_status(client_actor, ticket.ticket_id)


def test_toggle_unknown_ticket(support_service, admin_actor):
    with pytest.raises(NotFoundException):
        support_service.toggle_ticket_status(admin_actor, "TICKET-NOPE")


def test_listing_is_scoped_to_owner(support_service, client_actor, other_client_actor, admin_actor):
    mine = support_service.create_ticket(client_actor, ticket_request())
    support_service.create_ticket(other_client_actor, ticket_request(category="Payment Issues"))

    # user_id filter is ignored for non-admins
    tickets = support_service.list_tickets(client_actor, user_id=other_client_actor.id)
    assert [t.ticket_id for t in tickets] == [mine.ticket_id]

    assert len(support_service.list_tickets(admin_actor)) == 2
    assert len(support_service.list_tickets(admin_actor, user_id=other_client_actor.id)) == 1

    support_service.toggle_ticket_status(admin_actor, mine.ticket_id)
    closed = support_service.list_tickets(admin_actor, status="closed")
    assert [t.ticket_id for t in closed] == [mine.ticket_id]

    with pytest.raises(ValidationException):
        support_service.list_tickets(admin_actor, status="pending")

    with pytest.raises(NotFoundException):
        support_service.get_ticket(other_client_actor, mine.ticket_id)
