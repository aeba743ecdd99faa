# backend/evenlyo/services/support_service.py
"""Support tickets raised by clients and vendors, handled by admins."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MIN_TICKET_DETAILS_LENGTH, SUPPORT_ISSUE_CATEGORIES
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.support_ticket import SupportTicket, TicketStatus
from ..principal import Actor
from ..repositories.factory import RepositoryFactory
from ..schemas.support import SupportTicketCreateRequest
from .base import BaseService

logger = logging.getLogger(__name__)


class SupportService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_support_ticket_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("create_ticket")
    def create_ticket(self, actor: Actor, request: SupportTicketCreateRequest) -> SupportTicket:
        if request.issue_related_to not in SUPPORT_ISSUE_CATEGORIES:
            raise ValidationException(
                "Invalid issue category",
                code="INVALID_ISSUE_CATEGORY",
                details={"allowed": list(SUPPORT_ISSUE_CATEGORIES)},
            )
        if request.details.shortest_length() < MIN_TICKET_DETAILS_LENGTH:
            raise ValidationException(
                f"Details must be at least {MIN_TICKET_DETAILS_LENGTH} characters long",
                code="DETAILS_TOO_SHORT",
            )
        user = self.user_repository.get_by_id(actor.id)
        if user is None:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")

        with self.transaction():
            ticket = self.repository.create(
                user_id=user.id,
                user_email=user.email,
                issue_related_to=request.issue_related_to,
                details=request.details.to_dict(),
                status=TicketStatus.OPEN.value,
            )
        self.log_operation("create_ticket", ticket_id=ticket.ticket_id, user_id=user.id)
        return ticket

    def get_ticket(self, actor: Actor, ticket_id: str) -> SupportTicket:
        ticket = self.repository.get_by_ticket_id(ticket_id)
        if ticket is None or not (actor.is_admin or ticket.user_id == actor.id):
            raise NotFoundException(
                "Support ticket not found", code="TICKET_NOT_FOUND", details={"ticket_id": ticket_id}
            )
        return ticket

    @BaseService.measure_operation("list_tickets")
    def list_tickets(
        self, actor: Actor, user_id: Optional[str] = None, status: Optional[str] = None
    ) -> List[SupportTicket]:
        """Admins may filter by any user; everyone else sees their own tickets."""
        if not actor.is_admin:
            user_id = actor.id
        if status and status not in (TicketStatus.OPEN.value, TicketStatus.CLOSED.value):
            raise ValidationException(f"Invalid ticket status: {status}", code="INVALID_STATUS")
        return self.repository.search(user_id=user_id, status=status)

    @BaseService.measure_operation("toggle_ticket_status")
    def toggle_ticket_status(self, actor: Actor, ticket_id: str) -> SupportTicket:
        if not actor.is_admin:
            raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")
        with self.transaction():
            ticket = self.repository.get_by_ticket_id(ticket_id)
            if ticket is None:
                raise NotFoundException(
                    "Support ticket not found",
                    code="TICKET_NOT_FOUND",
                    details={"ticket_id": ticket_id},
                )
            ticket.toggle()
        return ticket
