# backend/evenlyo/routes/support.py
"""
Support ticket routes

Endpoints:
    POST /tickets - Open a ticket
    GET /tickets - Own tickets (admins may filter by user)
    GET /tickets/{ticket_id} - Ticket details
    PATCH /tickets/{ticket_id}/toggle - Open/close a ticket (admin)
"""

from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import get_current_actor, get_support_service
from ..core.exceptions import DomainException
from ..principal import Actor
from ..schemas.base_responses import SuccessResponse
from ..schemas.support import SupportTicketCreateRequest
from ..services.support_service import SupportService

router = APIRouter(tags=["support"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("/tickets", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(
    request: SupportTicketCreateRequest,
    actor: Actor = Depends(get_current_actor),
    support_service: SupportService = Depends(get_support_service),
) -> SuccessResponse:
    try:
        ticket = support_service.create_ticket(actor, request)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message="Support ticket created successfully", data=ticket.to_dict())


@router.get("/tickets", response_model=SuccessResponse)
def list_tickets(
    user_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    actor: Actor = Depends(get_current_actor),
    support_service: SupportService = Depends(get_support_service),
) -> SuccessResponse:
    try:
        tickets = support_service.list_tickets(actor, user_id=user_id, status=status_filter)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=[ticket.to_dict() for ticket in tickets])


@router.get("/tickets/{ticket_id}", response_model=SuccessResponse)
def get_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    support_service: SupportService = Depends(get_support_service),
) -> SuccessResponse:
    try:
        ticket = support_service.get_ticket(actor, ticket_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=ticket.to_dict())


@router.patch("/tickets/{ticket_id}/toggle", response_model=SuccessResponse)
def toggle_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    support_service: SupportService = Depends(get_support_service),
) -> SuccessResponse:
    try:
        ticket = support_service.toggle_ticket_status(actor, ticket_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message=f"Ticket {ticket.status}", data=ticket.to_dict())
