# backend/evenlyo/routes/admin_tracking.py
"""
Admin booking tracking routes

Endpoints under /api/admin/tracking. Bookings are addressed by tracking id;
the internal id is accepted too.

Endpoints:
    GET / - List all bookings, optionally filtered by status
    GET /stats - Booking counts per status group
    GET /{tracking_id}/history - Status history of a booking
    PATCH /{tracking_id}/status - Force a status change
"""

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import get_booking_admin_service, require_admin
from ..core.exceptions import DomainException
from ..principal import Actor
from ..schemas.base_responses import PaginatedResponse, SuccessResponse
from ..schemas.booking import ForceStatusRequest
from ..services.booking_admin_service import BookingAdminService
from .bookings import booking_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-tracking"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=PaginatedResponse[Dict[str, Any]])
def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(require_admin),
    admin_service: BookingAdminService = Depends(get_booking_admin_service),
) -> PaginatedResponse[Dict[str, Any]]:
    try:
        items, total = admin_service.list_bookings(actor, status_filter, page, per_page)
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse.build(items, total, page, per_page, booking_payload)


@router.get("/stats", response_model=SuccessResponse)
def get_tracking_stats(
    actor: Actor = Depends(require_admin),
    admin_service: BookingAdminService = Depends(get_booking_admin_service),
) -> SuccessResponse:
    try:
        stats = admin_service.get_tracking_stats(actor)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=stats)


@router.get("/{tracking_id}/history", response_model=SuccessResponse)
def get_status_history(
    tracking_id: str,
    actor: Actor = Depends(require_admin),
    admin_service: BookingAdminService = Depends(get_booking_admin_service),
) -> SuccessResponse:
    try:
        history = admin_service.get_status_history(actor, tracking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=history)


@router.patch("/{tracking_id}/status", response_model=SuccessResponse)
def force_status(
    tracking_id: str,
    request: ForceStatusRequest,
    actor: Actor = Depends(require_admin),
    admin_service: BookingAdminService = Depends(get_booking_admin_service),
) -> SuccessResponse:
    """Set a booking status outside the normal lifecycle."""
    try:
        result = admin_service.force_status(
            actor, tracking_id, request.status, admin_notes=request.admin_notes
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(
        message=f"Booking status updated from {result['previous_status']} to {result['new_status']}",
        data={
            "booking": booking_payload(result["booking"]),
            "previous_status": result["previous_status"],
            "new_status": result["new_status"],
        },
    )
