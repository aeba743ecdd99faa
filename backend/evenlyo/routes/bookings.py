# backend/evenlyo/routes/bookings.py
"""
Booking routes

Booking lifecycle endpoints under /api/booking.
All business logic delegated to BookingService; role checks happen there so
the status codes stay consistent between HTTP and background callers.

Endpoints:
    POST /request - Client creates a booking request
    GET /history - Client booking history
    GET /vendor-history - Vendor booking history
    GET /pending - Vendor's pending requests
    GET /accepted - Vendor's accepted bookings
    POST /check-availability - Check a date/time range for a listing
    POST /price-quote - Price breakdown for a listing and date range
    GET /{booking_id} - Booking details
    POST /{booking_id}/accept - Vendor accepts a pending request
    POST /{booking_id}/reject - Vendor rejects a pending request
    POST /{booking_id}/pay - Client pays an accepted booking
    POST /{booking_id}/pay-remaining - Client settles an upfront-paid booking
    POST /{booking_id}/cancel - Client cancels within the cancellation window
    POST /{booking_id}/mark-on-the-way - Vendor dispatches the order
    POST /{booking_id}/mark-received - Client confirms delivery
    POST /{booking_id}/mark-picked-up - Vendor collects the items
    POST /{booking_id}/mark-finished - Client finishes the event
    POST /{booking_id}/mark-completed - Vendor closes the booking
    POST /{booking_id}/claim - Client opens a claim
    POST /{booking_id}/review - Client reviews a finished booking
"""

import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import (
    get_availability_service,
    get_booking_service,
    get_current_actor,
    get_pricing_service,
)
from ..core.exceptions import DomainException
from ..models.booking import Booking
from ..principal import Actor
from ..schemas.base_responses import PaginatedResponse, SuccessResponse
from ..schemas.booking import (
    AvailabilityCheckRequest,
    BookingCreateRequest,
    CancelBookingRequest,
    ClaimRequest,
    PayBookingRequest,
    PayRemainingRequest,
    PickupRequest,
    PriceQuoteRequest,
    RejectBookingRequest,
    ReviewRequest,
)
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.pricing_service import PricingRequest, PricingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def booking_payload(booking: Booking) -> Dict[str, Any]:
    data = booking.to_dict()
    data["vendor_actions"] = BookingService.get_vendor_actions(booking.status)
    return data


def _done(message: str, booking: Booking) -> SuccessResponse:
    return SuccessResponse(message=message, data=booking_payload(booking))


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.post("/request", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
def create_booking_request(
    request: BookingCreateRequest,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    """Create a pending booking request for a listing."""
    try:
        booking = booking_service.create_booking_request(actor, request)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking request created successfully", booking)


@router.get("/history", response_model=PaginatedResponse[Dict[str, Any]])
def get_client_history(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[Dict[str, Any]]:
    try:
        items, total = booking_service.list_client_history(actor, status_filter, page, per_page)
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse.build(items, total, page, per_page, booking_payload)


@router.get("/vendor-history", response_model=PaginatedResponse[Dict[str, Any]])
def get_vendor_history(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[Dict[str, Any]]:
    try:
        items, total = booking_service.list_vendor_history(actor, status_filter, page, per_page)
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse.build(items, total, page, per_page, booking_payload)


@router.get("/pending", response_model=PaginatedResponse[Dict[str, Any]])
def get_pending_requests(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[Dict[str, Any]]:
    try:
        items, total = booking_service.list_vendor_pending(actor, page, per_page)
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse.build(items, total, page, per_page, booking_payload)


@router.get("/accepted", response_model=PaginatedResponse[Dict[str, Any]])
def get_accepted_bookings(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[Dict[str, Any]]:
    try:
        items, total = booking_service.list_vendor_accepted(actor, page, per_page)
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse.build(items, total, page, per_page, booking_payload)


@router.post("/check-availability", response_model=SuccessResponse)
def check_availability(
    request: AvailabilityCheckRequest,
    actor: Actor = Depends(get_current_actor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SuccessResponse:
    """Check whether a listing is free for the requested range."""
    try:
        result = availability_service.get_availability_details(
            request.listing_id,
            request.start_date,
            request.end_date,
            exclude_booking_id=request.exclude_booking_id,
            start_time=request.start_time,
            end_time=request.end_time,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=result.to_dict())


@router.post("/price-quote", response_model=SuccessResponse)
def price_quote(
    request: PriceQuoteRequest,
    actor: Actor = Depends(get_current_actor),
    pricing_service: PricingService = Depends(get_pricing_service),
) -> SuccessResponse:
    try:
        breakdown = pricing_service.quote_for_listing(
            request.listing_id,
            PricingRequest(
                start_date=request.start_date,
                end_date=request.end_date,
                start_time=request.start_time,
                end_time=request.end_time,
                distance_km=request.distance_km,
                number_of_events=request.number_of_events,
            ),
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=breakdown.to_dict())


# ============================================================================
# SECTION 2: Booking-scoped routes
# ============================================================================


@router.get("/{booking_id}", response_model=SuccessResponse)
def get_booking(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.get_booking(actor, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=booking_payload(booking))


@router.post("/{booking_id}/accept", response_model=SuccessResponse)
def accept_booking(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.accept_booking(actor, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking accepted successfully", booking)


@router.post("/{booking_id}/reject", response_model=SuccessResponse)
def reject_booking(
    booking_id: str,
    request: Optional[RejectBookingRequest] = None,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.reject_booking(
            actor, booking_id, rejection_reason=request.rejection_reason if request else None
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking rejected", booking)


@router.post("/{booking_id}/pay", response_model=SuccessResponse)
def pay_booking(
    booking_id: str,
    request: Optional[PayBookingRequest] = None,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.pay_booking(actor, booking_id, request or PayBookingRequest())
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Payment recorded successfully", booking)


@router.post("/{booking_id}/pay-remaining", response_model=SuccessResponse)
def pay_remaining(
    booking_id: str,
    request: Optional[PayRemainingRequest] = None,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.pay_remaining(
            actor, booking_id, transaction_id=request.transaction_id if request else None
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Remaining amount paid successfully", booking)


@router.post("/{booking_id}/cancel", response_model=SuccessResponse)
def cancel_booking(
    booking_id: str,
    request: Optional[CancelBookingRequest] = None,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.cancel_booking(
            actor, booking_id, reason=request.reason if request else None
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking cancelled successfully", booking)


@router.post("/{booking_id}/mark-on-the-way", response_model=SuccessResponse)
def mark_on_the_way(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.mark_on_the_way(actor, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking marked as on the way", booking)


@router.post("/{booking_id}/mark-received", response_model=SuccessResponse)
def mark_received(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.mark_received(actor, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking marked as received", booking)


@router.post("/{booking_id}/mark-picked-up", response_model=SuccessResponse)
def mark_picked_up(
    booking_id: str,
    request: Optional[PickupRequest] = None,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.mark_picked_up(actor, booking_id, request)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking marked as picked up", booking)


@router.post("/{booking_id}/mark-finished", response_model=SuccessResponse)
def mark_finished(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.mark_finished(actor, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking marked as finished", booking)


@router.post("/{booking_id}/mark-completed", response_model=SuccessResponse)
def mark_completed(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.mark_completed(actor, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Booking marked as completed", booking)


@router.post("/{booking_id}/claim", response_model=SuccessResponse)
def claim_booking(
    booking_id: str,
    request: ClaimRequest,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        booking = booking_service.claim_booking(actor, booking_id, request)
    except DomainException as e:
        handle_domain_exception(e)
    return _done("Claim submitted successfully", booking)


@router.post("/{booking_id}/review", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
def review_booking(
    booking_id: str,
    request: ReviewRequest,
    actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    try:
        review = booking_service.review_booking(actor, booking_id, request)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message="Review submitted successfully", data=review.to_dict())
