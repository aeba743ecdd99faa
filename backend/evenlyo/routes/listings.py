# backend/evenlyo/routes/listings.py
"""
Listing routes

Endpoints:
    GET / - Active listings
    GET /mine - The vendor's own listings
    POST / - Create a listing (vendor)
    GET /{listing_id} - Listing details
    PATCH /{listing_id} - Update a listing (owner or admin)
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import get_current_actor, get_listing_service
from ..core.exceptions import DomainException
from ..principal import Actor
from ..schemas.base_responses import PaginatedResponse, SuccessResponse
from ..schemas.listing import ListingCreateRequest, ListingUpdateRequest
from ..services.listing_service import ListingService

router = APIRouter(tags=["listings"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _listing_payload(listing: Any) -> Dict[str, Any]:
    return listing.to_dict()


@router.get("", response_model=PaginatedResponse[Dict[str, Any]])
def list_active_listings(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    listing_service: ListingService = Depends(get_listing_service),
) -> PaginatedResponse[Dict[str, Any]]:
    items, total = listing_service.list_active_listings(page, per_page)
    return PaginatedResponse.build(items, total, page, per_page, _listing_payload)


@router.get("/mine", response_model=PaginatedResponse[Dict[str, Any]])
def list_my_listings(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    listing_service: ListingService = Depends(get_listing_service),
) -> PaginatedResponse[Dict[str, Any]]:
    try:
        items, total = listing_service.list_vendor_listings(actor, status_filter, page, per_page)
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse.build(items, total, page, per_page, _listing_payload)


@router.post("", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
def create_listing(
    request: ListingCreateRequest,
    actor: Actor = Depends(get_current_actor),
    listing_service: ListingService = Depends(get_listing_service),
) -> SuccessResponse:
    try:
        listing = listing_service.create_listing(actor, request)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message="Listing created successfully", data=listing.to_dict())


@router.get("/{listing_id}", response_model=SuccessResponse)
def get_listing(
    listing_id: str,
    listing_service: ListingService = Depends(get_listing_service),
) -> SuccessResponse:
    try:
        listing = listing_service.get_listing(listing_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=listing.to_dict())


@router.patch("/{listing_id}", response_model=SuccessResponse)
def update_listing(
    listing_id: str,
    request: ListingUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    listing_service: ListingService = Depends(get_listing_service),
) -> SuccessResponse:
    try:
        listing = listing_service.update_listing(actor, listing_id, request)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message="Listing updated successfully", data=listing.to_dict())
