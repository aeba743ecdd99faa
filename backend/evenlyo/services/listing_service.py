# backend/evenlyo/services/listing_service.py
"""
Listing management for vendors.

Pricing documents are normalized on write: loose pricing-type spellings are
mapped to the canonical values and priced listings must carry a positive
amount, so the pricing calculator only ever sees well-formed documents.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.listing import Listing, PricingType, normalize_pricing_type
from ..principal import Actor, ActorRole
from ..repositories.factory import RepositoryFactory
from ..schemas.listing import ListingCreateRequest, ListingUpdateRequest, PricingIn
from .base import BaseService

logger = logging.getLogger(__name__)


class ListingService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_listing_repository(db)
        self.sub_category_repository = RepositoryFactory.create_sub_category_repository(db)

    @staticmethod
    def normalize_pricing(pricing: PricingIn) -> Dict[str, Any]:
        """Canonical pricing document for storage."""
        pricing_type = normalize_pricing_type(pricing.type)
        if pricing_type is None:
            raise ValidationException(
                "Unsupported pricing type.",
                code="UNSUPPORTED_PRICING_TYPE",
                details={"type": pricing.type},
            )
        if pricing_type != PricingType.QUOTE and not (pricing.amount and pricing.amount > 0):
            raise ValidationException(
                "Listing pricing information is invalid.",
                code="INVALID_PRICING",
                details={"field": "amount", "value": pricing.amount},
            )
        document = pricing.to_document()
        document["type"] = pricing_type.value
        return document

    def _check_sub_category(self, sub_category_id: Optional[str]) -> None:
        if sub_category_id and self.sub_category_repository.get_by_id(sub_category_id) is None:
            raise ValidationException(
                "Sub category not found",
                code="SUB_CATEGORY_NOT_FOUND",
                details={"sub_category_id": sub_category_id},
            )

    def _load_for_write(self, actor: Actor, listing_id: str) -> Listing:
        listing = self.repository.get_by_id(listing_id)
        if listing is None or not (actor.is_admin or listing.vendor_id == actor.id):
            raise NotFoundException(
                "Listing not found", code="LISTING_NOT_FOUND", details={"listing_id": listing_id}
            )
        return listing

    @BaseService.measure_operation("create_listing")
    def create_listing(self, actor: Actor, request: ListingCreateRequest) -> Listing:
        if actor.role != ActorRole.VENDOR:
            raise ForbiddenException("Only vendors can create listings", code="ROLE_NOT_ALLOWED")
        pricing = self.normalize_pricing(request.pricing)
        self._check_sub_category(request.sub_category_id)

        with self.transaction():
            listing = self.repository.create(
                vendor_id=actor.id,
                sub_category_id=request.sub_category_id,
                title=request.title.to_dict(),
                description=request.description.to_dict() if request.description else None,
                pricing=pricing,
                availability=request.availability.to_document(),
                quantity=request.quantity,
                service_type=request.service_type.value,
                status=request.status,
            )
        self.log_operation("create_listing", listing_id=listing.id, vendor_id=actor.id)
        return listing

    @BaseService.measure_operation("update_listing")
    def update_listing(self, actor: Actor, listing_id: str, request: ListingUpdateRequest) -> Listing:
        listing = self._load_for_write(actor, listing_id)
        changes = request.model_dump(exclude_unset=True)

        updates: Dict[str, Any] = {}
        for field in ("title", "description"):
            if field in changes:
                value = getattr(request, field)
                updates[field] = value.to_dict() if value is not None else None
        if "title" in updates and updates["title"] is None:
            raise ValidationException("Title cannot be removed", code="TITLE_REQUIRED")
        if request.pricing is not None:
            updates["pricing"] = self.normalize_pricing(request.pricing)
        if request.availability is not None:
            updates["availability"] = request.availability.to_document()
        if "sub_category_id" in changes:
            self._check_sub_category(request.sub_category_id)
            updates["sub_category_id"] = request.sub_category_id
        if request.service_type is not None:
            updates["service_type"] = request.service_type.value
        for field in ("quantity", "status", "is_active"):
            if changes.get(field) is not None:
                updates[field] = changes[field]

        with self.transaction():
            for field, value in updates.items():
                setattr(listing, field, value)
            self.repository.flush()
        self.log_operation("update_listing", listing_id=listing.id, fields=sorted(updates))
        return listing

    @BaseService.measure_operation("get_listing")
    def get_listing(self, listing_id: str) -> Listing:
        listing = self.repository.get_by_id(listing_id)
        if listing is None:
            raise NotFoundException(
                "Listing not found", code="LISTING_NOT_FOUND", details={"listing_id": listing_id}
            )
        return listing

    @BaseService.measure_operation("list_vendor_listings")
    def list_vendor_listings(
        self, actor: Actor, status: Optional[str] = None, page: int = 1, per_page: int = 20
    ) -> Tuple[List[Listing], int]:
        if actor.role != ActorRole.VENDOR:
            raise ForbiddenException("Only vendors have listings", code="ROLE_NOT_ALLOWED")
        return self.repository.list_for_vendor(actor.id, status, (page - 1) * per_page, per_page)

    @BaseService.measure_operation("list_active_listings")
    def list_active_listings(self, page: int = 1, per_page: int = 20) -> Tuple[List[Listing], int]:
        return self.repository.list_active((page - 1) * per_page, per_page)
