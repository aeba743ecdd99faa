# backend/evenlyo/services/stock_service.py
"""
Inventory movements for equipment listings.

Quantities that go down are changed with a conditional update so concurrent
checkouts can never drive stock below zero. Every movement is logged.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.listing import Listing
from ..models.stock import DECREASING_MOVEMENTS, StockLog, StockMovementType
from ..principal import Actor
from ..repositories.factory import RepositoryFactory
from ..schemas.stock import StockMovementRequest
from .base import BaseService

logger = logging.getLogger(__name__)


class StockService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.listing_repository = RepositoryFactory.create_listing_repository(db)
        self.repository = RepositoryFactory.create_stock_log_repository(db)

    def _load_listing(self, actor: Actor, listing_id: str) -> Listing:
        listing = self.listing_repository.get_by_id(listing_id)
        if listing is None or not (actor.is_admin or listing.vendor_id == actor.id):
            raise NotFoundException(
                "Listing not found", code="LISTING_NOT_FOUND", details={"listing_id": listing_id}
            )
        return listing

    @BaseService.measure_operation("record_stock_movement")
    def record_movement(self, actor: Actor, listing_id: str, movement: StockMovementRequest) -> StockLog:
        """
        Apply a stock movement and log it.

        ``stockin`` sets the absolute quantity, ``checkin`` adds, ``checkout``
        and ``missing`` subtract.

        Raises:
            ValidationException: ``"Not enough stock."`` when a decrease would
                take the quantity below zero
        """
        listing = self._load_listing(actor, listing_id)
        movement_type = movement.type

        with self.transaction():
            if movement_type == StockMovementType.STOCKIN:
                self.listing_repository.set_quantity(listing.id, movement.quantity)
            elif movement_type in DECREASING_MOVEMENTS:
                if not self.listing_repository.decrement_quantity(listing.id, movement.quantity):
                    raise ValidationException(
                        "Not enough stock.",
                        code="INSUFFICIENT_STOCK",
                        details={"listing_id": listing.id, "requested": movement.quantity},
                    )
            else:
                self.listing_repository.increment_quantity(listing.id, movement.quantity)

            self.db.refresh(listing)
            log = self.repository.create(
                listing_id=listing.id,
                type=movement_type.value,
                quantity=movement.quantity,
                resulting_quantity=listing.quantity,
                note=movement.note,
                created_by=actor.id,
            )

        self.logger.info(
            f"Stock {movement_type.value} of {movement.quantity} on listing {listing.id}, "
            f"now {listing.quantity}"
        )
        return log

    @BaseService.measure_operation("list_stock_logs")
    def list_logs(
        self, actor: Actor, listing_id: str, movement_type: Optional[str] = None
    ) -> List[StockLog]:
        listing = self._load_listing(actor, listing_id)
        if movement_type:
            try:
                movement_type = StockMovementType(movement_type).value
            except ValueError:
                raise ValidationException(
                    f"Invalid stock movement type: {movement_type}", code="INVALID_MOVEMENT_TYPE"
                )
        return self.repository.list_for_listing(listing.id, movement_type)

    @BaseService.measure_operation("stock_summary")
    def stock_summary(self, actor: Actor, listing_id: str) -> Dict[str, Any]:
        listing = self._load_listing(actor, listing_id)
        totals = self.repository.totals_by_type(listing.id)
        return {
            "listing_id": listing.id,
            "current_quantity": listing.quantity,
            "totals": {t.value: totals.get(t.value, 0) for t in StockMovementType},
        }
