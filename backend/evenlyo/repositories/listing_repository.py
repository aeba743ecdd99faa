# backend/evenlyo/repositories/listing_repository.py
"""Listing repository, including the atomic stock adjustments."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import utc_now
from ..models.listing import Listing, ListingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository[Listing]):
    def __init__(self, db: Session):
        super().__init__(db, Listing)

    def get_bookable(self, listing_id: str) -> Optional[Listing]:
        """Active listing that clients may book, or None."""
        try:
            return (
                self.db.query(Listing)
                .filter(
                    Listing.id == listing_id,
                    Listing.is_active.is_(True),
                    Listing.status == ListingStatus.ACTIVE.value,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading bookable listing {listing_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve listing: {str(e)}")

    def list_for_vendor(
        self, vendor_id: str, status: Optional[str], offset: int, limit: int
    ) -> Tuple[List[Listing], int]:
        query = self.db.query(Listing).filter(Listing.vendor_id == vendor_id)
        if status:
            query = query.filter(Listing.status == status)
        return self._paginate(query.order_by(Listing.created_at.desc()), offset, limit)

    def list_active(self, offset: int, limit: int) -> Tuple[List[Listing], int]:
        query = self.db.query(Listing).filter(
            Listing.is_active.is_(True), Listing.status == ListingStatus.ACTIVE.value
        )
        return self._paginate(query.order_by(Listing.created_at.desc()), offset, limit)

    def decrement_quantity(self, listing_id: str, amount: int) -> bool:
        """
        ``quantity -= amount`` only when enough stock remains.

        Returns False (and changes nothing) when ``quantity < amount``.
        """
        return self._conditional_quantity_update(
            update(Listing)
            .where(Listing.id == listing_id, Listing.quantity >= amount)
            .values(quantity=Listing.quantity - amount, updated_at=utc_now())
        )

    def increment_quantity(self, listing_id: str, amount: int) -> bool:
        return self._conditional_quantity_update(
            update(Listing)
            .where(Listing.id == listing_id)
            .values(quantity=Listing.quantity + amount, updated_at=utc_now())
        )

    def set_quantity(self, listing_id: str, quantity: int) -> bool:
        return self._conditional_quantity_update(
            update(Listing)
            .where(Listing.id == listing_id)
            .values(quantity=quantity, updated_at=utc_now())
        )

    def _conditional_quantity_update(self, stmt) -> bool:
        try:
            result = self.db.execute(stmt.execution_options(synchronize_session="fetch"))
            return bool(result.rowcount)
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating listing quantity: {str(e)}")
            raise RepositoryException(f"Failed to update stock: {str(e)}")
