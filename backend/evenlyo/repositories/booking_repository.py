# backend/evenlyo/repositories/booking_repository.py
"""
Booking repository.

Holds the overlap query used by the availability checker and the
conditional status update that makes lifecycle transitions atomic.
"""

from datetime import date
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import utc_now
from ..models.booking import (
    NON_BLOCKING_STATUSES,
    PRE_DELIVERY_STATUSES,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_by_tracking_id(self, tracking_id: str) -> Optional[Booking]:
        return self.find_one_by(tracking_id=tracking_id)

    def tracking_id_exists(self, tracking_id: str) -> bool:
        return self.exists(tracking_id=tracking_id)

    def find_overlapping(
        self,
        listing_id: str,
        start_date: date,
        end_date: date,
        exclude_booking_id: Optional[str] = None,
        include_pending: bool = True,
    ) -> List[Booking]:
        """
        Blocking bookings on ``listing_id`` whose dates touch ``[start_date, end_date]``.

        The predicate is inclusive on both ends, so a booking ending on the
        requested start date is returned. ``include_pending=False`` limits the
        result to bookings a vendor has already committed to.
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.listing_id == listing_id,
                Booking.status.notin_(sorted(NON_BLOCKING_STATUSES)),
                Booking.start_date <= end_date,
                Booking.end_date >= start_date,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            if not include_pending:
                query = query.filter(Booking.status != BookingStatus.PENDING.value)
            return query.order_by(Booking.start_date, Booking.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding overlapping bookings for {listing_id}: {str(e)}")
            raise RepositoryException(f"Failed to check booking overlap: {str(e)}")

    def transition_status(
        self,
        booking_id: str,
        from_statuses: Iterable[str],
        to_status: str,
        **values: Any,
    ) -> bool:
        """
        Move a booking to ``to_status`` only if it is still in ``from_statuses``.

        Returns False when another writer changed the status first. The
        in-session instance is synchronized with the new column values.
        """
        allowed = list(from_statuses)
        try:
            stmt = (
                update(Booking)
                .where(Booking.id == booking_id, Booking.status.in_(allowed))
                .values(status=to_status, updated_at=utc_now(), **values)
                .execution_options(synchronize_session="fetch")
            )
            result = self.db.execute(stmt)
            return bool(result.rowcount)
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error transitioning booking {booking_id} {allowed} -> {to_status}: {str(e)}"
            )
            raise RepositoryException(f"Failed to update booking status: {str(e)}")

    def list_for_client(
        self, client_id: str, status: Optional[str], offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        query = self.db.query(Booking).filter(Booking.client_id == client_id)
        if status:
            query = query.filter(Booking.status == status)
        return self._paginate(query.order_by(Booking.created_at.desc()), offset, limit)

    def list_for_vendor(
        self, vendor_id: str, status: Optional[str], offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        query = self.db.query(Booking).filter(Booking.vendor_id == vendor_id)
        if status:
            query = query.filter(Booking.status == status)
        return self._paginate(query.order_by(Booking.created_at.desc()), offset, limit)

    def list_all(self, status: Optional[str], offset: int, limit: int) -> Tuple[List[Booking], int]:
        query = self.db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)
        return self._paginate(query.order_by(Booking.created_at.desc()), offset, limit)

    def count_by_status(self) -> Dict[str, int]:
        try:
            rows = self.db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
            return {status: int(count) for status, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings by status: {str(e)}")
            raise RepositoryException(f"Failed to compute booking stats: {str(e)}")

    def find_unpaid_upfront_bookings(
        self, starting_on_or_before: date, starting_on_or_after: Optional[date] = None
    ) -> List[Booking]:
        """Escrow bookings with only the upfront part paid, not yet out for delivery."""
        try:
            query = self.db.query(Booking).filter(
                Booking.payment_status == PaymentStatus.UPFRONT_PAID.value,
                Booking.is_fully_paid.is_(False),
                Booking.status.in_(sorted(PRE_DELIVERY_STATUSES)),
                Booking.start_date <= starting_on_or_before,
            )
            if starting_on_or_after is not None:
                query = query.filter(Booking.start_date >= starting_on_or_after)
            return query.order_by(Booking.start_date).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading payment reminder candidates: {str(e)}")
            raise RepositoryException(f"Failed to load unpaid bookings: {str(e)}")
