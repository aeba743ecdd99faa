# backend/evenlyo/services/availability_service.py
"""
Availability checks for listings.

Decides whether a listing can take a booking for a date range (and, for
single-day bookings, a time window) given the listing's own availability
rules and the bookings already holding it. Also hosts the stock and
lead-time guards that run before a booking request is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DAY_CODES
from ..core.exceptions import (
    InsufficientNoticeException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import utc_today
from ..domain.time_window import TimeWindow
from ..models.booking import Booking
from ..models.listing import Listing
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityResult:
    is_available: bool
    reason: Optional[str] = None
    conflicting_bookings: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_available": self.is_available,
            "reason": self.reason,
            "conflicting_bookings": self.conflicting_bookings,
        }


class AvailabilityService(BaseService):
    """Listing availability, stock and lead-time checks."""

    REASON_LISTING_UNAVAILABLE = "LISTING_UNAVAILABLE"
    REASON_OUTSIDE_TIME_SLOTS = "OUTSIDE_TIME_SLOTS"
    REASON_DAY_NOT_AVAILABLE = "DAY_NOT_AVAILABLE"
    REASON_BOOKING_CONFLICT = "BOOKING_CONFLICT"

    def __init__(self, db: Session):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.listing_repository = RepositoryFactory.create_listing_repository(db)

    def is_available(
        self,
        listing_id: str,
        start_date: date,
        end_date: date,
        exclude_booking_id: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> bool:
        return self.get_availability_details(
            listing_id, start_date, end_date, exclude_booking_id, start_time, end_time
        ).is_available

    @BaseService.measure_operation("availability.details")
    def get_availability_details(
        self,
        listing_id: str,
        start_date: date,
        end_date: date,
        exclude_booking_id: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> AvailabilityResult:
        listing = self.listing_repository.get_by_id(listing_id)
        if listing is None:
            raise NotFoundException(
                "Listing not found", code="LISTING_NOT_FOUND", details={"listing_id": listing_id}
            )
        return self.check_listing(
            listing, start_date, end_date, exclude_booking_id, start_time, end_time
        )

    def check_listing(
        self,
        listing: Listing,
        start_date: date,
        end_date: date,
        exclude_booking_id: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        include_pending: bool = True,
    ) -> AvailabilityResult:
        """
        Availability of an already-loaded listing.

        New requests are checked against every blocking booking. Accepting a
        request passes ``include_pending=False`` so competing pending requests
        do not veto each other; only committed bookings count.
        """
        if end_date < start_date:
            raise ValidationException(
                "End date must be on or after start date.",
                code="INVALID_DATE_RANGE",
            )

        if not listing.is_available_flag:
            return AvailabilityResult(False, self.REASON_LISTING_UNAVAILABLE)

        single_day = start_date == end_date
        window = TimeWindow.from_clock(start_time, end_time) if single_day else None

        if window is not None and listing.available_time_slots:
            if not self._fits_any_slot(listing, window):
                return AvailabilityResult(False, self.REASON_OUTSIDE_TIME_SLOTS)

        allowed_days = [day.lower() for day in listing.available_days]
        if allowed_days and DAY_CODES[start_date.weekday()] not in allowed_days:
            return AvailabilityResult(False, self.REASON_DAY_NOT_AVAILABLE)

        candidates = self.booking_repository.find_overlapping(
            listing.id,
            start_date,
            end_date,
            exclude_booking_id=exclude_booking_id,
            include_pending=include_pending,
        )
        if window is not None:
            conflicts = [b for b in candidates if self._blocks_window(b, start_date, window)]
        else:
            conflicts = candidates

        if conflicts:
            logger.info(
                "Listing %s unavailable for %s..%s: %d conflicting booking(s)",
                listing.id,
                start_date,
                end_date,
                len(conflicts),
            )
            return AvailabilityResult(
                False,
                self.REASON_BOOKING_CONFLICT,
                [booking.conflict_summary() for booking in conflicts],
            )
        return AvailabilityResult(True)

    def check_stock(self, listing: Listing, needed: int = 1) -> None:
        quantity = listing.quantity or 0
        if quantity <= 0:
            raise ValidationException(
                "Out of stock",
                code="OUT_OF_STOCK",
                details={"listing_id": listing.id, "available": quantity},
            )
        if quantity < needed:
            raise ValidationException(
                f"Only {quantity} in stock",
                code="INSUFFICIENT_STOCK",
                details={"listing_id": listing.id, "available": quantity, "requested": needed},
            )

    def check_lead_time(self, listing: Listing, start_date: date, today: Optional[date] = None) -> None:
        required = listing.advance_booking_days
        if required <= 0:
            return
        today = today or utc_today()
        if start_date < today + timedelta(days=required):
            raise InsufficientNoticeException(required, (start_date - today).days)

    @staticmethod
    def _fits_any_slot(listing: Listing, window: TimeWindow) -> bool:
        for slot in listing.available_time_slots:
            try:
                slot_window = TimeWindow.from_clock(slot.get("start_time"), slot.get("end_time"))
            except ValueError:
                logger.warning("Ignoring malformed time slot on listing %s: %s", listing.id, slot)
                continue
            if slot_window is not None and window.within(slot_window):
                return True
        return False

    @staticmethod
    def _blocks_window(booking: Booking, day: date, window: TimeWindow) -> bool:
        """Whether an overlapping booking blocks a timed single-day request."""
        if not booking.is_single_day or booking.start_date != day:
            # Multi-day bookings hold every day they cover
            return True
        existing = TimeWindow.from_clock(booking.start_time, booking.end_time)
        if existing is None:
            return True
        return window.overlaps(existing)
