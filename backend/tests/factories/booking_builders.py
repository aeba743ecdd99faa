"""Builders for booking requests, actors and auth headers used across tests."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, Optional

from evenlyo.auth import create_access_token
from evenlyo.core.timezone_utils import utc_today
from evenlyo.models.listing import Listing
from evenlyo.models.user import User
from evenlyo.principal import Actor, ActorRole
from evenlyo.schemas.booking import BookingCreateRequest


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=ActorRole(user.role), name=user.display_name)


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


def future_day(days_ahead: int = 30) -> date:
    return utc_today() + timedelta(days=days_ahead)


def booking_payload(
    listing: Listing,
    start: date,
    end: Optional[date] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    **details: Any,
) -> Dict[str, Any]:
    """JSON body for POST /api/booking/request; single-day ranges default to 10:00-14:00."""
    end = end or start
    if start == end and start_time is None:
        start_time, end_time = "10:00", "14:00"
    body: Dict[str, Any] = {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "event_location": "Damrak 1, Amsterdam",
        **details,
    }
    if start_time:
        body["start_time"] = start_time
        body["end_time"] = end_time
    return {"listing_id": listing.id, "vendor_id": listing.vendor_id, "details": body}


def booking_request(listing: Listing, start: date, end: Optional[date] = None, **kwargs: Any) -> BookingCreateRequest:
    return BookingCreateRequest.model_validate(booking_payload(listing, start, end, **kwargs))
