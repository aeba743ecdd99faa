# backend/evenlyo/schemas/booking.py
"""
Booking request schemas.

Free-text fields accept either a plain string or an ``{"en", "nl"}`` object
and arrive in the service layer as ``MultilingualText``.
"""

from datetime import date
import re
from typing import Literal, Optional

from pydantic import Field, ValidationInfo, field_validator, model_validator

from ..core.constants import MAX_REASON_LENGTH
from ..domain.multilingual import MultilingualText
from ..domain.time_window import normalize_clock
from ..models.booking import PaymentMethod
from ._strict_base import StrictRequestModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


def _clock(value: Optional[str]) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return normalize_clock(value)


class DateRangeMixin(StrictRequestModel):
    start_date: date
    end_date: date
    start_time: Optional[str] = Field(None, description="HH:MM, single-day bookings")
    end_time: Optional[str] = Field(None, description="HH:MM, single-day bookings")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value: object, info: ValidationInfo) -> object:
        return _ensure_date_only(value, info.field_name)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _clock_format(cls, value: Optional[str]) -> Optional[str]:
        return _clock(value)

    @model_validator(mode="after")
    def _date_order(self) -> "DateRangeMixin":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if self.start_time and self.start_time == self.end_time:
            raise ValueError("end_time must differ from start_time")
        return self


class BookingDetailsIn(DateRangeMixin):
    event_location: str = Field(..., min_length=1, max_length=500)
    event_type: Optional[MultilingualText] = None
    guest_count: Optional[int] = Field(None, ge=1)
    distance_km: Optional[float] = Field(None, ge=0)
    special_requests: Optional[MultilingualText] = None
    contact_preference: Optional[Literal["email", "phone", "chat"]] = None
    number_of_events: Optional[int] = Field(None, ge=1)
    quantity: int = Field(1, ge=1)

    @field_validator("event_type", "special_requests", mode="before")
    @classmethod
    def _blank_text_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class BookingCreateRequest(StrictRequestModel):
    listing_id: str = Field(..., min_length=1)
    vendor_id: str = Field(..., min_length=1)
    details: BookingDetailsIn


class AvailabilityCheckRequest(DateRangeMixin):
    listing_id: str = Field(..., min_length=1)
    exclude_booking_id: Optional[str] = None


class PriceQuoteRequest(DateRangeMixin):
    listing_id: str = Field(..., min_length=1)
    distance_km: Optional[float] = Field(None, ge=0)
    number_of_events: Optional[int] = Field(None, ge=1)


class RejectBookingRequest(StrictRequestModel):
    rejection_reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)


class PayBookingRequest(StrictRequestModel):
    payment_type: Literal["full", "upfront"] = "full"
    payment_method: PaymentMethod = PaymentMethod.STRIPE
    transaction_id: Optional[str] = Field(None, max_length=255)


class PayRemainingRequest(StrictRequestModel):
    transaction_id: Optional[str] = Field(None, max_length=255)


class CancelBookingRequest(StrictRequestModel):
    reason: Optional[MultilingualText] = None


class PickupRequest(StrictRequestModel):
    verification_notes: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)
    condition: Optional[Literal["good", "fair", "claim"]] = None
    claim_reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)
    claim_amount: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def _claim_needs_reason(self) -> "PickupRequest":
        if self.condition == "claim" and not (self.claim_reason or "").strip():
            raise ValueError("claim_reason is required when condition is 'claim'")
        return self


class ClaimRequest(StrictRequestModel):
    reason: str = Field(..., min_length=1, max_length=MAX_REASON_LENGTH)
    claim_type: str = Field(..., min_length=1, max_length=100)

    @field_validator("reason", "claim_type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class ReviewRequest(StrictRequestModel):
    rating: int
    comment: Optional[str] = Field(None, max_length=2000)


class ForceStatusRequest(StrictRequestModel):
    status: str = Field(..., min_length=1)
    admin_notes: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)
