# backend/evenlyo/schemas/listing.py
"""Listing request schemas."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import DAY_CODES
from ..domain.multilingual import MultilingualText
from ..domain.time_window import normalize_clock, parse_clock
from ..models.listing import ServiceType
from ._strict_base import StrictRequestModel


class MultiDayDiscountIn(StrictRequestModel):
    percent: float = Field(..., gt=0, le=100)
    min_days: int = Field(2, ge=2)


class PricingIn(StrictRequestModel):
    type: str = Field(..., min_length=1, description="hourly, daily, per_event, fixed, package or quote")
    amount: Optional[float] = Field(None, ge=0)
    extratime_cost: float = Field(0, ge=0)
    security_fee: float = Field(0, ge=0)
    price_per_km: float = Field(0, ge=0)
    multi_day_discount: Optional[MultiDayDiscountIn] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TimeSlotIn(StrictRequestModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _clock(cls, value: str) -> str:
        return normalize_clock(value)

    @model_validator(mode="after")
    def _ordered(self) -> "TimeSlotIn":
        if parse_clock(self.end_time) <= parse_clock(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityIn(StrictRequestModel):
    is_available: bool = True
    available_days: List[str] = Field(default_factory=list)
    available_time_slots: List[TimeSlotIn] = Field(default_factory=list)
    advance_booking_days: int = Field(0, ge=0, le=365)

    @field_validator("available_days")
    @classmethod
    def _day_codes(cls, value: List[str]) -> List[str]:
        days: List[str] = []
        for raw in value:
            code = raw.strip().lower()[:3]
            if code not in DAY_CODES:
                raise ValueError(f"unknown day: {raw!r}")
            if code not in days:
                days.append(code)
        return days

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()


class ListingCreateRequest(StrictRequestModel):
    title: MultilingualText
    description: Optional[MultilingualText] = None
    sub_category_id: Optional[str] = None
    pricing: PricingIn
    availability: AvailabilityIn = Field(default_factory=AvailabilityIn)
    quantity: int = Field(1, ge=0)
    service_type: ServiceType = ServiceType.NON_HUMAN
    status: Literal["draft", "pending", "active", "inactive"] = "active"


class ListingUpdateRequest(StrictRequestModel):
    title: Optional[MultilingualText] = None
    description: Optional[MultilingualText] = None
    sub_category_id: Optional[str] = None
    pricing: Optional[PricingIn] = None
    availability: Optional[AvailabilityIn] = None
    quantity: Optional[int] = Field(None, ge=0)
    service_type: Optional[ServiceType] = None
    status: Optional[Literal["draft", "pending", "active", "inactive"]] = None
    is_active: Optional[bool] = None
