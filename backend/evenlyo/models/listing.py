# backend/evenlyo/models/listing.py
"""
Listing model for the Evenlyo platform.

A listing is a bookable service or equipment offering owned by a vendor.
Pricing and availability are stored as JSON documents because their shape
varies by pricing model; helpers on the model expose them with defaults.
"""

from enum import Enum
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base

logger = logging.getLogger(__name__)


class ListingStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class PricingType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    PER_EVENT = "per_event"
    FIXED = "fixed"
    PACKAGE = "package"
    QUOTE = "quote"


class ServiceType(str, Enum):
    HUMAN = "human"
    NON_HUMAN = "non_human"


PRICING_TYPE_ALIASES: Dict[str, PricingType] = {
    "hourly": PricingType.HOURLY,
    "per hour": PricingType.HOURLY,
    "perhour": PricingType.HOURLY,
    "per_hour": PricingType.HOURLY,
    "daily": PricingType.DAILY,
    "day": PricingType.DAILY,
    "per day": PricingType.DAILY,
    "per_day": PricingType.DAILY,
    "per_event": PricingType.PER_EVENT,
    "per event": PricingType.PER_EVENT,
    "event": PricingType.PER_EVENT,
    "fixed": PricingType.FIXED,
    "fixed price": PricingType.FIXED,
    "one-time": PricingType.FIXED,
    "flat": PricingType.FIXED,
    "package": PricingType.PACKAGE,
    "quote": PricingType.QUOTE,
}


def normalize_pricing_type(raw: Any) -> Optional[PricingType]:
    """Map the loose pricing-type spellings vendors submit to a PricingType."""
    if isinstance(raw, PricingType):
        return raw
    if not isinstance(raw, str):
        return None
    return PRICING_TYPE_ALIASES.get(raw.strip().lower())


class Listing(Base):
    """Vendor offering that clients book for a date range."""

    __tablename__ = "listings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    vendor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    sub_category_id = Column(String(26), ForeignKey("sub_categories.id"), nullable=True)

    title = Column(JSON, nullable=False)
    description = Column(JSON, nullable=True)

    # {type, amount, extratime_cost, security_fee, price_per_km, multi_day_discount}
    pricing = Column(JSON, nullable=False, default=dict)
    # {is_available, available_days, available_time_slots, advance_booking_days}
    availability = Column(JSON, nullable=False, default=dict)

    quantity = Column(Integer, nullable=False, default=1)
    service_type = Column(String(20), nullable=False, default=ServiceType.NON_HUMAN.value)
    status = Column(String(20), nullable=False, default=ListingStatus.DRAFT.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    rating_average = Column(Float, nullable=False, default=0.0)
    rating_total_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    vendor = relationship("User", back_populates="listings", foreign_keys=[vendor_id])
    sub_category = relationship("SubCategory")
    bookings = relationship("Booking", back_populates="listing")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_listings_quantity_non_negative"),
        CheckConstraint(
            "status IN ('draft', 'pending', 'active', 'inactive', 'suspended')",
            name="ck_listings_status",
        ),
        CheckConstraint(
            "service_type IN ('human', 'non_human')",
            name="ck_listings_service_type",
        ),
        Index("ix_listings_vendor_status", "vendor_id", "status"),
    )

    @property
    def is_bookable(self) -> bool:
        return bool(self.is_active) and self.status == ListingStatus.ACTIVE.value

    @property
    def is_available_flag(self) -> bool:
        return bool((self.availability or {}).get("is_available", True))

    @property
    def available_days(self) -> List[str]:
        return list((self.availability or {}).get("available_days") or [])

    @property
    def available_time_slots(self) -> List[Dict[str, str]]:
        return list((self.availability or {}).get("available_time_slots") or [])

    @property
    def advance_booking_days(self) -> int:
        return int((self.availability or {}).get("advance_booking_days") or 0)

    def title_text(self, lang: str = "en") -> str:
        title = self.title or {}
        if isinstance(title, dict):
            return title.get(lang) or title.get("en") or ""
        return str(title)

    def apply_rating(self, rating: int) -> None:
        count = self.rating_total_reviews or 0
        average = self.rating_average or 0.0
        self.rating_average = (average * count + rating) / (count + 1)
        self.rating_total_reviews = count + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "sub_category_id": self.sub_category_id,
            "title": self.title,
            "description": self.description,
            "pricing": self.pricing,
            "availability": self.availability,
            "quantity": self.quantity,
            "service_type": self.service_type,
            "status": self.status,
            "is_active": self.is_active,
            "rating": {
                "average": round(self.rating_average or 0.0, 2),
                "total_reviews": self.rating_total_reviews or 0,
            },
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Listing {self.id} {self.title_text()!r} ({self.status})>"
