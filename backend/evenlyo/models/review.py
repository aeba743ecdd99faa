# backend/evenlyo/models/review.py
"""Client review of a closed booking."""

from typing import Any, Dict

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base


class Review(Base):
    """One review per booking; feeds the vendor and listing rating aggregates."""

    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, unique=True)
    listing_id = Column(String(26), ForeignKey("listings.id"), nullable=False, index=True)
    vendor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "listing_id": self.listing_id,
            "vendor_id": self.vendor_id,
            "client_id": self.client_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
