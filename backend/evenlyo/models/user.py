# backend/evenlyo/models/user.py
"""
User model for the Evenlyo platform.

Clients, vendors and admins share one table, differentiated by ``role``.
Vendors additionally carry the rolling review average that the booking
review flow maintains.
"""

from enum import Enum
import logging
from typing import Any, Dict

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import relationship
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    CLIENT = "client"
    VENDOR = "vendor"
    ADMIN = "admin"


class User(Base):
    """Marketplace account (client, vendor or admin)."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    business_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CLIENT.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Vendor review aggregate
    rating_average = Column(Float, nullable=False, default=0.0)
    rating_total_reviews = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    listings = relationship("Listing", back_populates="vendor", foreign_keys="Listing.vendor_id")

    __table_args__ = (
        CheckConstraint("role IN ('client', 'vendor', 'admin')", name="ck_users_role"),
    )

    @property
    def display_name(self) -> str:
        if self.role == UserRole.VENDOR.value and self.business_name:
            return self.business_name
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.email

    @property
    def is_vendor(self) -> bool:
        return self.role == UserRole.VENDOR.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def apply_rating(self, rating: int) -> None:
        """Fold a new review into the rolling average."""
        count = self.rating_total_reviews or 0
        average = self.rating_average or 0.0
        self.rating_average = (average * count + rating) / (count + 1)
        self.rating_total_reviews = count + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.display_name,
            "role": self.role,
            "is_active": self.is_active,
            "rating": {
                "average": round(self.rating_average or 0.0, 2),
                "total_reviews": self.rating_total_reviews or 0,
            },
        }

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
