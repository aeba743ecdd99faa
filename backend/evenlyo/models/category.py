# backend/evenlyo/models/category.py
"""Listing categories and the payment policy attached to subcategories."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    sub_categories = relationship("SubCategory", back_populates="category")


class SubCategory(Base):
    """
    Subcategory with the escrow/upfront payment policy applied to its bookings.

    When ``escrow_enabled`` the client pays ``upfront_fee_percent`` of the total
    up front and the remainder before the event.
    """

    __tablename__ = "sub_categories"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    category_id = Column(String(26), ForeignKey("categories.id"), nullable=True, index=True)
    name = Column(String(120), nullable=False)
    escrow_enabled = Column(Boolean, nullable=False, default=False)
    upfront_fee_percent = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    category = relationship("Category", back_populates="sub_categories")

    __table_args__ = (
        CheckConstraint(
            "upfront_fee_percent >= 0 AND upfront_fee_percent <= 100",
            name="ck_sub_categories_upfront_fee_percent",
        ),
    )

    def __repr__(self) -> str:
        return f"<SubCategory {self.name} escrow={self.escrow_enabled}>"
