# backend/evenlyo/models/stock.py
"""Inventory movement log for equipment listings."""

from enum import Enum
from typing import Any, Dict

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base


class StockMovementType(str, Enum):
    STOCKIN = "stockin"  # Sets the absolute quantity
    CHECKIN = "checkin"  # Items returned to stock
    CHECKOUT = "checkout"  # Items leave stock
    MISSING = "missing"  # Items lost


DECREASING_MOVEMENTS = frozenset({StockMovementType.CHECKOUT, StockMovementType.MISSING})


class StockLog(Base):
    """Immutable record of one stock movement on a listing."""

    __tablename__ = "stock_logs"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    listing_id = Column(String(26), ForeignKey("listings.id"), nullable=False)
    type = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)
    resulting_quantity = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    created_by = Column(String(26), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    listing = relationship("Listing")

    __table_args__ = (
        CheckConstraint(
            "type IN ('stockin', 'checkin', 'checkout', 'missing')", name="ck_stock_logs_type"
        ),
        CheckConstraint("quantity >= 0", name="ck_stock_logs_quantity"),
        Index("ix_stock_logs_listing_type", "listing_id", "type"),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "listing_id": self.listing_id,
            "type": self.type,
            "quantity": self.quantity,
            "resulting_quantity": self.resulting_quantity,
            "note": self.note,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
