# backend/evenlyo/models/booking.py
"""
Booking model for the Evenlyo platform.

A booking is one reservation of a listing by a client for a date range,
optionally narrowed to a time window on a single day. Bookings are never
deleted: together with their append-only ``status_history`` they form the
audit trail of every marketplace transaction.
"""

from datetime import datetime
from enum import Enum
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.timezone_utils import utc_now
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Waiting for the vendor
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PAID = "paid"
    ON_THE_WAY = "on_the_way"  # Vendor is delivering
    RECEIVED = "received"  # Client confirmed delivery
    PICKED_UP = "picked_up"  # Vendor collected the items again
    COMPLETED = "completed"  # Vendor closed the booking
    FINISHED = "finished"  # Client closed the booking
    CANCELLED = "cancelled"
    CLAIM = "claim"  # Dispute open
    RECEIVED_BACK = "received_back"


# Bookings in these statuses never block a listing
NON_BLOCKING_STATUSES = frozenset({BookingStatus.REJECTED.value, BookingStatus.CANCELLED.value})

# Before delivery starts; only these can be auto-cancelled for non-payment
PRE_DELIVERY_STATUSES = frozenset({BookingStatus.ACCEPTED.value, BookingStatus.PAID.value})


class PaymentStatus(str, Enum):
    PENDING = "pending"
    UPFRONT_PAID = "upfront_paid"
    PAID = "paid"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"
    CANCELLED_DUE_TO_NON_PAYMENT = "cancelled_due_to_non_payment"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


def _status_check(column: str, enum_cls: type) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class Booking(Base):
    """
    Reservation of a listing by a client.

    ``details`` and ``pricing`` snapshot the request and the computed price at
    creation time so later listing edits never change historical bookings.
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tracking_id = Column(String(40), nullable=False, unique=True, index=True)

    client_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    vendor_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    listing_id = Column(String(26), ForeignKey("listings.id"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)  # "HH:MM"
    end_time = Column(String(5), nullable=True)

    details = Column(JSON, nullable=False, default=dict)
    pricing = Column(JSON, nullable=False, default=dict)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    status_history = Column(JSON, nullable=False, default=list)

    payment_status = Column(String(40), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(20), nullable=True)
    transaction_id = Column(String(255), nullable=True)
    is_fully_paid = Column(Boolean, nullable=False, default=False)
    reminder_sent = Column(Boolean, nullable=False, default=False)

    claim_details = Column(JSON, nullable=True)
    cancellation_details = Column(JSON, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    delivery_details = Column(JSON, nullable=True)
    feedback = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    client = relationship("User", foreign_keys=[client_id])
    vendor = relationship("User", foreign_keys=[vendor_id])
    listing = relationship("Listing", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_bookings_date_order"),
        CheckConstraint(_status_check("status", BookingStatus), name="ck_bookings_status"),
        CheckConstraint(
            _status_check("payment_status", PaymentStatus), name="ck_bookings_payment_status"
        ),
        Index("ix_bookings_client_status", "client_id", "status"),
        Index("ix_bookings_vendor_status", "vendor_id", "status"),
        Index("ix_bookings_listing_dates", "listing_id", "start_date", "end_date"),
    )

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    @property
    def has_times(self) -> bool:
        return bool(self.start_time and self.end_time)

    @property
    def total_price(self) -> float:
        return float((self.pricing or {}).get("total_price") or 0.0)

    def append_history(
        self,
        status: str,
        updated_by: Dict[str, Any],
        notes: Any = None,
        timestamp: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Append an audit entry. The JSON list is reassigned so the ORM sees the change."""
        entry = {
            "status": status,
            "timestamp": (timestamp or utc_now()).isoformat(),
            "updated_by": updated_by,
            "notes": notes,
        }
        self.status_history = [*(self.status_history or []), entry]
        return entry

    def merge_json(self, field: str, values: Dict[str, Any]) -> None:
        """Shallow-merge ``values`` into a JSON column."""
        current = dict(getattr(self, field) or {})
        current.update(values)
        setattr(self, field, current)

    def conflict_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tracking_id": self.tracking_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "status": self.status,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tracking_id": self.tracking_id,
            "client_id": self.client_id,
            "vendor_id": self.vendor_id,
            "listing_id": self.listing_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "details": self.details,
            "pricing": self.pricing,
            "status": self.status,
            "status_history": list(self.status_history or []),
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "transaction_id": self.transaction_id,
            "is_fully_paid": self.is_fully_paid,
            "claim_details": self.claim_details,
            "cancellation_details": self.cancellation_details,
            "rejection_reason": self.rejection_reason,
            "delivery_details": self.delivery_details,
            "feedback": self.feedback,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "accepted_at": self.accepted_at.isoformat() if self.accepted_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    def __repr__(self) -> str:
        return f"<Booking {self.tracking_id} listing={self.listing_id} {self.status}>"
