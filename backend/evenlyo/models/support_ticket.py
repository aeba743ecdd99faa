# backend/evenlyo/models/support_ticket.py
"""Support ticket raised by a marketplace user."""

from enum import Enum
import logging
from typing import Any, Dict
import uuid

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, String
import ulid

from ..core.constants import TICKET_ID_PREFIX
from ..core.timezone_utils import utc_now
from ..database import Base

logger = logging.getLogger(__name__)


class TicketStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


def generate_ticket_id() -> str:
    return f"{TICKET_ID_PREFIX}{uuid.uuid4().hex[:8].upper()}"


class SupportTicket(Base):
    __tablename__ = "support_tickets"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    ticket_id = Column(String(20), nullable=False, unique=True, index=True, default=generate_ticket_id)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    issue_related_to = Column(String(50), nullable=False)
    details = Column(JSON, nullable=False)
    status = Column(String(10), nullable=False, default=TicketStatus.OPEN.value)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    __table_args__ = (
        CheckConstraint("status IN ('open', 'closed')", name="ck_support_tickets_status"),
    )

    def toggle(self) -> str:
        """Flip open <-> closed and keep ``closed_at`` in step."""
        if self.status == TicketStatus.OPEN.value:
            self.status = TicketStatus.CLOSED.value
            self.closed_at = utc_now()
        else:
            self.status = TicketStatus.OPEN.value
            self.closed_at = None
        logger.info("Support ticket %s is now %s", self.ticket_id, self.status)
        return self.status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "user_id": self.user_id,
            "user_email": self.user_email,
            "issue_related_to": self.issue_related_to,
            "details": self.details,
            "status": self.status,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
