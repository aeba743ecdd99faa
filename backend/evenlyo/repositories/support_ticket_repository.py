# backend/evenlyo/repositories/support_ticket_repository.py
"""Support ticket repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.support_ticket import SupportTicket
from .base_repository import BaseRepository


class SupportTicketRepository(BaseRepository[SupportTicket]):
    def __init__(self, db: Session):
        super().__init__(db, SupportTicket)

    def get_by_ticket_id(self, ticket_id: str) -> Optional[SupportTicket]:
        return self.find_one_by(ticket_id=ticket_id)

    def search(self, user_id: Optional[str] = None, status: Optional[str] = None) -> List[SupportTicket]:
        query = self.db.query(SupportTicket)
        if user_id:
            query = query.filter(SupportTicket.user_id == user_id)
        if status:
            query = query.filter(SupportTicket.status == status)
        return query.order_by(SupportTicket.created_at.desc()).all()
