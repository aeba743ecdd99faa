# backend/evenlyo/repositories/review_repository.py
"""Review repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.review import Review
from .base_repository import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(db, Review)

    def get_for_booking(self, booking_id: str) -> Optional[Review]:
        return self.find_one_by(booking_id=booking_id)

    def list_for_vendor(self, vendor_id: str) -> List[Review]:
        return (
            self.db.query(Review)
            .filter(Review.vendor_id == vendor_id)
            .order_by(Review.created_at.desc())
            .all()
        )
