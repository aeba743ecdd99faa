# backend/evenlyo/repositories/stock_repository.py
"""Stock movement log repository."""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.stock import StockLog
from .base_repository import BaseRepository


class StockLogRepository(BaseRepository[StockLog]):
    def __init__(self, db: Session):
        super().__init__(db, StockLog)

    def list_for_listing(self, listing_id: str, movement_type: Optional[str] = None) -> List[StockLog]:
        query = self.db.query(StockLog).filter(StockLog.listing_id == listing_id)
        if movement_type:
            query = query.filter(StockLog.type == movement_type)
        return query.order_by(StockLog.created_at.desc()).all()

    def totals_by_type(self, listing_id: str) -> Dict[str, int]:
        rows = (
            self.db.query(StockLog.type, func.coalesce(func.sum(StockLog.quantity), 0))
            .filter(StockLog.listing_id == listing_id)
            .group_by(StockLog.type)
            .all()
        )
        return {movement_type: int(total) for movement_type, total in rows}
