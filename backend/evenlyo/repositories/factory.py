# backend/evenlyo/repositories/factory.py
"""
Repository factory.

Services obtain repositories here so tests can patch a single seam.
"""

from sqlalchemy.orm import Session

from ..models.category import SubCategory
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .listing_repository import ListingRepository
from .notification_repository import NotificationRepository
from .review_repository import ReviewRepository
from .stock_repository import StockLogRepository
from .support_ticket_repository import SupportTicketRepository
from .user_repository import UserRepository


class RepositoryFactory:
    """Factory for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        return BookingRepository(db)

    @staticmethod
    def create_listing_repository(db: Session) -> ListingRepository:
        return ListingRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> NotificationRepository:
        return NotificationRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> ReviewRepository:
        return ReviewRepository(db)

    @staticmethod
    def create_stock_log_repository(db: Session) -> StockLogRepository:
        return StockLogRepository(db)

    @staticmethod
    def create_support_ticket_repository(db: Session) -> SupportTicketRepository:
        return SupportTicketRepository(db)

    @staticmethod
    def create_sub_category_repository(db: Session) -> BaseRepository[SubCategory]:
        return BaseRepository(db, SubCategory)
