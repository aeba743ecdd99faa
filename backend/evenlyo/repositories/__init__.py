# backend/evenlyo/repositories/__init__.py
"""
Repository layer for the Evenlyo platform.

Key Components:
- BaseRepository: generic CRUD and pagination helpers
- RepositoryFactory: creates repository instances for services
- BookingRepository: overlap queries and conditional status transitions
- ListingRepository: bookable listings and atomic stock adjustments

Usage:
    from evenlyo.repositories import RepositoryFactory

    bookings = RepositoryFactory.create_booking_repository(db)
    conflicts = bookings.find_overlapping(listing_id, start, end)
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .listing_repository import ListingRepository
from .notification_repository import NotificationRepository
from .review_repository import ReviewRepository
from .stock_repository import StockLogRepository
from .support_ticket_repository import SupportTicketRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "ListingRepository",
    "NotificationRepository",
    "RepositoryFactory",
    "ReviewRepository",
    "StockLogRepository",
    "SupportTicketRepository",
    "UserRepository",
]
