"""
Database models for the Evenlyo platform.

The models are organized by functionality:
- Users (clients, vendors, admins)
- Categories and the subcategory payment policy
- Listings and their stock movements
- Bookings and reviews
- Notifications and support tickets
"""

from .booking import Booking, BookingStatus, PaymentMethod, PaymentStatus
from .category import Category, SubCategory
from .listing import Listing, ListingStatus, PricingType, ServiceType
from .notification import Notification
from .review import Review
from .stock import StockLog, StockMovementType
from .support_ticket import SupportTicket, TicketStatus
from .user import User, UserRole

__all__ = [
    "Booking",
    "BookingStatus",
    "Category",
    "Listing",
    "ListingStatus",
    "Notification",
    "PaymentMethod",
    "PaymentStatus",
    "PricingType",
    "Review",
    "ServiceType",
    "StockLog",
    "StockMovementType",
    "SubCategory",
    "SupportTicket",
    "TicketStatus",
    "User",
    "UserRole",
]
