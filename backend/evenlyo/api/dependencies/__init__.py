# backend/evenlyo/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import get_current_actor, require_admin, require_client, require_roles, require_vendor
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_admin_service,
    get_booking_service,
    get_listing_service,
    get_notification_service,
    get_pricing_config,
    get_pricing_service,
    get_stock_service,
    get_support_service,
)

__all__ = [
    # Auth
    "get_current_actor",
    "require_roles",
    "require_client",
    "require_vendor",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_admin_service",
    "get_booking_service",
    "get_listing_service",
    "get_notification_service",
    "get_pricing_config",
    "get_pricing_service",
    "get_stock_service",
    "get_support_service",
]
