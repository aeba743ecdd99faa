# backend/evenlyo/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Factory functions create service instances per request with their
collaborators wired in. Pricing configuration comes from settings here and
is handed to the calculator explicitly.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import PricingConfig, settings
from ...services.availability_service import AvailabilityService
from ...services.booking_admin_service import BookingAdminService
from ...services.booking_service import BookingService
from ...services.listing_service import ListingService
from ...services.notification_service import NotificationService
from ...services.pricing_service import PricingService
from ...services.stock_service import StockService
from ...services.support_service import SupportService
from .database import get_db


def get_pricing_config() -> PricingConfig:
    return settings.pricing_config()


def get_pricing_service(
    db: Session = Depends(get_db), pricing_config: PricingConfig = Depends(get_pricing_config)
) -> PricingService:
    return PricingService(db, pricing_config)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    availability_service: AvailabilityService = Depends(get_availability_service),
    pricing_service: PricingService = Depends(get_pricing_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingService:
    """
    Get booking service instance.

    Returns:
        BookingService sharing the request's session with its collaborators
    """
    return BookingService(
        db,
        availability_service=availability_service,
        pricing_service=pricing_service,
        notification_service=notification_service,
    )


def get_booking_admin_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingAdminService:
    return BookingAdminService(db, notification_service=notification_service)


def get_listing_service(db: Session = Depends(get_db)) -> ListingService:
    return ListingService(db)


def get_stock_service(db: Session = Depends(get_db)) -> StockService:
    return StockService(db)


def get_support_service(db: Session = Depends(get_db)) -> SupportService:
    return SupportService(db)
