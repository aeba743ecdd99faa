# backend/tests/conftest.py
"""
Pytest configuration for the Evenlyo backend.

Environment variables are set BEFORE any evenlyo import so settings, the
engine and the listing lock pick up test values. Each test gets a fresh
in-memory SQLite database.
"""

import os

# CRITICAL: Set testing mode BEFORE any evenlyo imports!
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LISTING_LOCK_BACKEND"] = "local"
os.environ["SECRET_KEY"] = "test-secret-key-for-evenlyo-tests"
os.environ.setdefault("CI", "1")

from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from evenlyo import models  # noqa: F401
from evenlyo.api.dependencies.database import get_db
from evenlyo.core.config import PricingConfig
from evenlyo.database import Base
from evenlyo.main import app
from evenlyo.models.category import Category, SubCategory
from evenlyo.models.listing import Listing
from evenlyo.models.user import User
from evenlyo.principal import Actor
from evenlyo.services.booking_service import BookingService
from evenlyo.services.pricing_service import PricingService
from tests.factories.booking_builders import actor_for

# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    """HTTP client sharing the test session with every request."""

    def override_get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ============================================================================
# Users and actors
# ============================================================================


def _create_user(db: Session, email: str, role: str, **extra: Any) -> User:
    user = User(email=email, first_name=extra.pop("first_name", "Test"), role=role, **extra)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def client_user(db: Session) -> User:
    return _create_user(db, "client@example.com", "client", last_name="Client")


@pytest.fixture
def other_client_user(db: Session) -> User:
    return _create_user(db, "client2@example.com", "client", last_name="Second")


@pytest.fixture
def vendor_user(db: Session) -> User:
    return _create_user(db, "vendor@example.com", "vendor", business_name="Party Rentals BV")


@pytest.fixture
def admin_user(db: Session) -> User:
    return _create_user(db, "admin@example.com", "admin", last_name="Admin")


@pytest.fixture
def client_actor(client_user: User) -> Actor:
    return actor_for(client_user)


@pytest.fixture
def other_client_actor(other_client_user: User) -> Actor:
    return actor_for(other_client_user)


@pytest.fixture
def vendor_actor(vendor_user: User) -> Actor:
    return actor_for(vendor_user)


@pytest.fixture
def admin_actor(admin_user: User) -> Actor:
    return actor_for(admin_user)


# ============================================================================
# Catalog
# ============================================================================


@pytest.fixture
def sub_category(db: Session) -> SubCategory:
    category = Category(name="Furniture")
    db.add(category)
    db.flush()
    sub = SubCategory(category_id=category.id, name="Tables", escrow_enabled=False)
    db.add(sub)
    db.commit()
    return sub


@pytest.fixture
def escrow_sub_category(db: Session) -> SubCategory:
    sub = SubCategory(name="DJ", escrow_enabled=True, upfront_fee_percent=30.0)
    db.add(sub)
    db.commit()
    return sub


@pytest.fixture
def make_listing(db: Session, vendor_user: User, sub_category: SubCategory) -> Callable[..., Listing]:
    def _make(
        pricing: Optional[Dict[str, Any]] = None,
        availability: Optional[Dict[str, Any]] = None,
        quantity: int = 5,
        sub_category_id: Optional[str] = None,
        **extra: Any,
    ) -> Listing:
        listing = Listing(
            vendor_id=vendor_user.id,
            sub_category_id=sub_category_id or sub_category.id,
            title={"en": "Round table", "nl": "Ronde tafel"},
            pricing=pricing or {"type": "daily", "amount": 100},
            availability=availability or {"is_available": True},
            quantity=quantity,
            **{"status": "active", "is_active": True, **extra},
        )
        db.add(listing)
        db.commit()
        return listing

    return _make


@pytest.fixture
def listing(make_listing) -> Listing:
    return make_listing()


# ============================================================================
# Services and requests
# ============================================================================


@pytest.fixture
def pricing_service(db: Session) -> PricingService:
    return PricingService(db, PricingConfig(platform_fee_rate=Decimal("0.02")))


@pytest.fixture
def booking_service(db: Session) -> BookingService:
    return BookingService(db)

