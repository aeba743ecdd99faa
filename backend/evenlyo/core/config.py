# backend/evenlyo/core/config.py
from dataclasses import dataclass
from decimal import Decimal
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_BACKEND_ROOT = Path(__file__).resolve().parents[2]

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)

_DEFAULT_SECRET_KEY = SecretStr("evenlyo-development-secret-change-me")


@dataclass(frozen=True)
class PricingConfig:
    """Fee settings handed to the pricing calculator."""

    platform_fee_rate: Decimal
    currency: str = "EUR"


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    log_level: str = Field(default="INFO", description="Root log level")

    database_url: str = Field(
        default=f"sqlite:///{_BACKEND_ROOT / 'evenlyo.db'}",
        description="SQLAlchemy database URL",
    )
    redis_url: str = "redis://localhost:6379"

    # Auth (token verification only)
    secret_key: SecretStr = Field(
        default=_DEFAULT_SECRET_KEY,
        description="Secret key used to verify access tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Pricing
    platform_fee_rate: Decimal = Field(
        default=Decimal("0.02"),
        description="Platform fee charged on the booking subtotal, as a fraction (0.02 == 2%)",
    )
    currency: str = "EUR"

    # Booking lifecycle
    cancellation_window_minutes: int = Field(
        default=30, description="Minutes after creation during which a client may cancel"
    )
    payment_reminder_days_before: int = Field(
        default=3, description="Days before the event when the payment reminder is sent"
    )
    payment_auto_cancel_days_before: int = Field(
        default=1, description="Days before the event when unpaid bookings are cancelled"
    )

    # Per-listing accept serialization
    listing_lock_backend: Literal["redis", "local"] = Field(
        default="redis",
        description="Backend for the per-listing accept lock (redis falls back to local)",
    )
    listing_lock_ttl_seconds: int = 30

    # Email
    frontend_url: str = "http://localhost:3000"
    support_email: str = "support@evenlyo.nl"
    email_provider: Literal["console"] = Field(
        default="console", description="Outgoing email provider; console logs instead of sending"
    )

    # Celery
    celery_broker_url: Optional[str] = None

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    # Use ConfigDict instead of Config class (Pydantic V2 style)
    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("platform_fee_rate")
    @classmethod
    def _validate_fee_rate(cls, value: Decimal) -> Decimal:
        if value < 0 or value >= 1:
            raise ValueError("platform_fee_rate must be a fraction between 0 and 1")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def pricing_config(self) -> PricingConfig:
        return PricingConfig(platform_fee_rate=self.platform_fee_rate, currency=self.currency)


settings = Settings()
logger.info(
    "[CONFIG] environment=%s platform_fee_rate=%s lock_backend=%s",
    settings.environment,
    settings.platform_fee_rate,
    settings.listing_lock_backend,
)
