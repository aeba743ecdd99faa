"""Centralized pricing calculations for booking requests."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from ..core.config import PricingConfig, settings
from ..core.exceptions import NotFoundException, ValidationException
from ..domain.time_window import hours_between, inclusive_day_count, parse_clock
from ..models.listing import PricingType, normalize_pricing_type
from ..repositories.factory import RepositoryFactory
from .base import BaseService

CENT = Decimal("0.01")
HOURS_PER_DAY = Decimal(24)
DEFAULT_DISCOUNT_MIN_DAYS = 2

_CALCULABLE_TYPES = frozenset(
    {PricingType.HOURLY, PricingType.DAILY, PricingType.PER_EVENT, PricingType.FIXED}
)


@dataclass(frozen=True)
class PricingRequest:
    """Booking parameters that influence the price."""

    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    distance_km: Optional[float] = None
    number_of_events: Optional[int] = None


@dataclass(frozen=True)
class PriceBreakdown:
    booking_price: Decimal
    extratime_cost: Decimal
    security_fee: Decimal
    km_charge: Decimal
    subtotal: Decimal
    platform_fee: Decimal
    platform_fee_percent: Decimal
    total_price: Decimal
    discount_amount: Decimal
    daily_hours: float
    total_hours: float
    diff_days: int
    is_multi_day: bool
    daily_rate: Optional[int] = None
    pricing_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = float(value)
        return data


@dataclass(frozen=True)
class PaymentPlan:
    escrow_enabled: bool
    upfront_fee_percent: Decimal
    upfront_amount: Decimal
    remaining_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "escrow_enabled": self.escrow_enabled,
            "upfront_fee_percent": float(self.upfront_fee_percent),
            "upfront_amount": float(self.upfront_amount),
            "remaining_amount": float(self.remaining_amount),
        }


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _round_to_int(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _invalid_pricing(field: str, value: Any) -> ValidationException:
    return ValidationException(
        "Listing pricing information is invalid.",
        code="INVALID_PRICING",
        details={"field": field, "value": value},
    )


def _money_field(pricing: Mapping[str, Any], field: str, *, required: bool = False) -> Decimal:
    raw = pricing.get(field)
    if raw is None or raw == "":
        if required:
            raise _invalid_pricing(field, raw)
        return Decimal("0")
    if isinstance(raw, bool):
        raise _invalid_pricing(field, raw)
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise _invalid_pricing(field, raw)
    if not value.is_finite() or value < 0 or (required and value == 0):
        raise _invalid_pricing(field, raw)
    return value


class PricingService(BaseService):
    """
    Compute booking prices from a listing's pricing model.

    The platform fee rate is injected through ``PricingConfig`` so the
    calculator never reads global settings mid-calculation.
    """

    def __init__(self, db: Session, pricing_config: Optional[PricingConfig] = None) -> None:
        super().__init__(db)
        self.pricing_config = pricing_config or settings.pricing_config()
        self.listing_repository = RepositoryFactory.create_listing_repository(db)

    def calculate_price(
        self, pricing: Optional[Mapping[str, Any]], request: PricingRequest
    ) -> PriceBreakdown:
        pricing = pricing or {}
        raw_type = pricing.get("type")
        pricing_type = normalize_pricing_type(raw_type)
        if pricing_type is None or pricing_type not in _CALCULABLE_TYPES:
            raise ValidationException(
                "Unsupported pricing type.",
                code="UNSUPPORTED_PRICING_TYPE",
                details={"type": raw_type},
            )
        amount = _money_field(pricing, "amount", required=True)

        if request.end_date < request.start_date:
            raise ValidationException(
                "End date must be on or after start date.",
                code="INVALID_DATE_RANGE",
                details={
                    "start_date": request.start_date.isoformat(),
                    "end_date": request.end_date.isoformat(),
                },
            )
        if bool(request.start_time) != bool(request.end_time):
            raise ValidationException(
                "Start time and end time must be provided together.",
                code="INCOMPLETE_TIME_RANGE",
            )
        if request.start_time and parse_clock(request.start_time) == parse_clock(request.end_time):
            raise ValidationException(
                "End time must differ from start time.",
                code="INVALID_TIME_RANGE",
                details={"start_time": request.start_time, "end_time": request.end_time},
            )

        diff_days = inclusive_day_count(request.start_date, request.end_date)
        is_multi_day = diff_days > 1

        if request.start_time and request.end_time:
            daily_hours = Decimal(str(hours_between(request.start_time, request.end_time)))
            total_hours = daily_hours * diff_days if is_multi_day else daily_hours
        else:
            daily_hours = HOURS_PER_DAY
            total_hours = HOURS_PER_DAY * diff_days

        booking_price = self._base_price(pricing_type, amount, total_hours, diff_days, request)
        discount = self._multi_day_discount(pricing, booking_price, diff_days, is_multi_day)
        booking_price = round_money(booking_price - discount)

        extratime_cost = round_money(_money_field(pricing, "extratime_cost"))
        security_fee = round_money(_money_field(pricing, "security_fee"))
        km_charge = self._distance_charge(pricing, request.distance_km)

        subtotal = booking_price + extratime_cost + security_fee + km_charge
        fee_rate = self.pricing_config.platform_fee_rate
        platform_fee = round_money(subtotal * fee_rate)
        total_price = round_money(subtotal + platform_fee)

        daily_rate = _round_to_int(booking_price / diff_days) if is_multi_day else None

        return PriceBreakdown(
            booking_price=booking_price,
            extratime_cost=extratime_cost,
            security_fee=security_fee,
            km_charge=km_charge,
            subtotal=round_money(subtotal),
            platform_fee=platform_fee,
            platform_fee_percent=(fee_rate * 100).normalize(),
            total_price=total_price,
            discount_amount=round_money(discount),
            daily_hours=float(daily_hours),
            total_hours=float(total_hours),
            diff_days=diff_days,
            is_multi_day=is_multi_day,
            daily_rate=daily_rate,
            pricing_type=pricing_type.value,
        )

    @BaseService.measure_operation("pricing.quote")
    def quote_for_listing(self, listing_id: str, request: PricingRequest) -> PriceBreakdown:
        listing = self.listing_repository.get_by_id(listing_id)
        if listing is None:
            raise NotFoundException(
                "Listing not found", code="LISTING_NOT_FOUND", details={"listing_id": listing_id}
            )
        return self.calculate_price(listing.pricing, request)

    @staticmethod
    def payment_plan(
        total_price: Decimal, escrow_enabled: bool, upfront_fee_percent: float = 0.0
    ) -> PaymentPlan:
        """Split the total into the upfront part and the remainder."""
        percent = Decimal(str(upfront_fee_percent or 0))
        if escrow_enabled:
            upfront = round_money(total_price * percent / 100)
        else:
            upfront = round_money(total_price)
        return PaymentPlan(
            escrow_enabled=escrow_enabled,
            upfront_fee_percent=percent,
            upfront_amount=upfront,
            remaining_amount=round_money(total_price - upfront),
        )

    @staticmethod
    def _base_price(
        pricing_type: PricingType,
        amount: Decimal,
        total_hours: Decimal,
        diff_days: int,
        request: PricingRequest,
    ) -> Decimal:
        if pricing_type == PricingType.HOURLY:
            return amount * total_hours
        if pricing_type == PricingType.DAILY:
            return amount * diff_days
        if pricing_type == PricingType.PER_EVENT:
            return amount * max(1, int(request.number_of_events or 0))
        return amount

    @staticmethod
    def _multi_day_discount(
        pricing: Mapping[str, Any], booking_price: Decimal, diff_days: int, is_multi_day: bool
    ) -> Decimal:
        rule = pricing.get("multi_day_discount") or {}
        if not is_multi_day or not isinstance(rule, Mapping):
            return Decimal("0")
        try:
            percent = Decimal(str(rule.get("percent") or 0))
            min_days = int(rule.get("min_days") or DEFAULT_DISCOUNT_MIN_DAYS)
        except (InvalidOperation, ValueError, TypeError):
            raise _invalid_pricing("multi_day_discount", rule)
        if percent <= 0 or diff_days < min_days:
            return Decimal("0")
        return booking_price * percent / 100

    @staticmethod
    def _distance_charge(pricing: Mapping[str, Any], distance_km: Optional[float]) -> Decimal:
        price_per_km = _money_field(pricing, "price_per_km")
        if price_per_km <= 0:
            return Decimal("0.00")
        if distance_km is None or distance_km <= 0:
            raise ValidationException(
                "Distance (km) is required for this listing.",
                code="DISTANCE_REQUIRED",
                details={"price_per_km": float(price_per_km)},
            )
        return round_money(price_per_km * Decimal(str(distance_km)))


__all__ = ["PaymentPlan", "PriceBreakdown", "PricingRequest", "PricingService", "round_money"]
