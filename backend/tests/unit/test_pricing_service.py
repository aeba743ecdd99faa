"""Unit tests for PricingService price calculations."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from evenlyo.core.config import PricingConfig
from evenlyo.core.exceptions import ValidationException
from evenlyo.services.pricing_service import PricingRequest, PricingService, round_money

FEB_1 = date(2024, 2, 1)
FEB_2 = date(2024, 2, 2)
FEB_3 = date(2024, 2, 3)


def _request(start=FEB_1, end=FEB_1, **kwargs) -> PricingRequest:
    return PricingRequest(start_date=start, end_date=end, **kwargs)


class TestBasePrice:
    def test_daily_price_multiplies_inclusive_days(self, pricing_service):
        breakdown = pricing_service.calculate_price(
            {"type": "daily", "amount": 100}, _request(FEB_1, FEB_3)
        )
        assert breakdown.booking_price == Decimal("300.00")
        assert breakdown.diff_days == 3
        assert breakdown.is_multi_day is True
        assert breakdown.daily_rate == 100

    def test_fixed_price_ignores_duration(self, pricing_service):
        breakdown = pricing_service.calculate_price(
            {"type": "fixed", "amount": 250}, _request(FEB_1, FEB_3)
        )
        assert breakdown.booking_price == Decimal("250.00")

    def test_hourly_single_day_uses_window(self, pricing_service):
        breakdown = pricing_service.calculate_price(
            {"type": "hourly", "amount": 50},
            _request(start_time="10:00", end_time="14:00"),
        )
        assert breakdown.total_hours == 4.0
        assert breakdown.booking_price == Decimal("200.00")
        assert breakdown.daily_rate is None

    def test_hourly_multi_day_repeats_daily_window(self, pricing_service):
        breakdown = pricing_service.calculate_price(
            {"type": "hourly", "amount": 50},
            _request(FEB_1, FEB_2, start_time="10:00", end_time="14:00"),
        )
        assert breakdown.daily_hours == 4.0
        assert breakdown.total_hours == 8.0
        assert breakdown.booking_price == Decimal("400.00")

    def test_hourly_without_times_counts_full_days(self, pricing_service):
        breakdown = pricing_service.calculate_price({"type": "hourly", "amount": 10}, _request())
        assert breakdown.total_hours == 24.0
        assert breakdown.booking_price == Decimal("240.00")

    def test_per_event_uses_number_of_events(self, pricing_service):
        breakdown = pricing_service.calculate_price(
            {"type": "per event", "amount": 80}, _request(number_of_events=3)
        )
        assert breakdown.pricing_type == "per_event"
        assert breakdown.booking_price == Decimal("240.00")


class TestMultiDayDiscount:
    PRICING = {"type": "daily", "amount": 100, "multi_day_discount": {"percent": 10, "min_days": 3}}

    def test_discount_applies_at_min_days(self, pricing_service):
        breakdown = pricing_service.calculate_price(self.PRICING, _request(FEB_1, FEB_3))
        assert breakdown.discount_amount == Decimal("30.00")
        assert breakdown.booking_price == Decimal("270.00")

    def test_no_discount_below_min_days(self, pricing_service):
        breakdown = pricing_service.calculate_price(self.PRICING, _request(FEB_1, FEB_2))
        assert breakdown.discount_amount == Decimal("0.00")
        assert breakdown.booking_price == Decimal("200.00")


class TestFeesAndTotals:
    def test_fees_and_platform_fee(self, pricing_service):
        breakdown = pricing_service.calculate_price(
            {
                "type": "daily",
                "amount": 100,
                "security_fee": 50,
                "extratime_cost": 25,
                "price_per_km": 2,
            },
            _request(distance_km=10),
        )
        assert breakdown.km_charge == Decimal("20.00")
        assert breakdown.subtotal == Decimal("195.00")
        assert breakdown.platform_fee == Decimal("3.90")
        assert breakdown.total_price == Decimal("198.90")
        assert breakdown.platform_fee_percent == Decimal("2")

    def test_fee_rate_comes_from_config(self, db):
        service = PricingService(db, PricingConfig(platform_fee_rate=Decimal("0.10")))
        breakdown = service.calculate_price({"type": "fixed", "amount": 99.95}, _request())
        assert breakdown.platform_fee == Decimal("10.00")
        assert breakdown.total_price == Decimal("109.95")

    def test_distance_required_when_priced_per_km(self, pricing_service):
        with pytest.raises(ValidationException) as exc:
            pricing_service.calculate_price(
                {"type": "fixed", "amount": 100, "price_per_km": 1}, _request()
            )
        assert exc.value.code == "DISTANCE_REQUIRED"

    def test_to_dict_is_json_friendly(self, pricing_service):
        data = pricing_service.calculate_price({"type": "fixed", "amount": 10}, _request()).to_dict()
        assert isinstance(data["total_price"], float)
        assert data["total_price"] == 10.2


class TestInvalidPricing:
    @pytest.mark.parametrize("pricing_type", ["quote", "package", "barter", None])
    def test_unsupported_types(self, pricing_service, pricing_type):
        with pytest.raises(ValidationException) as exc:
            pricing_service.calculate_price({"type": pricing_type, "amount": 10}, _request())
        assert exc.value.code == "UNSUPPORTED_PRICING_TYPE"

    @pytest.mark.parametrize("amount", [None, 0, -5, "abc", True])
    def test_invalid_amount(self, pricing_service, amount):
        with pytest.raises(ValidationException) as exc:
            pricing_service.calculate_price({"type": "daily", "amount": amount}, _request())
        assert exc.value.code == "INVALID_PRICING"

    def test_end_before_start(self, pricing_service):
        with pytest.raises(ValidationException) as exc:
            pricing_service.calculate_price({"type": "daily", "amount": 10}, _request(FEB_2, FEB_1))
        assert exc.value.code == "INVALID_DATE_RANGE"

    def test_half_time_range(self, pricing_service):
        with pytest.raises(ValidationException):
            pricing_service.calculate_price(
                {"type": "hourly", "amount": 10}, _request(start_time="10:00")
            )

    def test_zero_length_window(self, pricing_service):
        with pytest.raises(ValidationException) as exc:
            pricing_service.calculate_price(
                {"type": "hourly", "amount": 50},
                _request(start_time="10:00", end_time="10:00"),
            )
        assert exc.value.code == "INVALID_TIME_RANGE"


class TestPaymentPlan:
    def test_escrow_splits_total(self):
        plan = PricingService.payment_plan(Decimal("306.00"), True, 30)
        assert plan.upfront_amount == Decimal("91.80")
        assert plan.remaining_amount == Decimal("214.20")

    def test_without_escrow_everything_is_upfront(self):
        plan = PricingService.payment_plan(Decimal("306.00"), False, 30)
        assert plan.upfront_amount == Decimal("306.00")
        assert plan.remaining_amount == Decimal("0.00")


def test_round_money_half_up():
    assert round_money(Decimal("0.125")) == Decimal("0.13")
