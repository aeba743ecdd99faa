import pytest

from evenlyo.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from evenlyo.schemas.listing import ListingCreateRequest, ListingUpdateRequest, PricingIn
from evenlyo.services.listing_service import ListingService


@pytest.fixture
def listing_service(db):
    return ListingService(db)


class TestNormalizePricing:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Per Hour", "hourly"),
            ("day", "daily"),
            ("per event", "per_event"),
            ("one-time", "fixed"),
        ],
    )
    def test_aliases(self, raw, expected):
        document = ListingService.normalize_pricing(PricingIn(type=raw, amount=25))
        assert document["type"] == expected
        assert document["amount"] == 25

    def test_quote_needs_no_amount(self):
        assert ListingService.normalize_pricing(PricingIn(type="quote"))["type"] == "quote"

    def test_unknown_type(self):
        with pytest.raises(ValidationException) as exc:
            ListingService.normalize_pricing(PricingIn(type="barter", amount=10))
        assert exc.value.code == "UNSUPPORTED_PRICING_TYPE"

    @pytest.mark.parametrize("amount", [None, 0])
    def test_priced_types_need_amount(self, amount):
        with pytest.raises(ValidationException) as exc:
            ListingService.normalize_pricing(PricingIn(type="daily", amount=amount))
        assert exc.value.code == "INVALID_PRICING"


class TestListingWrites:
    def test_create_listing(self, listing_service, vendor_actor):
        request = ListingCreateRequest(
            title="Stage lights",
            pricing={"type": "Day", "amount": 80, "multi_day_discount": {"percent": 10}},
            availability={"available_days": ["Monday", "sat", "mon"]},
            quantity=4,
        )
        listing = listing_service.create_listing(vendor_actor, request)

        assert listing.vendor_id == vendor_actor.id
        assert listing.title == {"en": "Stage lights", "nl": "Stage lights"}
        assert listing.pricing["type"] == "daily"
        assert listing.pricing["multi_day_discount"] == {"percent": 10, "min_days": 2}
        assert listing.availability["available_days"] == ["mon", "sat"]
        assert listing.is_bookable

    def test_clients_cannot_create(self, listing_service, client_actor):
        request = ListingCreateRequest(title="Tent", pricing={"type": "fixed", "amount": 10})
        with pytest.raises(ForbiddenException):
            listing_service.create_listing(client_actor, request)

    def test_unknown_sub_category(self, listing_service, vendor_actor):
        request = ListingCreateRequest(
            title="Tent", pricing={"type": "fixed", "amount": 10}, sub_category_id="missing"
        )
        with pytest.raises(ValidationException) as exc:
            listing_service.create_listing(vendor_actor, request)
        assert exc.value.code == "SUB_CATEGORY_NOT_FOUND"

    def test_update_listing(self, listing_service, vendor_actor, listing):
        updated = listing_service.update_listing(
            vendor_actor,
            listing.id,
            ListingUpdateRequest(quantity=9, pricing={"type": "hourly", "amount": 15}),
        )
        assert updated.quantity == 9
        assert updated.pricing == {
            "type": "hourly",
            "amount": 15,
            "extratime_cost": 0,
            "security_fee": 0,
            "price_per_km": 0,
        }
        assert updated.title["nl"] == "Ronde tafel"

    def test_title_cannot_be_cleared(self, listing_service, vendor_actor, listing):
        with pytest.raises(ValidationException) as exc:
            listing_service.update_listing(vendor_actor, listing.id, ListingUpdateRequest(title=None))
        assert exc.value.code == "TITLE_REQUIRED"

    def test_update_by_other_user(self, listing_service, client_actor, listing):
        with pytest.raises(NotFoundException):
            listing_service.update_listing(client_actor, listing.id, ListingUpdateRequest(quantity=1))


def test_active_listings_exclude_inactive(listing_service, make_listing):
    visible = make_listing()
    make_listing(status="inactive")
    make_listing(is_active=False)

    items, total = listing_service.list_active_listings()
    assert total == 1
    assert items[0].id == visible.id


def test_vendor_listings(listing_service, vendor_actor, client_actor, make_listing):
    make_listing()
    make_listing(status="draft")
    items, total = listing_service.list_vendor_listings(vendor_actor)
    assert total == 2
    _, drafts = listing_service.list_vendor_listings(vendor_actor, status="draft")
    assert drafts == 1
    with pytest.raises(ForbiddenException):
        listing_service.list_vendor_listings(client_actor)
