from pydantic import ValidationError
import pytest

from evenlyo.core.exceptions import NotFoundException, ValidationException
from evenlyo.schemas.stock import StockMovementRequest
from evenlyo.services.stock_service import StockService


@pytest.fixture
def stock_service(db):
    return StockService(db)


def movement(kind: str, quantity: int, note=None) -> StockMovementRequest:
    return StockMovementRequest(type=kind, quantity=quantity, note=note)


def test_movements_adjust_quantity(db, stock_service, vendor_actor, listing):
    log = stock_service.record_movement(vendor_actor, listing.id, movement("stockin", 12, "Delivery"))
    assert log.resulting_quantity == 12

    stock_service.record_movement(vendor_actor, listing.id, movement("checkout", 3))
    stock_service.record_movement(vendor_actor, listing.id, movement("missing", 2))
    log = stock_service.record_movement(vendor_actor, listing.id, movement("checkin", 1))

    assert log.resulting_quantity == 8
    db.refresh(listing)
    assert listing.quantity == 8

    summary = stock_service.stock_summary(vendor_actor, listing.id)
    assert summary["current_quantity"] == 8
    assert summary["totals"] == {"stockin": 12, "checkin": 1, "checkout": 3, "missing": 2}


def test_checkout_beyond_stock_rejected(db, stock_service, vendor_actor, listing):
    with pytest.raises(ValidationException) as exc:
        stock_service.record_movement(vendor_actor, listing.id, movement("checkout", 6))
    assert exc.value.message == "Not enough stock."
    db.refresh(listing)
    assert listing.quantity == 5
    assert stock_service.list_logs(vendor_actor, listing.id) == []


def test_logs_filter_by_type(stock_service, vendor_actor, listing):
    stock_service.record_movement(vendor_actor, listing.id, movement("checkout", 1))
    stock_service.record_movement(vendor_actor, listing.id, movement("checkin", 1))

    logs = stock_service.list_logs(vendor_actor, listing.id, "checkout")
    assert [log.type for log in logs] == ["checkout"]

    with pytest.raises(ValidationException) as exc:
        stock_service.list_logs(vendor_actor, listing.id, "teleported")
    assert exc.value.code == "INVALID_MOVEMENT_TYPE"


def test_other_users_cannot_touch_stock(stock_service, client_actor, admin_actor, listing):
    with pytest.raises(NotFoundException):
        stock_service.record_movement(client_actor, listing.id, movement("checkin", 1))
    # admins can
    log = stock_service.record_movement(admin_actor, listing.id, movement("checkin", 1))
    assert log.resulting_quantity == 6


def test_zero_quantity_only_for_stockin():
    assert movement("stockin", 0).quantity == 0
    with pytest.raises(ValidationError):
        movement("checkout", 0)
