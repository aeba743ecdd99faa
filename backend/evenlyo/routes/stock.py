# backend/evenlyo/routes/stock.py
"""
Stock routes

Endpoints:
    POST /{listing_id}/movements - Record stock in/out, check in or missing items
    GET /{listing_id}/logs - Stock movement log
    GET /{listing_id}/summary - Current quantity and totals per movement type
"""

from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import get_current_actor, get_stock_service
from ..core.exceptions import DomainException
from ..principal import Actor
from ..schemas.base_responses import SuccessResponse
from ..schemas.stock import StockMovementRequest
from ..services.stock_service import StockService

router = APIRouter(tags=["stock"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "/{listing_id}/movements", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED
)
def record_movement(
    listing_id: str,
    request: StockMovementRequest,
    actor: Actor = Depends(get_current_actor),
    stock_service: StockService = Depends(get_stock_service),
) -> SuccessResponse:
    try:
        log = stock_service.record_movement(actor, listing_id, request)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message="Stock updated successfully", data=log.to_dict())


@router.get("/{listing_id}/logs", response_model=SuccessResponse)
def list_logs(
    listing_id: str,
    movement_type: Optional[str] = Query(None, alias="type"),
    actor: Actor = Depends(get_current_actor),
    stock_service: StockService = Depends(get_stock_service),
) -> SuccessResponse:
    try:
        logs = stock_service.list_logs(actor, listing_id, movement_type)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=[log.to_dict() for log in logs])


@router.get("/{listing_id}/summary", response_model=SuccessResponse)
def stock_summary(
    listing_id: str,
    actor: Actor = Depends(get_current_actor),
    stock_service: StockService = Depends(get_stock_service),
) -> SuccessResponse:
    try:
        summary = stock_service.stock_summary(actor, listing_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(data=summary)
