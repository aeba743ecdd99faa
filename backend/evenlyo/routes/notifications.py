# backend/evenlyo/routes/notifications.py
"""Notification inbox routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ..api.dependencies import get_current_actor, get_notification_service
from ..principal import Actor
from ..schemas.base_responses import SuccessResponse
from ..services.notification_service import NotificationService

router = APIRouter(tags=["notifications"])


@router.get("", response_model=SuccessResponse)
def list_notifications(
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=50),
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> SuccessResponse:
    """List notifications for the current user."""
    result = service.get_notifications(actor.id, unread_only, page, per_page)
    data: Dict[str, Any] = {
        "items": [item.to_dict() for item in result["items"]],
        "total": result["total"],
        "unread_count": result["unread"],
    }
    return SuccessResponse(data=data)


@router.get("/unread-count", response_model=SuccessResponse)
def get_unread_count(
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> SuccessResponse:
    return SuccessResponse(data={"unread_count": service.unread_count(actor.id)})


@router.patch("/read-all", response_model=SuccessResponse)
def mark_all_notifications_read(
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> SuccessResponse:
    """Mark all notifications as read."""
    count = service.mark_all_as_read(actor.id)
    return SuccessResponse(message=f"Marked {count} notifications as read", data={"updated": count})


@router.patch("/{notification_id}/read", response_model=SuccessResponse)
def mark_notification_read(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> SuccessResponse:
    """Mark a notification as read."""
    notification = service.mark_as_read(notification_id, actor.id)
    return SuccessResponse(message="Notification marked as read", data=notification.to_dict())
