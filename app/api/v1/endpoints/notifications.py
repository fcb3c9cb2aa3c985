# app/api/v1/endpoints/notifications.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies import require_login
from app.db.session import get_db
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import (
    MessageResponse,
    NotificationListResponse,
    NotificationResolve,
    NotificationResponse,
)
from app.services import matching_service, notification_service

router = APIRouter()


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        type=n.notification_type,
        title=n.title,
        message=n.message or "",
        payload=n.payload,
        is_read=n.is_read,
        action_status=n.action_status,
        created_at=n.created_at,
    )


@router.get(
    "/",
    response_model=NotificationListResponse,
    summary="List own notifications",
)
def list_notifications(
    unread_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    notifications, unread_count, total = notification_service.list_for_user(
        db, current_user, unread_only=unread_only, skip=skip, limit=limit
    )
    return NotificationListResponse(
        notifications=[_to_response(n) for n in notifications],
        unread_count=unread_count,
        total=total,
    )


@router.patch(
    "/read-all",
    response_model=MessageResponse,
    summary="Mark all notifications as read",
)
def mark_all_read(
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    notification_service.mark_all_read(db, current_user)
    return MessageResponse(message="All notifications marked as read.")


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark notification as read",
)
def mark_read(
    notification_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return _to_response(notification_service.mark_read(db, current_user, notification_id))


@router.post(
    "/{notification_id}/resolve",
    response_model=NotificationResponse,
    summary="Act on a notification (accept | reject | dismiss | apply)",
)
def resolve_notification(
    notification_id: UUID,
    payload: NotificationResolve,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    n = matching_service.resolve_notification(db, current_user, notification_id, payload.decision)
    return _to_response(n)
