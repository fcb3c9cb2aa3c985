# app/schemas/notification.py

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: str
    payload: Optional[Dict[str, Any]] = None
    is_read: bool
    action_status: str
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
    total: int


class NotificationResolve(BaseModel):
    decision: Literal["accept", "reject", "dismiss", "apply"]


class MessageResponse(BaseModel):
    message: str
