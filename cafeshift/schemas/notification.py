from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from cafeshift.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    is_read: bool
    data: Optional[dict] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationEnvelope(BaseModel):
    notification: NotificationResponse


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
