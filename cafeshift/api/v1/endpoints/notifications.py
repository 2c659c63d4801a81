from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.common import MessageResponse
from cafeshift.schemas.notification import NotificationResponse, NotificationEnvelope, NotificationListResponse
from cafeshift.services.notification_service import (
    get_user_notifications,
    mark_notification_read,
    mark_all_notifications_read,
    delete_notification,
)

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
@handle_endpoint_errors(operation_name="list_notifications")
async def list_notifications_endpoint(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notifications, unread = await get_user_notifications(db, current_user.id, unread_only)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread,
    )


@router.put("/read-all", response_model=MessageResponse)
@handle_endpoint_errors(operation_name="mark_all_notifications_read")
async def read_all_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await mark_all_notifications_read(db, current_user.id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=NotificationEnvelope)
@handle_endpoint_errors(operation_name="mark_notification_read")
async def read_endpoint(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await mark_notification_read(
        db, parse_uuid(notification_id, "Notification ID"), current_user.id
    )
    return NotificationEnvelope(notification=NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=MessageResponse)
@handle_endpoint_errors(operation_name="delete_notification")
async def delete_endpoint(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_notification(db, parse_uuid(notification_id, "Notification ID"), current_user.id)
    return MessageResponse(message="Notification deleted successfully")
