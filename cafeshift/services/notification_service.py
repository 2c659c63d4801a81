from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from fastapi import HTTPException, status
import logging

from cafeshift.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


def create_notification(
    db: AsyncSession,
    user_id: UUID,
    type: NotificationType,
    title: str,
    message: str,
    data: Optional[dict] = None,
) -> Notification:
    """
    Stage a notification on the session.

    Does not commit: the caller commits it together with the state change
    the notification reports.
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=data,
        is_read=False,
    )
    db.add(notification)
    return notification


async def get_user_notifications(
    db: AsyncSession,
    user_id: UUID,
    unread_only: bool = False,
) -> Tuple[List[Notification], int]:
    """Return (notifications newest first, unread count)."""
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)
    result = await db.execute(query.order_by(Notification.created_at.desc()))
    notifications = list(result.scalars().all())

    unread_result = await db.execute(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read == False,
        )
    )
    return notifications, unread_result.scalar() or 0


async def _get_owned_notification(db: AsyncSession, notification_id: UUID, user_id: UUID) -> Notification:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return notification


async def mark_notification_read(
    db: AsyncSession,
    notification_id: UUID,
    user_id: UUID,
) -> Notification:
    notification = await _get_owned_notification(db, notification_id, user_id)
    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification


async def mark_all_notifications_read(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount or 0


async def delete_notification(
    db: AsyncSession,
    notification_id: UUID,
    user_id: UUID,
) -> None:
    notification = await _get_owned_notification(db, notification_id, user_id)
    await db.delete(notification)
    await db.commit()
    logger.info(f"Notification {notification_id} deleted by user {user_id}")
