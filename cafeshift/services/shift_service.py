from typing import Optional, List, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func, delete
from fastapi import HTTPException, status
import logging

from cafeshift.core.query_builder import filter_by_datetime_range
from cafeshift.models.notification import NotificationType
from cafeshift.models.shift import Shift, ShiftStatus, ShiftTrade
from cafeshift.models.user import User
from cafeshift.schemas.shift import ShiftCreate, ShiftUpdate
from cafeshift.services.notification_service import create_notification
from cafeshift.services.timezone_service import get_branch_timezone, format_time_for_branch

logger = logging.getLogger(__name__)


async def list_user_shifts(
    db: AsyncSession,
    user_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Shift]:
    """Shifts of one user whose scheduled start falls in [start, end]."""
    query = filter_by_datetime_range(
        select(Shift).where(Shift.user_id == user_id),
        Shift,
        "start_time",
        start,
        end,
    )
    result = await db.execute(query.order_by(Shift.start_time))
    return list(result.scalars().all())


async def list_branch_shifts(
    db: AsyncSession,
    branch_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Tuple[Shift, User]]:
    """Branch shifts of active users, with the user row."""
    query = (
        select(Shift, User)
        .join(User, Shift.user_id == User.id)
        .where(Shift.branch_id == branch_id, User.is_active == True)
    )
    query = filter_by_datetime_range(query, Shift, "start_time", start, end)
    result = await db.execute(query.order_by(Shift.start_time))
    return [(shift, user) for shift, user in result.all()]


async def get_branch_shift(
    db: AsyncSession,
    shift_id: UUID,
    branch_id: UUID,
) -> Shift:
    result = await db.execute(
        select(Shift).where(
            and_(
                Shift.id == shift_id,
                Shift.branch_id == branch_id,
            )
        )
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shift not found",
        )
    return shift


async def _get_branch_user(db: AsyncSession, user_id: UUID, branch_id: UUID) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id, User.branch_id == branch_id)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found in your branch",
        )
    return user


async def create_shift(
    db: AsyncSession,
    branch_id: UUID,
    data: ShiftCreate,
) -> Shift:
    await _get_branch_user(db, data.user_id, branch_id)

    shift = Shift(
        user_id=data.user_id,
        branch_id=branch_id,
        start_time=data.start_time,
        end_time=data.end_time,
        position=data.position,
        is_recurring=data.is_recurring,
        recurring_pattern=data.recurring_pattern,
        status=data.status,
    )
    db.add(shift)
    await db.commit()
    await db.refresh(shift)
    return shift


async def update_shift(
    db: AsyncSession,
    shift_id: UUID,
    branch_id: UUID,
    data: ShiftUpdate,
) -> Shift:
    shift = await get_branch_shift(db, shift_id, branch_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("user_id"):
        await _get_branch_user(db, update_data["user_id"], branch_id)

    new_start = update_data.get("start_time") or shift.start_time
    new_end = update_data.get("end_time") or shift.end_time
    if new_end <= new_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_time must be after start_time",
        )

    # An explicit null clears the stored actual time
    actual_start = update_data["actual_start_time"] if "actual_start_time" in update_data else shift.actual_start_time
    actual_end = update_data["actual_end_time"] if "actual_end_time" in update_data else shift.actual_end_time
    if actual_start and actual_end and actual_end <= actual_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="actual_end_time must be after actual_start_time",
        )

    for field, value in update_data.items():
        if value is not None or field in ("recurring_pattern", "actual_start_time", "actual_end_time"):
            setattr(shift, field, value)

    await db.commit()
    await db.refresh(shift)
    return shift


async def delete_shift(
    db: AsyncSession,
    shift_id: UUID,
    branch_id: UUID,
) -> None:
    """Delete a shift. Shifts with trade history are kept; cancel them instead."""
    shift = await get_branch_shift(db, shift_id, branch_id)

    trades = await db.execute(
        select(func.count()).select_from(ShiftTrade).where(ShiftTrade.shift_id == shift.id)
    )
    if (trades.scalar() or 0) > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Shift has trade requests and cannot be deleted; set its status to cancelled instead",
        )

    await db.execute(
        delete(Shift).where(
            and_(
                Shift.id == shift_id,
                Shift.branch_id == branch_id,
            )
        )
    )
    await db.commit()


async def clock_in(db: AsyncSession, shift_id: UUID, branch_id: UUID) -> Shift:
    """Manager clocks an employee in: actual start = now, status in-progress."""
    shift = await get_branch_shift(db, shift_id, branch_id)
    if shift.status != ShiftStatus.SCHEDULED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot clock in a shift that is {shift.status.value}",
        )

    now = datetime.utcnow()
    shift.actual_start_time = now
    shift.status = ShiftStatus.IN_PROGRESS

    tz_name = await get_branch_timezone(db, branch_id)
    create_notification(
        db,
        user_id=shift.user_id,
        type=NotificationType.SCHEDULE,
        title="Clocked In",
        message=f"You have been clocked in for your shift at {format_time_for_branch(now, tz_name)}",
        data={"shift_id": str(shift.id), "action": "clock-in"},
    )
    await db.commit()
    await db.refresh(shift)
    logger.info(f"Shift {shift.id} clocked in")
    return shift


async def clock_out(db: AsyncSession, shift_id: UUID, branch_id: UUID) -> Shift:
    """Manager clocks an employee out: actual end = now, status completed."""
    shift = await get_branch_shift(db, shift_id, branch_id)
    if shift.status != ShiftStatus.IN_PROGRESS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Shift is not in progress",
        )

    now = datetime.utcnow()
    shift.actual_end_time = now
    shift.status = ShiftStatus.COMPLETED

    tz_name = await get_branch_timezone(db, branch_id)
    create_notification(
        db,
        user_id=shift.user_id,
        type=NotificationType.SCHEDULE,
        title="Clocked Out",
        message=f"You have been clocked out from your shift at {format_time_for_branch(now, tz_name)}",
        data={"shift_id": str(shift.id), "action": "clock-out"},
    )
    await db.commit()
    await db.refresh(shift)
    logger.info(f"Shift {shift.id} clocked out")
    return shift
