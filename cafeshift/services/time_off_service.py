from typing import Optional, List, Tuple
from uuid import UUID
from datetime import datetime
import math
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi import HTTPException, status
import logging

from cafeshift.core.dependencies import MANAGER_ROLES
from cafeshift.core.query_builder import filter_by_status
from cafeshift.models.approval import ApprovalType
from cafeshift.models.notification import NotificationType
from cafeshift.models.time_off import TimeOffRequest, TimeOffStatus, TimeOffType
from cafeshift.models.user import User
from cafeshift.schemas.time_off import TimeOffRequestCreate
from cafeshift.services.approval_service import create_approval, mark_linked_approval
from cafeshift.services.notification_service import create_notification
from cafeshift.services.timezone_service import (
    get_branch_timezone,
    local_today,
    get_utc_range_for_year,
    format_month_day,
    format_month_day_year,
)

logger = logging.getLogger(__name__)

# Yearly leave allowance in days
DEFAULT_ALLOWANCES = {
    TimeOffType.VACATION: 15,
    TimeOffType.SICK: 10,
    TimeOffType.PERSONAL: 5,
}

SECONDS_PER_DAY = 86400


def count_leave_days(start: datetime, end: datetime) -> int:
    """Days covered by a request, counting both ends."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY) + 1


def _date_range_label(start: datetime, end: datetime) -> str:
    return f"{format_month_day(start)} to {format_month_day_year(end)}"


async def create_time_off_request(
    db: AsyncSession,
    user: User,
    data: TimeOffRequestCreate,
) -> TimeOffRequest:
    """Create a pending request, its approval row, and notify the branch managers."""
    request = TimeOffRequest(
        user_id=user.id,
        start_date=data.start_date,
        end_date=data.end_date,
        type=data.type,
        reason=data.reason,
        status=TimeOffStatus.PENDING,
    )
    db.add(request)
    await db.flush()

    create_approval(
        db,
        type=ApprovalType.LEAVE_REQUEST,
        request_id=request.id,
        requested_by=user.id,
        request_data={
            "type": data.type.value,
            "start_date": data.start_date.isoformat(),
            "end_date": data.end_date.isoformat(),
            "reason": data.reason,
        },
    )

    result = await db.execute(
        select(User).where(
            User.branch_id == user.branch_id,
            User.role.in_(MANAGER_ROLES),
            User.is_active == True,
            User.id != user.id,
        )
    )
    for manager in result.scalars().all():
        create_notification(
            db,
            user_id=manager.id,
            type=NotificationType.SCHEDULE,
            title="New Time Off Request",
            message=(
                f"{user.full_name} has requested time off from "
                f"{_date_range_label(request.start_date, request.end_date)} ({data.type.value})"
            ),
            data={
                "request_id": str(request.id),
                "employee_id": str(user.id),
                "type": data.type.value,
                "start_date": request.start_date.isoformat(),
                "end_date": request.end_date.isoformat(),
            },
        )

    await db.commit()
    await db.refresh(request)
    logger.info(f"Time off request {request.id} created by {user.id}")
    return request


async def list_time_off_requests(
    db: AsyncSession,
    user: User,
    is_manager: bool,
    status_filter: Optional[TimeOffStatus] = None,
) -> List[Tuple[TimeOffRequest, User]]:
    """Managers see the whole branch; employees see their own requests."""
    query = select(TimeOffRequest, User).join(User, TimeOffRequest.user_id == User.id)
    if is_manager:
        query = query.where(User.branch_id == user.branch_id)
    else:
        query = query.where(TimeOffRequest.user_id == user.id)
    if status_filter:
        query = filter_by_status(query, TimeOffRequest, status_filter)

    result = await db.execute(query.order_by(TimeOffRequest.requested_at.desc()))
    return [(request, owner) for request, owner in result.all()]


async def decide_time_off_request(
    db: AsyncSession,
    request_id: UUID,
    manager: User,
    approved: bool,
    reason: Optional[str] = None,
) -> TimeOffRequest:
    """Approve or reject a pending request of the manager's branch."""
    result = await db.execute(
        select(TimeOffRequest)
        .join(User, TimeOffRequest.user_id == User.id)
        .where(TimeOffRequest.id == request_id, User.branch_id == manager.branch_id)
    )
    request = result.scalar_one_or_none()
    if not request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Time off request not found",
        )
    if request.status != TimeOffStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Time off request has already been {request.status.value}",
        )

    request.status = TimeOffStatus.APPROVED if approved else TimeOffStatus.REJECTED
    request.approved_by = manager.id
    request.approved_at = datetime.utcnow()

    await mark_linked_approval(db, ApprovalType.LEAVE_REQUEST, request.id, approved, manager.id, reason)

    outcome = "approved" if approved else "rejected"
    create_notification(
        db,
        user_id=request.user_id,
        type=NotificationType.SCHEDULE,
        title=f"Time Off Request {outcome.capitalize()}",
        message=(
            f"Your time off request from {_date_range_label(request.start_date, request.end_date)} "
            f"has been {outcome}"
        ),
        data={"request_id": str(request.id), "status": outcome},
    )

    await db.commit()
    await db.refresh(request)
    return request


async def get_time_off_balance(db: AsyncSession, user: User) -> dict:
    """Remaining days per leave type for the current year."""
    tz_name = await get_branch_timezone(db, user.branch_id)
    year_start, year_end = get_utc_range_for_year(tz_name, local_today(tz_name).year)

    result = await db.execute(
        select(TimeOffRequest).where(
            TimeOffRequest.user_id == user.id,
            TimeOffRequest.status == TimeOffStatus.APPROVED,
            TimeOffRequest.start_date >= year_start,
            TimeOffRequest.start_date < year_end,
        )
    )
    used = {leave_type: 0 for leave_type in DEFAULT_ALLOWANCES}
    for request in result.scalars().all():
        used[request.type] += count_leave_days(request.start_date, request.end_date)

    balance = {
        leave_type.value: allowance - used[leave_type]
        for leave_type, allowance in DEFAULT_ALLOWANCES.items()
    }
    balance["used"] = {leave_type.value: days for leave_type, days in used.items()}
    balance["allowance"] = {leave_type.value: days for leave_type, days in DEFAULT_ALLOWANCES.items()}
    return balance
