from typing import Optional, List, Dict
from uuid import UUID
from datetime import date, datetime, timedelta
from decimal import Decimal
from collections import defaultdict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, update
from fastapi import HTTPException, status
import logging

from cafeshift.core.hashing import hash_user_record
from cafeshift.core.query_builder import get_paginated_results, build_branch_filtered_query, filter_by_datetime_range
from cafeshift.core.security import get_password_hash, normalize_email
from cafeshift.models.payroll import PayrollEntry
from cafeshift.models.shift import Shift, ShiftStatus
from cafeshift.models.user import User
from cafeshift.schemas.user import EmployeeCreate, EmployeeUpdate
from cafeshift.services.payroll_service import hours_between, compute_shift_hours
from cafeshift.services.timezone_service import (
    get_branch_timezone,
    get_current_month_utc_range,
    convert_to_branch_timezone,
    get_utc_range_for_day,
)

logger = logging.getLogger(__name__)

MAX_RATING = 5.0
MISSED_SHIFT_PENALTY = 2.0


async def get_user_by_id(
    db: AsyncSession,
    user_id: UUID,
    branch_id: UUID,
) -> Optional[User]:
    """Get user by ID scoped to branch."""
    result = await db.execute(
        select(User).where(
            and_(User.id == user_id, User.branch_id == branch_id)
        )
    )
    return result.scalar_one_or_none()


async def get_employee(db: AsyncSession, user_id: UUID, branch_id: UUID) -> User:
    user = await get_user_by_id(db, user_id, branch_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        )
    return user


async def list_employees(
    db: AsyncSession,
    branch_id: UUID,
    is_active: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[List[User], int]:
    """List users of a branch."""
    query = build_branch_filtered_query(
        User,
        branch_id,
        additional_filters={"is_active": is_active},
    )
    return await get_paginated_results(
        db, query, skip=skip, limit=limit, order_by=[User.last_name, User.first_name]
    )


async def _ensure_unique(db: AsyncSession, username: Optional[str], email: Optional[str], exclude_id: Optional[UUID] = None):
    conditions = []
    if username:
        conditions.append(User.username == username)
    if email:
        conditions.append(User.email == email)
    if not conditions:
        return

    query = select(User).where(or_(*conditions))
    if exclude_id:
        query = query.where(User.id != exclude_id)
    existing = (await db.execute(query.limit(1))).scalar_one_or_none()
    if existing:
        field = "Username" if username and existing.username == username else "Email"
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field} already exists",
        )


async def create_employee(
    db: AsyncSession,
    branch_id: UUID,
    data: EmployeeCreate,
) -> User:
    """Create a user in the manager's branch with a record hash."""
    username = data.username.strip()
    email = normalize_email(data.email)
    await _ensure_unique(db, username, email)

    user = User(
        username=username,
        password_hash=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        email=email,
        role=data.role,
        position=data.position,
        hourly_rate=data.hourly_rate,
        branch_id=branch_id,
        is_active=True,
        blockchain_verified=True,
        blockchain_hash=hash_user_record(username, data.first_name, data.last_name, email),
        verified_at=datetime.utcnow(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Employee created: {user.username} ({user.id}) in branch {branch_id}")
    return user


async def update_employee(
    db: AsyncSession,
    user_id: UUID,
    branch_id: UUID,
    data: EmployeeUpdate,
) -> User:
    user = await get_employee(db, user_id, branch_id)
    update_data = data.model_dump(exclude_unset=True)

    if "email" in update_data and update_data["email"] is not None:
        update_data["email"] = normalize_email(update_data["email"])
        await _ensure_unique(db, None, update_data["email"], exclude_id=user.id)

    password = update_data.pop("password", None)
    if password:
        user.password_hash = get_password_hash(password)

    for field, value in update_data.items():
        if value is not None:
            setattr(user, field, value)

    # Identity fields changed: refresh the record hash
    if {"first_name", "last_name", "email"} & update_data.keys():
        user.blockchain_hash = hash_user_record(user.username, user.first_name, user.last_name, user.email)
        user.verified_at = datetime.utcnow()

    await db.commit()
    await db.refresh(user)
    return user


async def bulk_set_active(
    db: AsyncSession,
    branch_id: UUID,
    user_ids: List[UUID],
    is_active: bool,
) -> int:
    """Activate or deactivate users of the branch; ids outside it are ignored."""
    if not user_ids:
        return 0
    result = await db.execute(
        update(User)
        .where(User.id.in_(user_ids), User.branch_id == branch_id)
        .values(is_active=is_active)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    updated = result.rowcount or 0
    logger.info(f"Bulk {'activate' if is_active else 'deactivate'}: {updated} users in branch {branch_id}")
    return updated


def _scheduled_hours(shifts) -> Decimal:
    return sum((hours_between(s.start_time, s.end_time) for s in shifts), Decimal(0))


async def _branch_month_shifts(db: AsyncSession, branch_id: UUID) -> Dict[UUID, List[Shift]]:
    month_start, month_end = await get_current_month_utc_range(db, branch_id)
    result = await db.execute(
        select(Shift).where(
            Shift.branch_id == branch_id,
            Shift.start_time >= month_start,
            Shift.start_time < month_end,
        )
    )
    by_user: Dict[UUID, List[Shift]] = defaultdict(list)
    for shift in result.scalars().all():
        by_user[shift.user_id].append(shift)
    return by_user


def compute_rating(shifts) -> float:
    """0-5 rating: full marks for perfect attendance, minus up to 2 for missed shifts."""
    total = len(shifts)
    if total == 0:
        return MAX_RATING
    completed = sum(1 for s in shifts if s.status == ShiftStatus.COMPLETED)
    if completed == total:
        return MAX_RATING
    missed = sum(1 for s in shifts if s.status == ShiftStatus.MISSED)
    rating = MAX_RATING - (missed / total) * MISSED_SHIFT_PENALTY
    return max(0.0, min(MAX_RATING, rating))


async def get_employee_stats(db: AsyncSession, branch_id: UUID) -> dict:
    users = (await db.execute(select(User).where(User.branch_id == branch_id))).scalars().all()
    shifts_by_user = await _branch_month_shifts(db, branch_id)
    month_start, month_end = await get_current_month_utc_range(db, branch_id)

    total_hours = sum((_scheduled_hours(shifts) for shifts in shifts_by_user.values()), Decimal(0))

    payroll_result = await db.execute(
        select(func.coalesce(func.sum(PayrollEntry.gross_pay), 0))
        .join(User, PayrollEntry.user_id == User.id)
        .where(
            User.branch_id == branch_id,
            PayrollEntry.created_at >= month_start,
            PayrollEntry.created_at < month_end,
        )
    )
    total_payroll = Decimal(str(payroll_result.scalar() or 0))

    # Average completion score (0-5) across users who had shifts this month
    scores = []
    for user in users:
        shifts = shifts_by_user.get(user.id, [])
        if shifts:
            completed = sum(1 for s in shifts if s.status == ShiftStatus.COMPLETED)
            scores.append(completed / len(shifts) * MAX_RATING)
    average = round(sum(scores) / len(scores), 1) if scores else 0.0

    return {
        "total_employees": len(users),
        "active_employees": sum(1 for u in users if u.is_active),
        "total_hours_this_month": round(float(total_hours), 2),
        "total_payroll_this_month": round(float(total_payroll), 2),
        "average_performance": average,
    }


async def get_employee_performance(db: AsyncSession, branch_id: UUID) -> List[dict]:
    users = (
        await db.execute(
            select(User).where(User.branch_id == branch_id).order_by(User.last_name, User.first_name)
        )
    ).scalars().all()
    shifts_by_user = await _branch_month_shifts(db, branch_id)

    performance = []
    for user in users:
        shifts = shifts_by_user.get(user.id, [])
        performance.append({
            "employee_id": user.id,
            "employee_name": user.full_name,
            "rating": round(compute_rating(shifts), 1),
            "hours_this_month": round(float(_scheduled_hours(shifts)), 2),
            "shifts_this_month": len(shifts),
        })
    return performance


async def get_hours_report(
    db: AsyncSession,
    branch_id: UUID,
    start_date: date,
    end_date: date,
    user_id: Optional[UUID] = None,
) -> dict:
    """
    Worked hours per active employee for local dates [start_date, end_date].

    Hours prefer clocked times over scheduled times; estimated pay is
    hours x hourly rate without overtime or deductions.
    """
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be before or equal to end_date",
        )

    tz_name = await get_branch_timezone(db, branch_id)
    range_start, _ = get_utc_range_for_day(tz_name, start_date)
    _, range_end = get_utc_range_for_day(tz_name, end_date)

    user_query = select(User).where(User.branch_id == branch_id, User.is_active == True)
    if user_id:
        user_query = user_query.where(User.id == user_id)
    users = (await db.execute(user_query.order_by(User.last_name, User.first_name))).scalars().all()

    shift_query = filter_by_datetime_range(
        select(Shift).where(Shift.branch_id == branch_id),
        Shift,
        "start_time",
        range_start,
        range_end - timedelta(microseconds=1),
    )
    shifts_by_user: Dict[UUID, List[Shift]] = defaultdict(list)
    for shift in (await db.execute(shift_query.order_by(Shift.start_time))).scalars().all():
        shifts_by_user[shift.user_id].append(shift)

    employees = []
    summary_hours = Decimal(0)
    summary_pay = Decimal(0)
    summary_shifts = 0

    for user in users:
        shifts = shifts_by_user.get(user.id, [])
        by_day: Dict[date, Decimal] = defaultdict(Decimal)
        for shift in shifts:
            local_day = convert_to_branch_timezone(shift.start_time, tz_name).date()
            by_day[local_day] += compute_shift_hours(shift)

        hours = sum(by_day.values(), Decimal(0))
        pay = hours * Decimal(user.hourly_rate)
        employees.append({
            "employee_id": user.id,
            "employee_name": user.full_name,
            "position": user.position,
            "hourly_rate": float(user.hourly_rate),
            "total_hours": round(float(hours), 2),
            "total_shifts": len(shifts),
            "estimated_pay": round(float(pay), 2),
            "hours_by_day": [
                {"date": day, "hours": round(float(h), 2)} for day, h in sorted(by_day.items())
            ],
        })
        summary_hours += hours
        summary_pay += pay
        summary_shifts += len(shifts)

    return {
        "employees": employees,
        "summary": {
            "total_hours": round(float(summary_hours), 2),
            "total_pay": round(float(summary_pay), 2),
            "total_shifts": summary_shifts,
            "employee_count": len(employees),
        },
    }
