"""
Manager reports, dashboard figures and the employee's own performance view.

"Today" and "this month" are computed in the branch timezone.
"""
from typing import List, Dict
from uuid import UUID
from datetime import datetime, date, timedelta
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import logging

from cafeshift.models.payroll import PayrollEntry
from cafeshift.models.shift import Shift, ShiftStatus
from cafeshift.models.user import User
from cafeshift.services.payroll_service import hours_between
from cafeshift.services.timezone_service import (
    get_branch_timezone,
    get_current_month_utc_range,
    get_utc_range_for_day,
    get_utc_range_for_month,
    local_today,
    add_months,
    format_time_for_branch,
)

logger = logging.getLogger(__name__)

# Estimated sales per unit of labour cost
REVENUE_TO_LABOUR_RATIO = Decimal(3)
LATE_THRESHOLD = timedelta(minutes=15)
MONTHS_OF_HISTORY = 6


def _round(value: Decimal, places: int = 2) -> float:
    return round(float(value), places)


async def _branch_shifts_between(db: AsyncSession, branch_id: UUID, start: datetime, end: datetime) -> List[Shift]:
    result = await db.execute(
        select(Shift).where(
            Shift.branch_id == branch_id,
            Shift.start_time >= start,
            Shift.start_time < end,
        )
    )
    return list(result.scalars().all())


async def get_payroll_report(db: AsyncSession, branch_id: UUID) -> dict:
    """Gross pay of entries created this month."""
    month_start, month_end = await get_current_month_utc_range(db, branch_id)
    result = await db.execute(
        select(PayrollEntry.gross_pay)
        .join(User, PayrollEntry.user_id == User.id)
        .where(
            User.branch_id == branch_id,
            PayrollEntry.created_at >= month_start,
            PayrollEntry.created_at < month_end,
        )
    )
    total = sum((Decimal(value) for value in result.scalars().all()), Decimal(0))
    return {"total_payroll": _round(total)}


async def get_attendance_report(db: AsyncSession, branch_id: UUID) -> dict:
    """Scheduled hours this month."""
    month_start, month_end = await get_current_month_utc_range(db, branch_id)
    shifts = await _branch_shifts_between(db, branch_id, month_start, month_end)
    total = sum((hours_between(s.start_time, s.end_time) for s in shifts), Decimal(0))
    return {"total_hours": _round(total)}


async def get_shift_report(db: AsyncSession, branch_id: UUID) -> dict:
    month_start, month_end = await get_current_month_utc_range(db, branch_id)
    shifts = await _branch_shifts_between(db, branch_id, month_start, month_end)
    return {
        "total_shifts": len(shifts),
        "completed_shifts": sum(1 for s in shifts if s.status == ShiftStatus.COMPLETED),
        "missed_shifts": sum(1 for s in shifts if s.status == ShiftStatus.MISSED),
        "cancelled_shifts": sum(1 for s in shifts if s.status == ShiftStatus.CANCELLED),
    }


async def get_employee_count_report(db: AsyncSession, branch_id: UUID) -> dict:
    result = await db.execute(
        select(User.is_active, func.count())
        .where(User.branch_id == branch_id)
        .group_by(User.is_active)
    )
    counts = {bool(is_active): count for is_active, count in result.all()}
    active = counts.get(True, 0)
    inactive = counts.get(False, 0)
    return {
        "active_count": active,
        "total_count": active + inactive,
        "inactive_count": inactive,
    }


def is_late(shift: Shift) -> bool:
    if shift.actual_start_time is None:
        return False
    return shift.actual_start_time - shift.start_time > LATE_THRESHOLD


async def get_dashboard_stats(db: AsyncSession, branch_id: UUID) -> dict:
    tz_name = await get_branch_timezone(db, branch_id)
    day_start, day_end = get_utc_range_for_day(tz_name, local_today(tz_name))

    result = await db.execute(
        select(Shift, User.hourly_rate)
        .join(User, Shift.user_id == User.id)
        .where(
            Shift.branch_id == branch_id,
            Shift.start_time >= day_start,
            Shift.start_time < day_end,
        )
    )
    rows = result.all()

    revenue = Decimal(0)
    for shift, hourly_rate in rows:
        if shift.status == ShiftStatus.COMPLETED:
            revenue += hours_between(shift.start_time, shift.end_time) * Decimal(hourly_rate) * REVENUE_TO_LABOUR_RATIO

    return {
        "stats": {
            "clocked_in": sum(1 for shift, _ in rows if shift.status == ShiftStatus.IN_PROGRESS),
            # No break tracking yet
            "on_break": 0,
            "late": sum(1 for shift, _ in rows if is_late(shift)),
            "revenue": _round(revenue),
        }
    }


def describe_shift_status(shift: Shift, tz_name: str) -> tuple[str, str]:
    """(status, status_info) line for the dashboard."""
    def fmt(value):
        return format_time_for_branch(value, tz_name) if value else "?"

    if shift is None:
        return "Off Duty", ""
    if shift.status == ShiftStatus.IN_PROGRESS:
        return "Clocked In", f"Since {fmt(shift.actual_start_time)}"
    if shift.status == ShiftStatus.COMPLETED:
        return "Completed", f"Worked {fmt(shift.actual_start_time)} - {fmt(shift.actual_end_time)}"
    if shift.status == ShiftStatus.SCHEDULED:
        return "Scheduled", f"{fmt(shift.start_time)} - {fmt(shift.end_time)}"
    return "Off Duty", ""


async def get_employee_status(db: AsyncSession, branch_id: UUID) -> dict:
    tz_name = await get_branch_timezone(db, branch_id)
    day_start, day_end = get_utc_range_for_day(tz_name, local_today(tz_name))

    employees = (
        await db.execute(
            select(User)
            .where(User.branch_id == branch_id, User.is_active == True)
            .order_by(User.last_name, User.first_name)
        )
    ).scalars().all()

    today_shifts: Dict[UUID, Shift] = {}
    for shift in sorted(await _branch_shifts_between(db, branch_id, day_start, day_end), key=lambda s: s.start_time):
        today_shifts.setdefault(shift.user_id, shift)

    employee_status = []
    for user in employees:
        status_label, status_info = describe_shift_status(today_shifts.get(user.id), tz_name)
        employee_status.append({
            "user": {
                "id": user.id,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "position": user.position,
            },
            "status": status_label,
            "status_info": status_info,
        })
    return {"employee_status": employee_status}


async def get_my_performance(db: AsyncSession, user: User) -> dict:
    """Six months of scheduled hours and estimated sales, plus this month's completion rate."""
    tz_name = await get_branch_timezone(db, user.branch_id)
    today = local_today(tz_name)
    rate = Decimal(user.hourly_rate)

    monthly_data = []
    current_shifts: List[Shift] = []
    for offset in range(MONTHS_OF_HISTORY - 1, -1, -1):
        year, month = add_months(today.year, today.month, -offset)
        month_start, month_end = get_utc_range_for_month(tz_name, year, month)
        result = await db.execute(
            select(Shift).where(
                Shift.user_id == user.id,
                Shift.start_time >= month_start,
                Shift.start_time < month_end,
            )
        )
        shifts = list(result.scalars().all())
        hours = sum((hours_between(s.start_time, s.end_time) for s in shifts), Decimal(0))
        monthly_data.append({
            "name": date(year, month, 1).strftime("%b"),
            "hours": _round(hours),
            "sales": _round(hours * rate * REVENUE_TO_LABOUR_RATIO),
        })
        if offset == 0:
            current_shifts = shifts

    current_hours = sum((hours_between(s.start_time, s.end_time) for s in current_shifts), Decimal(0))
    completed = sum(1 for s in current_shifts if s.status == ShiftStatus.COMPLETED)
    total = len(current_shifts)

    return {
        "monthly_data": monthly_data,
        "current_month": {
            "hours": _round(current_hours),
            "sales": _round(current_hours * rate * REVENUE_TO_LABOUR_RATIO),
            "shifts_completed": completed,
            "total_shifts": total,
            "completion_rate": round(completed / total * 100, 1) if total else 0.0,
        },
    }
