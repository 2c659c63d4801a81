"""
Service for branch-local day and month boundaries.

Shift times are stored as naive UTC; "today" and "this month" are computed in
the branch timezone and converted back to naive UTC for filtering.
"""
from typing import Optional, Tuple
from uuid import UUID
from datetime import datetime, date, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import pytz

from cafeshift.core.config import settings
from cafeshift.models.branch import Branch


async def get_branch_timezone(
    db: AsyncSession,
    branch_id: UUID,
) -> str:
    """Get branch timezone, falling back to DEFAULT_TIMEZONE."""
    result = await db.execute(select(Branch.timezone).where(Branch.id == branch_id))
    tz_name = result.scalar_one_or_none()
    return tz_name or settings.DEFAULT_TIMEZONE


def _tz(timezone_str: str):
    try:
        return pytz.timezone(timezone_str)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def convert_to_branch_timezone(
    utc_datetime: Optional[datetime],
    timezone_str: str,
) -> Optional[datetime]:
    """Convert naive UTC datetime to branch timezone. Returns None if utc_datetime is None."""
    if utc_datetime is None:
        return None
    if utc_datetime.tzinfo is None:
        utc_datetime = pytz.utc.localize(utc_datetime)
    return utc_datetime.astimezone(_tz(timezone_str))


def local_today(timezone_str: str, now: Optional[datetime] = None) -> date:
    now = now or datetime.utcnow()
    return convert_to_branch_timezone(now, timezone_str).date()


def _local_midnight_to_utc(tz, day: date) -> datetime:
    local = tz.localize(datetime.combine(day, datetime.min.time()))
    return local.astimezone(pytz.UTC).replace(tzinfo=None)


def get_utc_range_for_day(timezone_str: str, day: date) -> Tuple[datetime, datetime]:
    """
    Return (start_utc, end_utc) for one local day as naive UTC.
    end_utc is the next local midnight, so filter with start <= t < end.
    """
    tz = _tz(timezone_str)
    return _local_midnight_to_utc(tz, day), _local_midnight_to_utc(tz, day + timedelta(days=1))


def add_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def get_utc_range_for_month(timezone_str: str, year: int, month: int) -> Tuple[datetime, datetime]:
    """Return (start_utc, end_utc) for a local calendar month, end exclusive."""
    tz = _tz(timezone_str)
    next_year, next_month = add_months(year, month, 1)
    return (
        _local_midnight_to_utc(tz, date(year, month, 1)),
        _local_midnight_to_utc(tz, date(next_year, next_month, 1)),
    )


def format_time_for_branch(utc_datetime: datetime, timezone_str: str) -> str:
    """Format a time like '9:05 AM' in branch timezone."""
    local_dt = convert_to_branch_timezone(utc_datetime, timezone_str)
    return local_dt.strftime("%I:%M %p").lstrip("0")


def format_month_day(value: datetime) -> str:
    """'Jan 5'"""
    return f"{value.strftime('%b')} {value.day}"


def format_month_day_year(value: datetime) -> str:
    """'Jan 5, 2025'"""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


async def get_current_month_utc_range(
    db: AsyncSession,
    branch_id: UUID,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Current calendar month of the branch as a naive UTC [start, end) range."""
    tz_name = await get_branch_timezone(db, branch_id)
    today = local_today(tz_name, now)
    return get_utc_range_for_month(tz_name, today.year, today.month)


def get_utc_range_for_year(timezone_str: str, year: int) -> Tuple[datetime, datetime]:
    """Return (start_utc, end_utc) for a local calendar year, end exclusive."""
    tz = _tz(timezone_str)
    return _local_midnight_to_utc(tz, date(year, 1, 1)), _local_midnight_to_utc(tz, date(year + 1, 1, 1))
