from typing import Optional
from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors, parse_uuid
from cafeshift.models.user import User
from cafeshift.schemas.user import HoursReportResponse
from cafeshift.services.timezone_service import get_branch_timezone, local_today
from cafeshift.services.user_service import get_hours_report

router = APIRouter()

DEFAULT_REPORT_DAYS = 14


@router.get("/report", response_model=HoursReportResponse)
@handle_endpoint_errors(operation_name="get_hours_report")
async def hours_report_endpoint(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    user_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Per-employee worked hours for a date range (defaults to the last two weeks)."""
    if end_date is None:
        end_date = local_today(await get_branch_timezone(db, current_user.branch_id))
    if start_date is None:
        start_date = end_date - timedelta(days=DEFAULT_REPORT_DAYS - 1)

    return await get_hours_report(
        db,
        current_user.branch_id,
        start_date,
        end_date,
        user_id=parse_uuid(user_id, "User ID") if user_id else None,
    )
