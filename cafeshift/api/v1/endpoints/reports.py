from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cafeshift.core.database import get_db
from cafeshift.core.dependencies import get_current_user, get_current_manager
from cafeshift.core.error_handling import handle_endpoint_errors
from cafeshift.models.user import User
from cafeshift.schemas.report import (
    PayrollReportResponse,
    AttendanceReportResponse,
    ShiftReportResponse,
    EmployeeCountReportResponse,
    DashboardStatsResponse,
    EmployeeStatusResponse,
    MyPerformanceResponse,
)
from cafeshift.services.report_service import (
    get_payroll_report,
    get_attendance_report,
    get_shift_report,
    get_employee_count_report,
    get_dashboard_stats,
    get_employee_status,
    get_my_performance,
)

router = APIRouter()


@router.get("/reports/payroll", response_model=PayrollReportResponse)
@handle_endpoint_errors(operation_name="payroll_report")
async def payroll_report_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_payroll_report(db, current_user.branch_id)


@router.get("/reports/attendance", response_model=AttendanceReportResponse)
@handle_endpoint_errors(operation_name="attendance_report")
async def attendance_report_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_attendance_report(db, current_user.branch_id)


@router.get("/reports/shifts", response_model=ShiftReportResponse)
@handle_endpoint_errors(operation_name="shift_report")
async def shift_report_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_shift_report(db, current_user.branch_id)


@router.get("/reports/employees", response_model=EmployeeCountReportResponse)
@handle_endpoint_errors(operation_name="employee_count_report")
async def employee_report_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_employee_count_report(db, current_user.branch_id)


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
@handle_endpoint_errors(operation_name="dashboard_stats")
async def dashboard_stats_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_dashboard_stats(db, current_user.branch_id)


@router.get("/dashboard/employee-status", response_model=EmployeeStatusResponse)
@handle_endpoint_errors(operation_name="dashboard_employee_status")
async def employee_status_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await get_employee_status(db, current_user.branch_id)


@router.get("/employee/performance", response_model=MyPerformanceResponse)
@handle_endpoint_errors(operation_name="my_performance")
async def my_performance_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_my_performance(db, current_user)
