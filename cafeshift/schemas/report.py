from pydantic import BaseModel
from typing import List
from uuid import UUID


class PayrollReportResponse(BaseModel):
    total_payroll: float


class AttendanceReportResponse(BaseModel):
    total_hours: float


class ShiftReportResponse(BaseModel):
    total_shifts: int
    completed_shifts: int
    missed_shifts: int
    cancelled_shifts: int


class EmployeeCountReportResponse(BaseModel):
    active_count: int
    total_count: int
    inactive_count: int


class DashboardStats(BaseModel):
    clocked_in: int
    on_break: int
    late: int
    revenue: float


class DashboardStatsResponse(BaseModel):
    stats: DashboardStats


class StatusUser(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    position: str


class EmployeeStatusItem(BaseModel):
    user: StatusUser
    status: str
    status_info: str


class EmployeeStatusResponse(BaseModel):
    employee_status: List[EmployeeStatusItem]


class MonthlyPerformance(BaseModel):
    name: str
    hours: float
    sales: float


class CurrentMonthPerformance(BaseModel):
    hours: float
    sales: float
    shifts_completed: int
    total_shifts: int
    completion_rate: float


class MyPerformanceResponse(BaseModel):
    monthly_data: List[MonthlyPerformance]
    current_month: CurrentMonthPerformance
