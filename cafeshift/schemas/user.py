from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID

from cafeshift.models.user import UserRole


class EmployeeCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: UserRole = UserRole.EMPLOYEE
    position: str = Field(..., min_length=1, max_length=100)
    hourly_rate: Decimal = Field(..., ge=0)


class EmployeeUpdate(BaseModel):
    password: Optional[str] = Field(None, min_length=6, max_length=255)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    hourly_rate: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    """User as returned by the API. The password hash is never exposed."""
    id: UUID
    username: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    position: str
    hourly_rate: Decimal
    branch_id: UUID
    is_active: bool
    blockchain_verified: bool
    blockchain_hash: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    employees: List[UserResponse]
    total: int


class BulkEmployeeRequest(BaseModel):
    employee_ids: List[UUID]


class BulkUpdateResponse(BaseModel):
    message: str
    updated_count: int


class EmployeeStatsResponse(BaseModel):
    total_employees: int
    active_employees: int
    total_hours_this_month: float
    total_payroll_this_month: float
    average_performance: float


class EmployeePerformanceResponse(BaseModel):
    employee_id: UUID
    employee_name: str
    rating: float
    hours_this_month: float
    shifts_this_month: int


class DailyHours(BaseModel):
    date: date
    hours: float


class EmployeeHoursResponse(BaseModel):
    employee_id: UUID
    employee_name: str
    position: str
    hourly_rate: float
    total_hours: float
    total_shifts: int
    estimated_pay: float
    hours_by_day: List[DailyHours]


class HoursSummary(BaseModel):
    total_hours: float
    total_pay: float
    total_shifts: int
    employee_count: int


class HoursReportResponse(BaseModel):
    employees: List[EmployeeHoursResponse]
    summary: HoursSummary
