from pydantic import BaseModel, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from cafeshift.models.payroll import PayrollPeriodStatus, PayrollEntryStatus
from cafeshift.schemas.common import UTCDateTime, UserSummary


class PayrollPeriodCreate(BaseModel):
    start_date: UTCDateTime
    end_date: UTCDateTime

    @model_validator(mode='after')
    def validate_date_range(self):
        """Validate that start_date is before end_date."""
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        return self


class PayrollPeriodResponse(BaseModel):
    id: UUID
    branch_id: UUID
    start_date: datetime
    end_date: datetime
    status: PayrollPeriodStatus
    total_hours: Optional[Decimal] = None
    total_pay: Optional[Decimal] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PayrollPeriodEnvelope(BaseModel):
    period: Optional[PayrollPeriodResponse] = None


class PayrollPeriodListResponse(BaseModel):
    periods: List[PayrollPeriodResponse]


class ProcessPayrollResponse(BaseModel):
    message: str
    entries_created: int
    total_hours: Decimal
    total_pay: Decimal


class PayrollEntryResponse(BaseModel):
    id: UUID
    user_id: UUID
    payroll_period_id: UUID
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    status: PayrollEntryStatus
    blockchain_hash: Optional[str] = None
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PayrollEntryWithEmployeeResponse(PayrollEntryResponse):
    employee: UserSummary


class PayrollEntryEnvelope(BaseModel):
    entry: PayrollEntryResponse


class PayrollEntryListResponse(BaseModel):
    entries: List[PayrollEntryResponse]


class BranchPayrollEntryListResponse(BaseModel):
    entries: List[PayrollEntryWithEmployeeResponse]


class Payslip(BaseModel):
    entry_id: UUID
    employee_name: str
    employee_id: UUID
    position: str
    period_start: datetime
    period_end: datetime
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    status: PayrollEntryStatus
    blockchain_hash: Optional[str] = None


class PayslipResponse(BaseModel):
    payslip: Payslip
