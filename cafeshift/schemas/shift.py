"""
Shift and Shift Trade Schemas
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from cafeshift.models.shift import ShiftStatus, RecurringPattern, ShiftTradeStatus, TradeUrgency
from cafeshift.schemas.common import UTCDateTime, UserSummary


class ShiftCreate(BaseModel):
    user_id: UUID
    start_time: UTCDateTime
    end_time: UTCDateTime
    position: str = Field(..., min_length=1, max_length=100)
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    status: ShiftStatus = ShiftStatus.SCHEDULED

    @model_validator(mode='after')
    def validate_times(self):
        """Validate that end_time is after start_time."""
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ShiftUpdate(BaseModel):
    user_id: Optional[UUID] = None
    start_time: Optional[UTCDateTime] = None
    end_time: Optional[UTCDateTime] = None
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[RecurringPattern] = None
    status: Optional[ShiftStatus] = None
    actual_start_time: Optional[UTCDateTime] = None
    actual_end_time: Optional[UTCDateTime] = None

    @model_validator(mode='after')
    def validate_times(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.actual_start_time and self.actual_end_time and self.actual_end_time <= self.actual_start_time:
            raise ValueError("actual_end_time must be after actual_start_time")
        return self


class ShiftResponse(BaseModel):
    id: UUID
    user_id: UUID
    branch_id: UUID
    start_time: datetime
    end_time: datetime
    position: str
    is_recurring: bool
    recurring_pattern: Optional[RecurringPattern] = None
    status: ShiftStatus
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ShiftWithUserResponse(ShiftResponse):
    user: Optional[UserSummary] = None


class ShiftListResponse(BaseModel):
    shifts: List[ShiftWithUserResponse]


class ShiftEnvelope(BaseModel):
    shift: ShiftResponse


class ClockActionResponse(BaseModel):
    message: str
    shift: ShiftResponse


class ShiftTradeCreate(BaseModel):
    shift_id: UUID
    to_user_id: Optional[UUID] = None
    reason: str = Field(..., min_length=1, max_length=1000)
    urgency: TradeUrgency = TradeUrgency.NORMAL
    notes: Optional[str] = Field(None, max_length=1000)


class ShiftTradeDecision(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class ShiftTradeResponse(BaseModel):
    id: UUID
    shift_id: UUID
    from_user_id: UUID
    to_user_id: Optional[UUID] = None
    reason: str
    status: ShiftTradeStatus
    urgency: TradeUrgency
    notes: Optional[str] = None
    requested_at: datetime
    approved_at: Optional[datetime] = None
    approved_by: Optional[UUID] = None

    class Config:
        from_attributes = True


class ShiftTradeDetailResponse(ShiftTradeResponse):
    shift: Optional[ShiftResponse] = None
    from_user: Optional[UserSummary] = None


class ShiftTradeEnvelope(BaseModel):
    trade: ShiftTradeResponse


class ShiftTradeListResponse(BaseModel):
    trades: List[ShiftTradeDetailResponse]
