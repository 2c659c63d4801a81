from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from cafeshift.models.time_off import TimeOffType, TimeOffStatus
from cafeshift.schemas.common import UTCDateTime, UserSummary


class TimeOffRequestCreate(BaseModel):
    start_date: UTCDateTime
    end_date: UTCDateTime
    type: TimeOffType
    reason: str = Field(..., min_length=1, max_length=1000)

    @model_validator(mode='after')
    def validate_date_range(self):
        """Validate that start_date is before or equal to end_date."""
        if self.start_date > self.end_date:
            raise ValueError("start_date must be before or equal to end_date")
        return self


class TimeOffRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    start_date: datetime
    end_date: datetime
    type: TimeOffType
    reason: str
    status: TimeOffStatus
    requested_at: datetime
    approved_at: Optional[datetime] = None
    approved_by: Optional[UUID] = None

    class Config:
        from_attributes = True


class TimeOffRequestWithUserResponse(TimeOffRequestResponse):
    user: Optional[UserSummary] = None


class TimeOffRequestEnvelope(BaseModel):
    request: TimeOffRequestResponse


class TimeOffRequestListResponse(BaseModel):
    requests: List[TimeOffRequestWithUserResponse]


class LeaveDays(BaseModel):
    vacation: int
    sick: int
    personal: int


class TimeOffBalanceResponse(BaseModel):
    vacation: int
    sick: int
    personal: int
    used: LeaveDays
    allowance: LeaveDays
