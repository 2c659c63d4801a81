from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime
from uuid import UUID

from cafeshift.models.approval import ApprovalType, ApprovalStatus
from cafeshift.schemas.common import UserSummary


class ApprovalDecision(BaseModel):
    status: Literal["approved", "rejected"]
    reason: Optional[str] = Field(None, max_length=1000)


class ApprovalResponse(BaseModel):
    id: UUID
    type: ApprovalType
    request_id: UUID
    requested_by: UUID
    approved_by: Optional[UUID] = None
    status: ApprovalStatus
    reason: Optional[str] = None
    request_data: Optional[dict] = None
    requested_at: datetime
    responded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApprovalWithUserResponse(ApprovalResponse):
    requested_by_user: Optional[UserSummary] = None


class ApprovalEnvelope(BaseModel):
    approval: ApprovalResponse


class ApprovalListResponse(BaseModel):
    approvals: List[ApprovalWithUserResponse]
