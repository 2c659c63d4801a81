from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from decimal import Decimal
from uuid import UUID

from cafeshift.schemas.branch import BranchResponse


class SetupBranch(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    phone: Optional[str] = Field(None, max_length=50)


class SetupManager(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    hourly_rate: Decimal = Field(..., ge=0)


class SetupRequest(BaseModel):
    branch: SetupBranch
    manager: SetupManager


class SetupStatusResponse(BaseModel):
    is_setup_complete: bool


class SetupManagerSummary(BaseModel):
    id: UUID
    username: str
    first_name: str
    last_name: str
    email: str

    class Config:
        from_attributes = True


class SetupResponse(BaseModel):
    message: str
    branch: BranchResponse
    manager: SetupManagerSummary
