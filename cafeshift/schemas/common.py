from datetime import datetime, timezone
from typing import Annotated
from uuid import UUID
from pydantic import AfterValidator, BaseModel


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC; convert aware input accordingly."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class MessageResponse(BaseModel):
    message: str


class UserSummary(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    position: str
    email: str

    class Config:
        from_attributes = True
