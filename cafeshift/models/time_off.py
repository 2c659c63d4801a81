from datetime import datetime
from sqlalchemy import Column, ForeignKey, DateTime, Enum, Index, Text, Uuid
from sqlalchemy.sql import func
import uuid
import enum

from cafeshift.core.database import Base


class TimeOffType(str, enum.Enum):
    VACATION = "vacation"
    SICK = "sick"
    PERSONAL = "personal"


class TimeOffStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    type = Column(Enum(TimeOffType, values_callable=lambda x: [e.value for e in x]), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(Enum(TimeOffStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TimeOffStatus.PENDING)
    requested_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        Index("idx_time_off_requests_user_status", "user_id", "status"),
    )
