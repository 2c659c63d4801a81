from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Index, JSON, Text, Uuid
from sqlalchemy.sql import func
import uuid
import enum

from cafeshift.core.database import Base


class ApprovalType(str, enum.Enum):
    SHIFT_TRADE = "shift_trade"
    LEAVE_REQUEST = "leave_request"
    TIME_CORRECTION = "time_correction"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(Enum(ApprovalType, values_callable=lambda x: [e.value for e in x]), nullable=False)
    request_id = Column(Uuid(as_uuid=True), nullable=False)  # ID of the trade / time-off request
    requested_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    status = Column(Enum(ApprovalStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=ApprovalStatus.PENDING)
    reason = Column(Text, nullable=True)
    request_data = Column(JSON, nullable=True)
    requested_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)
    responded_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_approvals_type_request", "type", "request_id"),
        Index("idx_approvals_status", "status"),
    )
