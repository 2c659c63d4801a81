"""
Shift and Shift Trade Models

Scheduled shifts, their actual clock times, and employee-initiated trades.
"""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Text, Enum, Index, Uuid
from sqlalchemy.sql import func

from cafeshift.core.database import Base


class ShiftStatus(str, enum.Enum):
    """Shift status options."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    MISSED = "missed"
    CANCELLED = "cancelled"


class RecurringPattern(str, enum.Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class ShiftTradeStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class TradeUrgency(str, enum.Enum):
    URGENT = "urgent"
    NORMAL = "normal"
    LOW = "low"


class Shift(Base):
    """Individual shift assignment for an employee."""
    __tablename__ = "shifts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    branch_id = Column(Uuid(as_uuid=True), ForeignKey("branches.id"), nullable=False, index=True)

    # Scheduled times
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    position = Column(String(100), nullable=False)

    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_pattern = Column(Enum(RecurringPattern, values_callable=lambda x: [e.value for e in x]), nullable=True)
    status = Column(Enum(ShiftStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=ShiftStatus.SCHEDULED)

    # Clock times recorded by a manager
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_shifts_user_start', 'user_id', 'start_time'),
        Index('idx_shifts_branch_start', 'branch_id', 'start_time'),
    )


class ShiftTrade(Base):
    """Employee offer to hand a shift to a colleague, pending manager approval."""
    __tablename__ = "shift_trades"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shift_id = Column(Uuid(as_uuid=True), ForeignKey("shifts.id"), nullable=False, index=True)
    from_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    reason = Column(Text, nullable=False)
    status = Column(Enum(ShiftTradeStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=ShiftTradeStatus.PENDING)
    urgency = Column(Enum(TradeUrgency, values_callable=lambda x: [e.value for e in x]), nullable=False, default=TradeUrgency.NORMAL)
    notes = Column(Text, nullable=True)
    requested_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
