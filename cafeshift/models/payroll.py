from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, Enum, Index, Numeric, Boolean, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from cafeshift.core.database import Base


class PayrollPeriodStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    PAID = "paid"


class PayrollEntryStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


class PayrollPeriod(Base):
    __tablename__ = "payroll_periods"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    branch_id = Column(Uuid(as_uuid=True), ForeignKey("branches.id"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(Enum(PayrollPeriodStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=PayrollPeriodStatus.OPEN)

    # Totals, filled in when the period is processed
    total_hours = Column(Numeric(12, 4), nullable=True)
    total_pay = Column(Numeric(12, 4), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)

    # Relationships
    entries = relationship("PayrollEntry", back_populates="payroll_period")

    __table_args__ = (
        Index("idx_payroll_periods_branch_status", "branch_id", "status"),
    )


class PayrollEntry(Base):
    __tablename__ = "payroll_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    payroll_period_id = Column(Uuid(as_uuid=True), ForeignKey("payroll_periods.id"), nullable=False, index=True)

    # Time breakdown
    total_hours = Column(Numeric(12, 4), nullable=False)
    regular_hours = Column(Numeric(12, 4), nullable=False)
    overtime_hours = Column(Numeric(12, 4), nullable=False, default=0)

    # Pay calculations
    gross_pay = Column(Numeric(12, 4), nullable=False)
    deductions = Column(Numeric(12, 4), nullable=False, default=0)
    net_pay = Column(Numeric(12, 4), nullable=False)

    status = Column(Enum(PayrollEntryStatus, values_callable=lambda x: [e.value for e in x]), nullable=False, default=PayrollEntryStatus.PENDING)

    # Record hash fields
    blockchain_hash = Column(String(64), nullable=True)
    block_number = Column(Integer, nullable=True)
    transaction_hash = Column(String(64), nullable=True, index=True)
    verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)

    # Relationships
    payroll_period = relationship("PayrollPeriod", back_populates="entries")
    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("payroll_period_id", "user_id", name="uq_payroll_entry_period_user"),
    )
