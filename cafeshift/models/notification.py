from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Boolean, Index, JSON, Text, Uuid
from sqlalchemy.sql import func
import uuid
import enum

from cafeshift.core.database import Base


class NotificationType(str, enum.Enum):
    PAYROLL = "payroll"
    SCHEDULE = "schedule"
    ANNOUNCEMENT = "announcement"
    SYSTEM = "system"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(NotificationType, values_callable=lambda x: [e.value for e in x]), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )
