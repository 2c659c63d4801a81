from sqlalchemy import Column, DateTime, Boolean, Integer, Uuid, CheckConstraint
import uuid

from cafeshift.core.database import Base


class SetupStatus(Base):
    __tablename__ = "setup_status"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Single-row table: concurrent first-time setups collide here
    singleton_key = Column(Integer, nullable=False, default=1, unique=True)
    is_setup_complete = Column(Boolean, nullable=False, default=False)
    setup_completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("singleton_key = 1", name="ck_setup_status_singleton"),
    )
