from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, Uuid
from sqlalchemy.sql import func
import uuid

from cafeshift.core.database import Base


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    phone = Column(String(50), nullable=True)
    timezone = Column(String(50), nullable=True)  # Falls back to DEFAULT_TIMEZONE
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)
