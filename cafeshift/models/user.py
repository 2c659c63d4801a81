from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Enum, DateTime, Boolean, Numeric, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from cafeshift.core.database import Base


class UserRole(str, enum.Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(Enum(UserRole, values_callable=lambda x: [e.value for e in x]), nullable=False, default=UserRole.EMPLOYEE)
    position = Column(String(100), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    branch_id = Column(Uuid(as_uuid=True), ForeignKey("branches.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Record hash shown as "blockchain verified"
    blockchain_verified = Column(Boolean, nullable=False, default=False)
    blockchain_hash = Column(String(64), nullable=True)
    verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now(), nullable=False)

    # Relationships
    branch = relationship("Branch", backref="users")

    __table_args__ = (
        Index("idx_users_branch_active", "branch_id", "is_active"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
