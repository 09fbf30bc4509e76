"""Staff user model for back-office authentication"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Uuid
import enum

from app.database import Base


class UserRole(str, enum.Enum):
    """Staff roles"""
    ADMIN = "admin"
    STAFF = "staff"


class User(Base):
    """Back-office staff"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    full_name = Column(String(255))
    position = Column(String(100))
    staff_id = Column(String(20))

    # Role
    role = Column(Enum(UserRole), default=UserRole.STAFF)

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def has_permission(self, required_role: UserRole) -> bool:
        """Check if user has at least the required role level"""
        role_hierarchy = {
            UserRole.STAFF: 1,
            UserRole.ADMIN: 2,
        }
        return role_hierarchy.get(self.role, 0) >= role_hierarchy.get(required_role, 0)
