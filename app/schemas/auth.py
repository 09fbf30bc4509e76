"""Authentication and staff schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr

from app.models.user import UserRole


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserCreate(BaseModel):
    """Create staff member request"""
    email: EmailStr
    password: str
    full_name: str
    position: Optional[str] = None
    staff_id: Optional[str] = None
    role: UserRole = UserRole.STAFF


class UserResponse(BaseModel):
    """Staff member response"""
    id: UUID
    email: str
    full_name: Optional[str]
    position: Optional[str]
    staff_id: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True
