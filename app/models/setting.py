"""Key/value settings and holidays"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Date, DateTime, JSON, Text, Uuid

from app.database import Base


class Setting(Base):
    """Restaurant settings such as business_hours"""
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    description = Column(Text)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Holiday(Base):
    """Dates the restaurant is closed"""
    __tablename__ = "holidays"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    holiday_date = Column(Date, unique=True, nullable=False)
    description = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
