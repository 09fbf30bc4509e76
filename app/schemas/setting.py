"""Settings and holiday schemas"""

from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID
from pydantic import BaseModel


class SettingUpsert(BaseModel):
    """Create or replace a setting"""
    key: str
    value: Any
    description: Optional[str] = None


class SettingResponse(BaseModel):
    key: str
    value: Any
    description: Optional[str]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class HolidayCreate(BaseModel):
    holiday_date: date
    description: Optional[str] = None


class HolidayBatch(BaseModel):
    """Several closed dates at once"""
    dates: List[HolidayCreate]


class HolidayResponse(BaseModel):
    id: UUID
    holiday_date: date
    description: Optional[str]

    class Config:
        from_attributes = True
