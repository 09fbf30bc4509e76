"""Time slot schemas"""

import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from app.booking.slots import TimeSlot
from app.schemas.reservation import normalize_time


class TimeSlotList(BaseModel):
    """Slots for one date"""
    slots: List[TimeSlot]


class HoldRequest(BaseModel):
    """Hold or release a slot"""
    date: datetime.date
    time: str
    action: Literal["hold", "release"]
    session_id: str = Field(alias="sessionId", min_length=1)
    locale: Optional[str] = None

    @field_validator("time")
    @classmethod
    def check_time(cls, value: str) -> str:
        return normalize_time(value)


class HoldResponse(BaseModel):
    success: bool
    error: Optional[str] = None
