"""Guest feedback schemas"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator


class FeedbackCreate(BaseModel):
    """Submit feedback for a visit"""
    reservation_id: UUID
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None

    @field_validator("comment", "customer_name", "customer_phone")
    @classmethod
    def blank_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class FeedbackResponse(BaseModel):
    id: UUID
    reservation_id: UUID
    rating: int
    comment: Optional[str]
    customer_name: Optional[str]
    customer_phone: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class FeedbackListItem(FeedbackResponse):
    """Feedback with the booking it belongs to"""
    guest_name: Optional[str] = None
    reservation_date: Optional[date] = None


class FeedbackStats(BaseModel):
    average_rating: Optional[float]
    total_feedback: int


class FeedbackPage(BaseModel):
    """Admin feedback listing"""
    data: List[FeedbackListItem]
    total: int
    limit: int
    offset: int
    stats: FeedbackStats


class FeedbackReservation(BaseModel):
    """Booking found for a feedback code"""
    id: UUID
    booking_code: str
    guest_name: str
    guest_phone: str
    reservation_date: date
    reservation_time: str
    status: str

    class Config:
        from_attributes = True


class Testimonial(BaseModel):
    """Public review with the reviewer's name masked"""
    id: UUID
    rating: int
    comment: Optional[str]
    customer_name: str
    created_at: datetime
