"""Pydantic schemas for request/response validation"""

from app.schemas.auth import Token, UserCreate, UserResponse
from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    PublicReservationSlot,
    BookingLookupResponse,
    AutoCancelResponse,
)
from app.schemas.table import TableCreate, TableUpdate, TableResponse
from app.schemas.timeslot import TimeSlotList, HoldRequest, HoldResponse
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackResponse,
    FeedbackListItem,
    FeedbackPage,
    FeedbackReservation,
    Testimonial,
)
from app.schemas.setting import (
    SettingUpsert,
    SettingResponse,
    HolidayCreate,
    HolidayBatch,
    HolidayResponse,
)

__all__ = [
    "Token",
    "UserCreate",
    "UserResponse",
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationResponse",
    "PublicReservationSlot",
    "BookingLookupResponse",
    "AutoCancelResponse",
    "TableCreate",
    "TableUpdate",
    "TableResponse",
    "TimeSlotList",
    "HoldRequest",
    "HoldResponse",
    "SettingUpsert",
    "SettingResponse",
    "HolidayCreate",
    "HolidayBatch",
    "HolidayResponse",
    "FeedbackCreate",
    "FeedbackResponse",
    "FeedbackListItem",
    "FeedbackPage",
    "FeedbackReservation",
    "Testimonial",
]
