"""Reservation schemas"""

import re
from datetime import date, datetime
from typing import Optional, List, Literal
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.booking.overlap import TimeFormatError, format_time, parse_time

ReservationStatus = Literal["pending", "confirmed", "cancelled", "completed"]

PHONE_RE = re.compile(r"^\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})$")

# Columns that may be left out of an update but never cleared
REQUIRED_COLUMNS = (
    "guest_name",
    "guest_phone",
    "party_size",
    "reservation_date",
    "reservation_time",
    "status",
)


def normalize_time(value: str) -> str:
    """Validate HH:MM[:SS] and return HH:MM"""
    try:
        return format_time(parse_time(value))
    except TimeFormatError:
        raise ValueError("Time must be in HH:MM format")


def validate_guest_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Name must be at least 2 characters")
    if " " not in value:
        raise ValueError("Please enter both first and last name")
    return value


def validate_phone(value: str) -> str:
    compact = re.sub(r"\s", "", value)
    if not PHONE_RE.match(compact):
        raise ValueError("Phone number must have 10 digits")
    return compact


class ReservationCreate(BaseModel):
    """Create reservation request"""
    guest_name: str
    guest_phone: str
    guest_email: Optional[EmailStr] = None
    party_size: int = Field(ge=1, le=50)
    reservation_date: date
    reservation_time: str
    table_number: Optional[int] = None
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None
    payment_slip_url: Optional[str] = None

    # Hold owner, released once the reservation exists
    session_id: Optional[str] = Field(None, alias="sessionId")
    locale: Optional[str] = None

    @field_validator("guest_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("guest_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return validate_guest_name(value)

    @field_validator("guest_phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)

    @field_validator("reservation_time")
    @classmethod
    def check_time(cls, value: str) -> str:
        return normalize_time(value)


class ReservationUpdate(BaseModel):
    """Update reservation request (admin)"""
    guest_name: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_email: Optional[EmailStr] = None
    party_size: Optional[int] = Field(None, ge=1, le=50)
    reservation_date: Optional[date] = None
    reservation_time: Optional[str] = None
    table_number: Optional[int] = None
    status: Optional[ReservationStatus] = None
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None
    payment_slip_url: Optional[str] = None

    @field_validator(*REQUIRED_COLUMNS, mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("guest_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return validate_guest_name(value)

    @field_validator("guest_phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return validate_phone(value)

    @field_validator("reservation_time")
    @classmethod
    def check_time(cls, value: str) -> str:
        return normalize_time(value)


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    booking_code: str
    guest_name: str
    guest_phone: str
    guest_email: Optional[str]
    party_size: int
    reservation_date: date
    reservation_time: str
    table_number: Optional[int]
    status: str
    special_requests: Optional[str]
    admin_notes: Optional[str]
    payment_slip_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PublicReservationSlot(BaseModel):
    """What guests may see of other bookings"""
    reservation_date: date
    reservation_time: str
    table_number: Optional[int]
    status: str

    class Config:
        from_attributes = True


class BookingLookupResponse(BaseModel):
    """Masked reservation returned by the status check"""
    id: UUID
    short_id: str
    booking_code: str
    guest_name: str
    guest_phone: str
    party_size: int
    reservation_date: date
    reservation_time: str
    table_number: Optional[int]
    status: str


class AutoCancelResponse(BaseModel):
    """Result of the pending-reservation sweep"""
    success: bool = True
    message: str
    cancelled: int
    ids: List[str] = []
