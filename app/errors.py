"""Structured booking errors shared by the API and the client"""

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Categories of booking failures"""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    NETWORK = "network"
    SERVER = "server"


STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NETWORK: 503,
    ErrorKind.SERVER: 500,
}


# Guest-facing messages, Thai first
MESSAGES = {
    "slot_fully_booked": {
        "th": "ช่วงเวลานี้ถูกจองเต็มแล้ว",
        "en": "This time slot is fully booked",
    },
    "slot_held": {
        "th": "ช่วงเวลานี้กำลังมีผู้ทำรายการจองอื่น",
        "en": "This time slot is being booked by another guest",
    },
    "restaurant_closed": {
        "th": "ร้านปิดในวันที่เลือก",
        "en": "The restaurant is closed on the selected date",
    },
    "table_taken": {
        "th": "โต๊ะนี้มีรายการจองอื่นแล้วในช่วงเวลาดังกล่าว (รวมเวลาพักโต๊ะ {minutes} นาที)",
        "en": "Table is already booked during this time slot (including {minutes} min buffer)",
    },
}


def message(key: str, locale: Optional[str] = None, **params) -> str:
    """Look up a localized message, falling back to Thai"""
    variants = MESSAGES[key]
    text = variants.get(locale or "th", variants["th"])
    return text.format(**params) if params else text


class BookingError(Exception):
    """Base class for errors rendered as {"success": false, "error", "code"}"""
    kind = ErrorKind.SERVER

    def __init__(self, error: str, kind: Optional[ErrorKind] = None):
        super().__init__(error)
        self.error = error
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class ValidationFailed(BookingError):
    kind = ErrorKind.VALIDATION


class SlotConflict(BookingError):
    kind = ErrorKind.CONFLICT


class NotFound(BookingError):
    kind = ErrorKind.NOT_FOUND
