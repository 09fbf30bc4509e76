"""Slot hold and overlap logic"""

from app.booking.overlap import (
    FORM_POLICY,
    WIZARD_POLICY,
    OverlapPolicy,
    OverlapRule,
    TimeFormatError,
    booked_table_numbers,
    parse_time,
    times_conflict,
)
from app.booking.holds import Hold, HoldStore
from app.booking.feed import Action, ChangeEvent, ChangeFeed, Entity, Subscription
from app.booking.negotiator import (
    BookingConflict,
    HoldRejected,
    NegotiatorState,
    SlotHoldNegotiator,
    SlotServiceError,
    session_id_for,
)

__all__ = [
    "FORM_POLICY",
    "WIZARD_POLICY",
    "OverlapPolicy",
    "OverlapRule",
    "TimeFormatError",
    "booked_table_numbers",
    "parse_time",
    "times_conflict",
    "Hold",
    "HoldStore",
    "Action",
    "ChangeEvent",
    "ChangeFeed",
    "Entity",
    "Subscription",
    "BookingConflict",
    "HoldRejected",
    "NegotiatorState",
    "SlotHoldNegotiator",
    "SlotServiceError",
    "session_id_for",
]
