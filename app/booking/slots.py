"""Daily time slot grid with occupancy status"""

from datetime import date as date_type, datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from app.booking.holds import Hold
from app.booking.overlap import OverlapPolicy, format_time, parse_time, times_conflict

# Opening hours keyed by weekday, "0" = Sunday
DEFAULT_OPENING_HOURS: Dict[str, Dict[str, str]] = {
    "0": {"open": "10:00", "close": "21:00"},
    "1": {"open": "11:00", "close": "22:00"},
    "2": {"open": "11:00", "close": "22:00"},
    "3": {"open": "11:00", "close": "22:00"},
    "4": {"open": "11:00", "close": "23:00"},
    "5": {"open": "11:00", "close": "23:00"},
    "6": {"open": "10:00", "close": "23:00"},
}


class TimeSlot(BaseModel):
    """One bookable start time"""
    time: str
    label: str
    status: str  # available, booked, held


def weekday_key(day: date_type) -> str:
    """Sunday-first weekday index used by the business_hours setting"""
    return str(day.isoweekday() % 7)


def hours_for(day: date_type, opening_hours: Optional[dict]) -> Optional[dict]:
    hours = opening_hours if opening_hours is not None else DEFAULT_OPENING_HOURS
    return hours.get(weekday_key(day))


def slot_label(time: str, locale: Optional[str]) -> str:
    return f"{time} น." if (locale or "th") == "th" else time


def count_booked(time: str, reservations: Iterable, policy: OverlapPolicy) -> int:
    """Distinct tables taken at `time`, plus each conflicting booking without a table"""
    tables = set()
    unassigned = 0
    for reservation in reservations:
        if not times_conflict(time, reservation.reservation_time, policy):
            continue
        if reservation.table_number:
            tables.add(reservation.table_number)
        else:
            unassigned += 1
    return len(tables) + unassigned


def build_time_slots(
    day: date_type,
    reservations: List,
    opening_hours: Optional[dict],
    total_tables: int,
    holds: List[Hold],
    policy: OverlapPolicy,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
    locale: Optional[str] = None,
) -> List[TimeSlot]:
    """
    Lay out the day's start times and classify each one.

    `reservations` must already be limited to active bookings on `day`.
    `now` is the current restaurant-local time; slots earlier than it on
    the same day are left out.
    """
    hours = hours_for(day, opening_hours)
    if not hours:
        return []

    current = parse_time(hours["open"])
    closing = parse_time(hours["close"])

    cutoff = None
    if now is not None and now.date() == day:
        cutoff = now.hour * 60 + now.minute

    slots = []
    while current < closing:
        if current + policy.duration_minutes > closing:
            break

        if cutoff is not None and current < cutoff:
            current += policy.window_minutes
            continue

        time = format_time(current)
        booked = count_booked(time, reservations, policy)

        held = 0
        mine = False
        for hold in holds:
            if not times_conflict(time, hold.time, policy):
                continue
            if session_id and hold.session_id == session_id:
                mine = mine or hold.time == time
            else:
                held += 1

        if booked >= total_tables:
            status = "booked"
        elif booked + held >= total_tables and not mine:
            status = "held"
        else:
            status = "available"

        slots.append(TimeSlot(time=time, label=slot_label(time, locale), status=status))
        current += policy.window_minutes

    return slots
