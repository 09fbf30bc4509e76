"""
Time overlap checks between bookings on the same table.

Two conflict rules exist side by side. The single-page form and the server
compare start times (`|t1 - t2| < window`); the wizard compares half-open
intervals (`start < other_end and end > other_start`). They also assume
different windows (90 + 15 vs. 120 minutes). Both are kept as named policies
until the product decides on one.
"""

import enum
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Union

ACTIVE_STATUSES = ("pending", "confirmed")

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


class TimeFormatError(ValueError):
    """Raised when a time-of-day string is not HH:MM[:SS]"""


class OverlapRule(str, enum.Enum):
    DISTANCE = "distance"
    INTERVAL = "interval"


@dataclass(frozen=True)
class OverlapPolicy:
    """How long a booking occupies a table and which rule detects conflicts"""
    duration_minutes: int
    buffer_minutes: int = 0
    rule: OverlapRule = OverlapRule.DISTANCE

    @property
    def window_minutes(self) -> int:
        return self.duration_minutes + self.buffer_minutes


FORM_POLICY = OverlapPolicy(duration_minutes=90, buffer_minutes=15, rule=OverlapRule.DISTANCE)
WIZARD_POLICY = OverlapPolicy(duration_minutes=120, buffer_minutes=0, rule=OverlapRule.INTERVAL)


def parse_time(value: Union[str, None]) -> int:
    """Convert HH:MM or HH:MM:SS to minutes since midnight"""
    if not isinstance(value, str):
        raise TimeFormatError(f"Invalid time: {value!r}")

    match = _TIME_RE.match(value.strip())
    if not match:
        raise TimeFormatError(f"Invalid time: {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise TimeFormatError(f"Invalid time: {value!r}")

    return hour * 60 + minute


def format_time(minutes: int) -> str:
    """Minutes since midnight back to HH:MM"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def distance_conflict(candidate: int, existing: int, window: int) -> bool:
    return abs(candidate - existing) < window


def interval_conflict(candidate: int, existing: int, window: int) -> bool:
    return candidate < existing + window and candidate + window > existing


def times_conflict(candidate: str, existing: str, policy: OverlapPolicy = FORM_POLICY) -> bool:
    """
    Decide whether a candidate booking time collides with an existing one.

    Unparseable times count as a conflict so a bad record never frees a table.
    """
    try:
        start = parse_time(candidate)
        other = parse_time(existing)
    except TimeFormatError:
        return True

    if policy.rule == OverlapRule.INTERVAL:
        return interval_conflict(start, other, policy.window_minutes)
    return distance_conflict(start, other, policy.window_minutes)


def _field(record, name):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def booked_table_numbers(
    candidate: str,
    reservations: Iterable,
    policy: OverlapPolicy = FORM_POLICY,
) -> List[int]:
    """Table numbers held by active reservations that conflict with `candidate`"""
    booked = []
    for reservation in reservations:
        table_number = _field(reservation, "table_number")
        if not table_number:
            continue
        if _field(reservation, "status") not in ACTIVE_STATUSES:
            continue
        if times_conflict(candidate, _field(reservation, "reservation_time"), policy):
            if table_number not in booked:
                booked.append(table_number)
    return booked
