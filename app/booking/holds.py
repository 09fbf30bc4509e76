"""Server-side time slot holds"""

import asyncio
import time as _time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from app.booking.overlap import OverlapPolicy, times_conflict
from app.errors import SlotConflict, message

logger = structlog.get_logger()


@dataclass
class Hold:
    """A session's soft claim on one date+time slot"""
    date: str
    time: str
    session_id: str
    held_at: float


class HoldStore:
    """
    In-process registry of slot holds.

    Holds are keyed by (date, time, session_id) and expire `ttl_seconds` after
    they were last acquired. A session keeps at most one hold per date.
    All mutations run under a single asyncio lock, so the availability check
    and the claim happen atomically with respect to other requests.
    """

    def __init__(
        self,
        policy: OverlapPolicy,
        ttl_seconds: float = 30,
        clock: Callable[[], float] = _time.monotonic,
    ):
        self.policy = policy
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._holds: Dict[Tuple[str, str, str], Hold] = {}
        self._lock = asyncio.Lock()
        # Serializes the final table check and insert of reservation submissions
        self.commit_lock = asyncio.Lock()

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [
            key for key, hold in self._holds.items()
            if now - hold.held_at > self.ttl_seconds
        ]
        for key in expired:
            hold = self._holds.pop(key)
            logger.debug("Hold expired", date=hold.date, time=hold.time, session_id=hold.session_id)

    def _overlapping_foreign_holds(self, date: str, time: str, session_id: Optional[str]) -> int:
        return sum(
            1
            for hold in self._holds.values()
            if hold.date == date
            and hold.session_id != session_id
            and times_conflict(time, hold.time, self.policy)
        )

    async def acquire(
        self,
        date: str,
        time: str,
        session_id: str,
        capacity: int,
        booked: int,
        locale: Optional[str] = None,
    ) -> Hold:
        """Claim a slot for a session or raise SlotConflict"""
        async with self._lock:
            self._purge_expired()

            if booked >= capacity:
                raise SlotConflict(message("slot_fully_booked", locale))

            held = self._overlapping_foreign_holds(date, time, session_id)
            if booked + held >= capacity:
                logger.info(
                    "Hold refused",
                    date=date,
                    time=time,
                    session_id=session_id,
                    booked=booked,
                    held=held,
                    capacity=capacity,
                )
                raise SlotConflict(message("slot_held", locale))

            for key in [k for k in self._holds if k[0] == date and k[2] == session_id]:
                del self._holds[key]

            hold = Hold(date=date, time=time, session_id=session_id, held_at=self._clock())
            self._holds[(date, time, session_id)] = hold

        logger.info("Slot held", date=date, time=time, session_id=session_id)
        return hold

    async def release(self, date: str, time: str, session_id: str) -> bool:
        """Drop a hold if `session_id` owns it; returns whether one was removed"""
        async with self._lock:
            self._purge_expired()
            removed = self._holds.pop((date, time, session_id), None)

        if removed:
            logger.info("Slot released", date=date, time=time, session_id=session_id)
        return removed is not None

    async def release_session(self, date: str, session_id: str) -> None:
        """Drop whatever a session holds on a date"""
        async with self._lock:
            for key in [k for k in self._holds if k[0] == date and k[2] == session_id]:
                del self._holds[key]

    async def holds_for(self, date: str) -> List[Hold]:
        """Live holds on a date"""
        async with self._lock:
            self._purge_expired()
            return [hold for hold in self._holds.values() if hold.date == date]

    def owner_of(self, date: str, time: str) -> List[str]:
        """Session ids currently holding exactly this slot"""
        self._purge_expired()
        return [
            hold.session_id
            for hold in self._holds.values()
            if hold.date == date and hold.time == time
        ]
