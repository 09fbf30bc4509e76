"""Reservation helpers: booking codes, status rules, expiry sweep"""

import secrets
from datetime import datetime, timedelta
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.overlap import OverlapPolicy, times_conflict
from app.models.reservation import Reservation
from app.services.availability import active_reservations

logger = structlog.get_logger()

BOOKING_CODE_PREFIX = "BX-"

ALLOWED_TRANSITIONS = {
    "pending": ["confirmed", "cancelled", "completed"],
    "confirmed": ["pending", "cancelled", "completed"],
    "cancelled": ["pending"],
    "completed": [],
}


def can_transition(current: str, new: str) -> bool:
    return current == new or new in ALLOWED_TRANSITIONS.get(current, [])


async def generate_booking_code(db: AsyncSession) -> str:
    """Random BX-###### code not used by any reservation"""
    while True:
        code = f"{BOOKING_CODE_PREFIX}{secrets.randbelow(10**6):06d}"
        result = await db.execute(select(Reservation.id).where(Reservation.booking_code == code))
        if result.first() is None:
            return code


def mask_name(name: str) -> str:
    """Keep the first letter of each word: 'Somchai Jaidee' -> 'S****** J*****'"""
    return " ".join(part[0] + "*" * (len(part) - 1) for part in name.split() if part)


async def find_table_conflict(
    db: AsyncSession,
    reservation_date,
    reservation_time: str,
    table_number: Optional[int],
    policy: OverlapPolicy,
    exclude_id=None,
) -> Optional[Reservation]:
    """First active reservation on the same table whose window overlaps"""
    if not table_number:
        return None

    existing = await active_reservations(
        db, reservation_date, table_number=table_number, exclude_id=exclude_id
    )
    for reservation in existing:
        if times_conflict(reservation_time, reservation.reservation_time, policy):
            return reservation
    return None


async def cancel_expired_pending(
    db: AsyncSession,
    expiry_minutes: int,
    now: Optional[datetime] = None,
) -> List[str]:
    """Cancel pending reservations created more than `expiry_minutes` ago"""
    cutoff = (now or datetime.utcnow()) - timedelta(minutes=expiry_minutes)

    result = await db.execute(
        select(Reservation).where(
            Reservation.status == "pending",
            Reservation.created_at < cutoff,
        )
    )
    expired = result.scalars().all()

    cancelled = []
    for reservation in expired:
        reservation.status = "cancelled"
        reservation.updated_at = datetime.utcnow()
        cancelled.append(str(reservation.id))
        logger.info(
            "Auto-cancelled reservation",
            reservation_id=str(reservation.id),
            booking_code=reservation.booking_code,
        )

    await db.commit()
    return cancelled
