"""Guest feedback lookups"""

import re
import uuid
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.feedback import Feedback
from app.models.reservation import Reservation


def mask_reviewer_name(name: Optional[str]) -> str:
    """Keep up to two letters of each word: 'John Doe' -> 'Jo*** Do***'"""
    if not name or not name.strip():
        return "Guest"

    def mask(part: str) -> str:
        if len(part) <= 1:
            return part + "***"
        if len(part) == 2:
            return part[0] + "***"
        return part[:2] + "***"

    return " ".join(mask(part) for part in name.split())


async def find_reservation_by_code(db: AsyncSession, code: str) -> Optional[Reservation]:
    """Match a booking code, or a reservation id with or without the BX- prefix"""
    clean_code = code.strip()

    result = await db.execute(
        select(Reservation).where(Reservation.booking_code == clean_code.upper()).limit(1)
    )
    reservation = result.scalar_one_or_none()
    if reservation:
        return reservation

    try:
        reservation_id = uuid.UUID(re.sub(r"^BX-", "", clean_code, flags=re.IGNORECASE))
    except ValueError:
        return None

    result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    return result.scalar_one_or_none()


async def feedback_exists(db: AsyncSession, reservation_id) -> bool:
    result = await db.execute(select(Feedback.id).where(Feedback.reservation_id == reservation_id))
    return result.first() is not None


async def feedback_stats(db: AsyncSession) -> dict:
    """Average rating (one decimal) and total count"""
    result = await db.execute(select(func.avg(Feedback.rating), func.count(Feedback.id)))
    average, total = result.one()
    return {
        "average_rating": round(float(average), 1) if average is not None else None,
        "total_feedback": total,
    }
