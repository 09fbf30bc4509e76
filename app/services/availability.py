"""Availability lookups shared by the timeslot and reservation endpoints"""

from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.slots import DEFAULT_OPENING_HOURS
from app.config import settings
from app.models.reservation import Reservation
from app.models.setting import Setting, Holiday
from app.models.table import DiningTable

ACTIVE_STATUSES = ["confirmed", "pending"]


def restaurant_now() -> datetime:
    """Current wall-clock time at the restaurant, naive"""
    return datetime.now(ZoneInfo(settings.restaurant_timezone)).replace(tzinfo=None)


async def get_business_hours(db: AsyncSession) -> dict:
    """Opening hours from settings, falling back to the defaults"""
    result = await db.execute(select(Setting).where(Setting.key == "business_hours"))
    setting = result.scalar_one_or_none()
    if setting is None or not isinstance(setting.value, dict) or not setting.value:
        return DEFAULT_OPENING_HOURS
    return setting.value


async def count_tables(db: AsyncSession) -> int:
    """Active tables, or the configured fallback when none are defined"""
    result = await db.execute(
        select(func.count(DiningTable.id)).where(DiningTable.is_active == True)
    )
    count = result.scalar() or 0
    return count if count > 0 else settings.default_total_tables


async def is_holiday(db: AsyncSession, day: date) -> bool:
    result = await db.execute(select(Holiday.id).where(Holiday.holiday_date == day))
    return result.first() is not None


async def active_reservations(
    db: AsyncSession,
    day: date,
    table_number: Optional[int] = None,
    exclude_id=None,
) -> List[Reservation]:
    """Pending and confirmed reservations on a date"""
    query = select(Reservation).where(
        Reservation.reservation_date == day,
        Reservation.status.in_(ACTIVE_STATUSES),
    )
    if table_number is not None:
        query = query.where(Reservation.table_number == table_number)
    if exclude_id is not None:
        query = query.where(Reservation.id != exclude_id)

    result = await db.execute(query)
    return list(result.scalars().all())

