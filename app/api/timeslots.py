"""Time slot listing and hold/release endpoints"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.booking.holds import HoldStore
from app.booking.slots import build_time_slots, count_booked, hours_for
from app.config import settings
from app.database import get_db
from app.dependencies import get_hold_store
from app.errors import ValidationFailed, message
from app.schemas.timeslot import TimeSlotList, HoldRequest, HoldResponse
from app.services.availability import (
    active_reservations,
    count_tables,
    get_business_hours,
    is_holiday,
    restaurant_now,
)

router = APIRouter()
logger = structlog.get_logger()


@router.get("", response_model=TimeSlotList)
async def list_time_slots(
    day: date = Query(..., alias="date"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    locale: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    holds: HoldStore = Depends(get_hold_store),
):
    """Slots for a date with status available, booked or held"""
    if await is_holiday(db, day):
        return TimeSlotList(slots=[])

    opening_hours = await get_business_hours(db)
    total_tables = await count_tables(db)
    reservations = await active_reservations(db, day)
    live_holds = await holds.holds_for(day.isoformat())

    slots = build_time_slots(
        day,
        reservations,
        opening_hours,
        total_tables,
        live_holds,
        holds.policy,
        session_id=session_id,
        now=restaurant_now(),
        locale=locale or settings.default_locale,
    )
    return TimeSlotList(slots=slots)


@router.post("", response_model=HoldResponse)
async def hold_or_release(
    request: HoldRequest,
    db: AsyncSession = Depends(get_db),
    holds: HoldStore = Depends(get_hold_store),
):
    """Hold or release a slot for the caller's session"""
    day_key = request.date.isoformat()

    if request.action == "release":
        await holds.release(day_key, request.time, request.session_id)
        return HoldResponse(success=True)

    locale = request.locale or settings.default_locale

    opening_hours = await get_business_hours(db)
    if hours_for(request.date, opening_hours) is None or await is_holiday(db, request.date):
        logger.info("Hold refused, restaurant closed", date=day_key, session_id=request.session_id)
        raise ValidationFailed(message("restaurant_closed", locale))

    total_tables = await count_tables(db)
    reservations = await active_reservations(db, request.date)
    booked = count_booked(request.time, reservations, holds.policy)

    await holds.acquire(
        day_key,
        request.time,
        request.session_id,
        capacity=total_tables,
        booked=booked,
        locale=locale,
    )
    return HoldResponse(success=True)
