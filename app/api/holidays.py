"""Holiday (closed date) endpoints"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.feed import Action, ChangeEvent, ChangeFeed, Entity
from app.database import get_db
from app.dependencies import get_change_feed
from app.errors import SlotConflict, ValidationFailed
from app.models.setting import Holiday
from app.models.user import User
from app.schemas.setting import HolidayBatch, HolidayResponse
from app.api.auth import get_current_active_user
from app.services.audit import record_audit

router = APIRouter()


@router.get("")
async def list_holidays(db: AsyncSession = Depends(get_db)):
    """All closed dates in order"""
    result = await db.execute(select(Holiday).order_by(Holiday.holiday_date.asc()))
    return {"data": [HolidayResponse.model_validate(h) for h in result.scalars().all()]}


@router.post("")
async def add_holidays(
    batch: HolidayBatch,
    request: Request,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Add several closed dates at once"""
    if not batch.dates:
        raise ValidationFailed("Dates array is required")

    for item in batch.dates:
        db.add(Holiday(holiday_date=item.holiday_date, description=item.description))

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise SlotConflict("Some dates are already holidays")

    await record_audit(
        db,
        request,
        current_user,
        action="create_holiday",
        entity="holidays",
        payload={"dates": [item.model_dump(mode="json") for item in batch.dates]},
    )
    await db.commit()

    await feed.publish(ChangeEvent(Entity.HOLIDAYS, Action.INSERT))
    return {"success": True}


@router.delete("")
async def remove_holidays(
    request: Request,
    holiday_id: Optional[UUID] = Query(None, alias="id"),
    description: Optional[str] = None,
    delete_all: bool = Query(False, alias="all"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Delete one holiday, a described group, or every holiday"""
    if delete_all:
        statement = delete(Holiday)
    elif description:
        statement = delete(Holiday).where(Holiday.description == description)
    elif holiday_id:
        statement = delete(Holiday).where(Holiday.id == holiday_id)
    else:
        raise ValidationFailed("Missing filter")

    await db.execute(statement)
    await record_audit(
        db,
        request,
        current_user,
        action="delete_holiday",
        entity="holidays",
        entity_id=str(holiday_id) if holiday_id else None,
        payload={"id": str(holiday_id) if holiday_id else None, "description": description, "all": delete_all},
    )
    await db.commit()

    await feed.publish(ChangeEvent(Entity.HOLIDAYS, Action.DELETE, str(holiday_id) if holiday_id else None))
    return {"success": True}
