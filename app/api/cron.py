"""Scheduled maintenance endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.feed import Action, ChangeEvent, ChangeFeed, Entity
from app.config import settings
from app.database import get_db
from app.dependencies import get_change_feed
from app.schemas.reservation import AutoCancelResponse
from app.services.reservations import cancel_expired_pending

router = APIRouter()


@router.get("/auto-cancel", response_model=AutoCancelResponse)
async def auto_cancel(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Cancel pending reservations left unconfirmed too long"""
    if settings.cron_secret and authorization != f"Bearer {settings.cron_secret}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    cancelled = await cancel_expired_pending(db, settings.pending_expiry_minutes)

    for reservation_id in cancelled:
        await feed.publish(ChangeEvent(Entity.RESERVATIONS, Action.UPDATE, reservation_id))

    if not cancelled:
        return AutoCancelResponse(message="No expired reservations to cancel", cancelled=0)

    return AutoCancelResponse(
        message=f"Cancelled {len(cancelled)} expired reservations",
        cancelled=len(cancelled),
        ids=cancelled,
    )
