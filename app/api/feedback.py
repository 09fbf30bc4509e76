"""Guest feedback endpoints"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.errors import NotFound, SlotConflict, ValidationFailed
from app.models.feedback import Feedback
from app.models.reservation import Reservation
from app.models.user import User
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackListItem,
    FeedbackPage,
    FeedbackReservation,
    FeedbackResponse,
    FeedbackStats,
)
from app.api.auth import get_current_active_user
from app.services.feedback import feedback_exists, feedback_stats, find_reservation_by_code

router = APIRouter()
logger = structlog.get_logger()


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    feedback_data: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
):
    """Rate a visit; one submission per reservation"""
    result = await db.execute(
        select(Reservation.id).where(Reservation.id == feedback_data.reservation_id)
    )
    if result.first() is None:
        raise NotFound("Reservation not found")

    if await feedback_exists(db, feedback_data.reservation_id):
        raise SlotConflict("Feedback already submitted for this reservation")

    feedback = Feedback(**feedback_data.model_dump())
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)

    logger.info(
        "Feedback submitted",
        reservation_id=str(feedback.reservation_id),
        rating=feedback.rating,
    )
    return {
        "success": True,
        "message": "Feedback submitted successfully",
        "data": FeedbackResponse.model_validate(feedback),
    }


@router.get("/lookup")
async def lookup_for_feedback(
    code: str = Query(""),
    db: AsyncSession = Depends(get_db),
):
    """Find the booking a guest wants to rate"""
    if not code.strip():
        raise ValidationFailed("กรุณาระบุรหัสการจอง")

    reservation = await find_reservation_by_code(db, code)
    if not reservation:
        raise NotFound("ไม่พบรหัสการจองนี้ กรุณาตรวจสอบรหัสอีกครั้ง")

    if await feedback_exists(db, reservation.id):
        raise SlotConflict("คุณได้ให้คะแนนสำหรับการจองนี้แล้ว")

    return {"success": True, "reservation": FeedbackReservation.model_validate(reservation)}


@router.get("", response_model=FeedbackPage)
async def list_feedback(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest feedback first, with rating stats"""
    result = await db.execute(
        select(Feedback, Reservation.guest_name, Reservation.reservation_date)
        .outerjoin(Reservation, Reservation.id == Feedback.reservation_id)
        .order_by(Feedback.created_at.desc())
        .limit(limit)
        .offset(offset)
    )

    items = [
        FeedbackListItem(
            **FeedbackResponse.model_validate(feedback).model_dump(),
            guest_name=guest_name,
            reservation_date=reservation_date,
        )
        for feedback, guest_name, reservation_date in result.all()
    ]
    stats = await feedback_stats(db)

    return FeedbackPage(
        data=items,
        total=stats["total_feedback"],
        limit=limit,
        offset=offset,
        stats=FeedbackStats(**stats),
    )
