"""Public booking status lookup"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import NotFound, ValidationFailed
from app.models.feedback import Feedback
from app.models.reservation import Reservation
from app.schemas.feedback import Testimonial
from app.schemas.reservation import BookingLookupResponse
from app.services.feedback import mask_reviewer_name
from app.services.reservations import mask_name

router = APIRouter()


@router.get("/check-booking")
async def check_booking(
    code: str = Query(""),
    db: AsyncSession = Depends(get_db),
):
    """Find the latest reservation by booking code or phone number"""
    if len(code.strip()) < 4:
        raise ValidationFailed("กรุณากรอกรหัสการจองให้ถูกต้อง")

    clean_code = code.strip().upper()

    result = await db.execute(
        select(Reservation)
        .where(
            or_(
                Reservation.booking_code == clean_code,
                Reservation.guest_phone == clean_code,
            )
        )
        .order_by(Reservation.created_at.desc())
        .limit(1)
    )
    reservation = result.scalar_one_or_none()

    if not reservation:
        raise NotFound("ไม่พบข้อมูลการจอง กรุณาตรวจสอบรหัส BX- หรือเบอร์โทรศัพท์อีกครั้ง")

    return {
        "data": BookingLookupResponse(
            id=reservation.id,
            short_id=reservation.booking_code or str(reservation.id)[:8],
            booking_code=reservation.booking_code,
            guest_name=mask_name(reservation.guest_name),
            guest_phone=reservation.guest_phone,
            party_size=reservation.party_size,
            reservation_date=reservation.reservation_date,
            reservation_time=reservation.reservation_time,
            table_number=reservation.table_number,
            status=reservation.status,
        )
    }


@router.get("/feedback")
async def testimonials(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Recent 4 and 5 star reviews for the landing page"""
    result = await db.execute(
        select(Feedback)
        .where(Feedback.rating >= 4)
        .order_by(Feedback.created_at.desc())
        .limit(limit)
    )

    return {
        "success": True,
        "data": [
            Testimonial(
                id=feedback.id,
                rating=feedback.rating,
                comment=feedback.comment,
                customer_name=mask_reviewer_name(feedback.customer_name),
                created_at=feedback.created_at,
            )
            for feedback in result.scalars().all()
        ],
    }
