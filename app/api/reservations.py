"""Reservation management API endpoints"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.booking.feed import Action, ChangeEvent, ChangeFeed, Entity
from app.booking.holds import HoldStore
from app.config import settings
from app.database import get_db
from app.dependencies import get_change_feed, get_hold_store
from app.errors import NotFound, SlotConflict, ValidationFailed, message
from app.models.reservation import Reservation
from app.models.user import User
from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    PublicReservationSlot,
)
from app.api.auth import get_current_active_user, get_optional_user
from app.services.audit import record_audit
from app.services.availability import ACTIVE_STATUSES
from app.services.reservations import (
    can_transition,
    find_table_conflict,
    generate_booking_code,
)

router = APIRouter()
logger = structlog.get_logger()


async def _get_or_404(db: AsyncSession, reservation_id: UUID) -> Reservation:
    result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    reservation = result.scalar_one_or_none()
    if not reservation:
        raise NotFound("Reservation not found")
    return reservation


@router.get("")
async def list_reservations(
    status_filter: Optional[str] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List reservations ordered by date and time.

    Staff see full rows. Guests see only the time, table and status of
    active bookings, enough to grey out taken tables.
    """
    query = select(Reservation).order_by(
        Reservation.reservation_date.asc(),
        Reservation.reservation_time.asc(),
    )

    if status_filter:
        query = query.where(Reservation.status == status_filter)
    if day:
        query = query.where(Reservation.reservation_date == day)
    if current_user is None:
        query = query.where(Reservation.status.in_(ACTIVE_STATUSES))

    result = await db.execute(query)
    reservations = result.scalars().all()

    schema = ReservationResponse if current_user else PublicReservationSlot
    return {"data": [schema.model_validate(r) for r in reservations]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    holds: HoldStore = Depends(get_hold_store),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Create a pending reservation; 409 if the table is taken at that time"""
    locale = reservation_data.locale or settings.default_locale

    async with holds.commit_lock:
        conflict = await find_table_conflict(
            db,
            reservation_data.reservation_date,
            reservation_data.reservation_time,
            reservation_data.table_number,
            holds.policy,
        )
        if conflict:
            logger.info(
                "Reservation refused",
                date=str(reservation_data.reservation_date),
                time=reservation_data.reservation_time,
                table_number=reservation_data.table_number,
                conflicting_id=str(conflict.id),
            )
            raise SlotConflict(
                message("table_taken", locale, minutes=holds.policy.window_minutes)
            )

        fields = reservation_data.model_dump(exclude={"session_id", "locale"})
        if current_user is None:
            fields["admin_notes"] = None

        reservation = Reservation(
            **fields,
            booking_code=await generate_booking_code(db),
            status="pending",
        )
        db.add(reservation)
        await db.commit()
        await db.refresh(reservation)

    if reservation_data.session_id:
        await holds.release_session(
            reservation_data.reservation_date.isoformat(), reservation_data.session_id
        )

    logger.info(
        "Reservation created",
        reservation_id=str(reservation.id),
        booking_code=reservation.booking_code,
        date=str(reservation.reservation_date),
        time=reservation.reservation_time,
    )
    await feed.publish(ChangeEvent(Entity.RESERVATIONS, Action.INSERT, str(reservation.id)))

    return {"data": ReservationResponse.model_validate(reservation)}


@router.get("/{reservation_id}")
async def get_reservation(
    reservation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get reservation details"""
    reservation = await _get_or_404(db, reservation_id)
    return {"data": ReservationResponse.model_validate(reservation)}


@router.put("/{reservation_id}")
async def update_reservation(
    reservation_id: UUID,
    reservation_data: ReservationUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    holds: HoldStore = Depends(get_hold_store),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Edit a reservation or move it through its status lifecycle"""
    changes = reservation_data.model_dump(exclude_unset=True)

    async with holds.commit_lock:
        reservation = await _get_or_404(db, reservation_id)

        new_status = changes.get("status", reservation.status)
        if not can_transition(reservation.status, new_status):
            raise ValidationFailed(
                f"Cannot change status from {reservation.status} to {new_status}"
            )

        moves = {"reservation_date", "reservation_time", "table_number"} & changes.keys()
        reactivates = reservation.status not in ACTIVE_STATUSES and new_status in ACTIVE_STATUSES
        if new_status in ACTIVE_STATUSES and (moves or reactivates):
            conflict = await find_table_conflict(
                db,
                changes.get("reservation_date", reservation.reservation_date),
                changes.get("reservation_time", reservation.reservation_time),
                changes.get("table_number", reservation.table_number),
                holds.policy,
                exclude_id=reservation.id,
            )
            if conflict:
                raise SlotConflict(
                    message("table_taken", settings.default_locale, minutes=holds.policy.window_minutes)
                )

        for field, value in changes.items():
            setattr(reservation, field, value)
        reservation.updated_at = datetime.utcnow()

        await db.commit()
        await db.refresh(reservation)

    logger.info(
        "Reservation updated",
        reservation_id=str(reservation.id),
        fields=sorted(changes.keys()),
        user_id=str(current_user.id),
    )
    await feed.publish(ChangeEvent(Entity.RESERVATIONS, Action.UPDATE, str(reservation.id)))

    return {"data": ReservationResponse.model_validate(reservation)}


@router.delete("/{reservation_id}")
async def delete_reservation(
    reservation_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Permanently delete a reservation"""
    reservation = await _get_or_404(db, reservation_id)

    await record_audit(
        db,
        request,
        current_user,
        action="delete_reservation",
        entity="reservations",
        entity_id=str(reservation.id),
        payload={
            "booking_code": reservation.booking_code,
            "guest_name": reservation.guest_name,
            "reservation_date": reservation.reservation_date.isoformat(),
            "reservation_time": reservation.reservation_time,
        },
    )
    await db.delete(reservation)
    await db.commit()

    await feed.publish(ChangeEvent(Entity.RESERVATIONS, Action.DELETE, str(reservation_id)))

    return {"message": "Reservation deleted successfully"}
