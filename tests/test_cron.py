"""Tests for the pending reservation sweep"""

from datetime import date, datetime, timedelta

import pytest
from httpx import AsyncClient

from app.config import settings
from app.models.reservation import Reservation
from app.services.reservations import cancel_expired_pending


def pending(code, age_minutes, status="pending"):
    return Reservation(
        booking_code=code,
        guest_name="Somchai Jaidee",
        guest_phone="0812345678",
        party_size=2,
        reservation_date=date(2024, 6, 1),
        reservation_time="18:00",
        status=status,
        created_at=datetime.utcnow() - timedelta(minutes=age_minutes),
    )


async def test_cancel_expired_pending(test_db):
    stale = pending("BX-000001", 45)
    fresh = pending("BX-000002", 5)
    confirmed = pending("BX-000003", 120, status="confirmed")
    for row in (stale, fresh, confirmed):
        test_db.add(row)
    await test_db.commit()

    cancelled = await cancel_expired_pending(test_db, expiry_minutes=30)

    assert cancelled == [str(stale.id)]
    await test_db.refresh(stale)
    await test_db.refresh(fresh)
    await test_db.refresh(confirmed)
    assert stale.status == "cancelled"
    assert fresh.status == "pending"
    assert confirmed.status == "confirmed"


async def test_auto_cancel_endpoint(client: AsyncClient, test_db):
    test_db.add(pending("BX-000001", 45))
    test_db.add(pending("BX-000002", 60))
    await test_db.commit()

    response = await client.get("/api/cron/auto-cancel")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["cancelled"] == 2
    assert body["message"] == "Cancelled 2 expired reservations"

    again = await client.get("/api/cron/auto-cancel")
    assert again.json()["message"] == "No expired reservations to cancel"


async def test_auto_cancel_checks_secret(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")

    denied = await client.get("/api/cron/auto-cancel")
    wrong = await client.get("/api/cron/auto-cancel", headers={"Authorization": "Bearer nope"})
    allowed = await client.get("/api/cron/auto-cancel", headers={"Authorization": "Bearer s3cret"})

    assert denied.status_code == 401
    assert wrong.status_code == 401
    assert allowed.status_code == 200
