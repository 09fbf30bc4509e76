"""Tests for the client-side slot hold negotiator"""

import asyncio
import json
import re

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.booking.negotiator import (
    SESSION_STORAGE_KEY,
    BookingConflict,
    HoldRejected,
    NegotiatorState,
    SlotHoldNegotiator,
    SlotServiceError,
    session_id_for,
)
from app.errors import ErrorKind
from app.main import app

DAY = "2024-06-01"

SLOTS = {
    "slots": [
        {"time": "18:00", "label": "18:00 น.", "status": "available"},
        {"time": "19:45", "label": "19:45 น.", "status": "available"},
    ]
}


class RecordingBackend:
    """Fake slot API that records every call in order"""

    def __init__(self):
        self.calls = []
        self.refuse = set()
        self.gate = None
        self.entered = asyncio.Event()

    def actions(self):
        return [(c["action"], c["time"]) for c in self.calls if c["method"] == "POST"]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.calls.append({"method": "GET", "date": request.url.params.get("date")})
            return httpx.Response(200, json=SLOTS)

        body = json.loads(request.content)
        if request.url.path == "/api/reservations":
            self.calls.append({"method": "POST", "action": "reserve", "time": body["reservation_time"]})
            if "reserve" in self.refuse:
                return httpx.Response(409, json={"success": False, "error": "Table taken", "code": "conflict"})
            return httpx.Response(201, json={"data": {"id": "r1", "status": "pending"}})

        self.calls.append(
            {"method": "POST", "action": body["action"], "time": body["time"], "date": body["date"]}
        )
        if body["action"] == "hold" and self.gate is not None:
            self.entered.set()
            await self.gate.wait()
        if body["action"] == "hold" and body["time"] in self.refuse:
            return httpx.Response(
                409, json={"success": False, "error": "Slot held", "code": "conflict"}
            )
        return httpx.Response(200, json={"success": True})


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
async def negotiator(backend):
    client = AsyncClient(transport=httpx.MockTransport(backend), base_url="http://test")
    negotiator = SlotHoldNegotiator(date=DAY, session_id="session-a", client=client)
    yield negotiator
    await negotiator.aclose()
    await client.aclose()


def test_session_id_created_once():
    storage = {}

    first = session_id_for(storage)
    second = session_id_for(storage)

    assert first == second
    assert storage[SESSION_STORAGE_KEY] == first
    assert re.match(r"^session_\d+_[a-z0-9]{9}$", first)


async def test_switching_slots_releases_previous_first(negotiator, backend):
    assert await negotiator.select("18:00") == "18:00"
    assert await negotiator.select("19:45") == "19:45"

    assert backend.actions() == [
        ("hold", "18:00"),
        ("release", "18:00"),
        ("hold", "19:45"),
    ]
    assert negotiator.value == "19:45"
    assert negotiator.state == NegotiatorState.HELD


async def test_reselecting_same_slot_does_not_release(negotiator, backend):
    await negotiator.select("18:00")
    await negotiator.select("18:00")

    assert backend.actions() == [("hold", "18:00"), ("hold", "18:00")]


async def test_rejected_hold_refetches_and_raises(negotiator, backend):
    backend.refuse.add("18:00")

    with pytest.raises(HoldRejected) as exc_info:
        await negotiator.select("18:00")

    assert exc_info.value.error == "Slot held"
    assert exc_info.value.kind == ErrorKind.CONFLICT
    assert negotiator.state == NegotiatorState.IDLE
    assert negotiator.value is None
    assert backend.calls[-1]["method"] == "GET"


async def test_select_requires_date(backend):
    client = AsyncClient(transport=httpx.MockTransport(backend), base_url="http://test")
    async with SlotHoldNegotiator(session_id="session-a", client=client) as negotiator:
        with pytest.raises(SlotServiceError) as exc_info:
            await negotiator.select("18:00")

    assert exc_info.value.kind == ErrorKind.VALIDATION
    assert backend.calls == []
    await client.aclose()


async def test_change_date_releases_hold(negotiator, backend):
    await negotiator.select("18:00")

    await negotiator.change_date("2024-06-02")

    assert backend.calls[-1] == {"method": "POST", "action": "release", "time": "18:00", "date": DAY}
    assert negotiator.value is None
    assert negotiator.date == "2024-06-02"


async def test_stale_hold_response_is_discarded_and_released(negotiator, backend):
    backend.gate = asyncio.Event()

    pending = asyncio.create_task(negotiator.select("18:00"))
    await backend.entered.wait()

    await negotiator.change_date("2024-06-02")
    backend.gate.set()

    assert await pending is None
    assert negotiator.value is None
    assert negotiator.state == NegotiatorState.IDLE
    assert backend.actions() == [("hold", "18:00"), ("release", "18:00")]


async def test_aclose_releases_live_hold(backend):
    client = AsyncClient(transport=httpx.MockTransport(backend), base_url="http://test")

    async with SlotHoldNegotiator(date=DAY, session_id="session-a", client=client) as negotiator:
        await negotiator.select("18:00")

    assert backend.actions() == [("hold", "18:00"), ("release", "18:00")]
    assert negotiator.state == NegotiatorState.IDLE
    await client.aclose()


async def test_subscribers_receive_slot_lists(negotiator):
    received = []
    unsubscribe = negotiator.subscribe(received.append)

    await negotiator.fetch_slots()
    unsubscribe()
    await negotiator.fetch_slots()

    assert len(received) == 1
    assert [slot.time for slot in received[0]] == ["18:00", "19:45"]


async def test_open_polls_until_close(backend):
    client = AsyncClient(transport=httpx.MockTransport(backend), base_url="http://test")
    negotiator = SlotHoldNegotiator(
        date=DAY, session_id="session-a", client=client, poll_interval=0.01
    )

    await negotiator.open()
    assert negotiator.is_open
    await asyncio.sleep(0.1)
    negotiator.close()

    fetched = len(backend.calls)
    await asyncio.sleep(0.05)

    assert fetched >= 3
    assert len(backend.calls) == fetched
    assert not negotiator.is_open
    await negotiator.aclose()
    await client.aclose()


async def test_hold_closes_picker(backend):
    client = AsyncClient(transport=httpx.MockTransport(backend), base_url="http://test")
    negotiator = SlotHoldNegotiator(
        date=DAY, session_id="session-a", client=client, poll_interval=0.01
    )

    await negotiator.open()
    await negotiator.select("18:00")

    assert not negotiator.is_open
    await negotiator.aclose()
    await client.aclose()


async def test_keepalive_refreshes_hold(backend):
    client = AsyncClient(transport=httpx.MockTransport(backend), base_url="http://test")
    negotiator = SlotHoldNegotiator(
        date=DAY, session_id="session-a", client=client, refresh_interval=0.02
    )

    await negotiator.select("18:00")
    await asyncio.sleep(0.1)
    await negotiator.aclose()

    holds = [call for call in backend.actions() if call == ("hold", "18:00")]
    assert len(holds) >= 3
    await client.aclose()


async def test_submit_conflict_keeps_hold(negotiator, backend):
    await negotiator.select("18:00")
    backend.refuse.add("reserve")

    with pytest.raises(BookingConflict) as exc_info:
        await negotiator.submit({"guest_name": "Somchai Jaidee"})

    assert exc_info.value.error == "Table taken"
    assert negotiator.value == "18:00"
    assert backend.calls[-1]["method"] == "GET"


async def test_submit_requires_hold(negotiator):
    with pytest.raises(SlotServiceError):
        await negotiator.submit({"guest_name": "Somchai Jaidee"})


async def test_network_failure_maps_to_network_error():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = AsyncClient(transport=httpx.MockTransport(fail), base_url="http://test")
    negotiator = SlotHoldNegotiator(date=DAY, session_id="session-a", client=client)

    with pytest.raises(SlotServiceError) as exc_info:
        await negotiator.fetch_slots()

    assert exc_info.value.kind == ErrorKind.NETWORK
    assert negotiator.state == NegotiatorState.IDLE
    await negotiator.aclose()
    await client.aclose()


async def test_two_sessions_end_to_end(override_dependencies, evening_hours, one_table):
    """One guest holds 18:00, a second is refused, the first books, both then see it booked"""
    client_s = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    client_t = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    session_s = SlotHoldNegotiator(date=DAY, session_id="session-s", client=client_s)
    session_t = SlotHoldNegotiator(date=DAY, session_id="session-t", client=client_t)

    try:
        slots = await session_s.fetch_slots()
        assert slots[0].time == "18:00"
        assert slots[0].status == "available"

        assert await session_s.select("18:00") == "18:00"

        with pytest.raises(HoldRejected) as exc_info:
            await session_t.select("18:00")
        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert session_t.slots[0].status == "held"

        reservation = await session_s.submit(
            {
                "guest_name": "Somchai Jaidee",
                "guest_phone": "0812345678",
                "party_size": 2,
                "table_number": 1,
            }
        )
        assert reservation["status"] == "pending"
        assert reservation["reservation_time"] == "18:00"
        assert session_s.state == NegotiatorState.IDLE

        for session in (session_s, session_t):
            slots = await session.fetch_slots()
            assert slots[0].status == "booked"
    finally:
        await session_s.aclose()
        await session_t.aclose()
        await client_s.aclose()
        await client_t.aclose()


async def test_aclose_during_hold_releases_before_closing_client(backend):
    """A hold answered after aclose() started is released on the still-open client"""
    backend.gate = asyncio.Event()
    negotiator = SlotHoldNegotiator(
        base_url="http://test",
        date=DAY,
        session_id="session-a",
        transport=httpx.MockTransport(backend),
    )

    pending = asyncio.create_task(negotiator.select("18:00"))
    await backend.entered.wait()

    closing = asyncio.create_task(negotiator.aclose())
    await asyncio.sleep(0)
    assert not closing.done()

    backend.gate.set()

    assert await pending is None
    await closing

    assert backend.actions() == [("hold", "18:00"), ("release", "18:00")]
    assert negotiator.state == NegotiatorState.IDLE
    assert negotiator._client.is_closed
