"""
Client for negotiating time slot holds with the booking API.

Availability seen through this client is a hint: the server decides whether a
hold is granted, and the reservation endpoint makes the final check. A slot
that looked available in the last poll can still be refused.
"""

import asyncio
import contextlib
import enum
import inspect
import secrets
import string
import time as _time
from typing import Callable, List, MutableMapping, Optional

import httpx
import structlog

from app.booking.slots import TimeSlot
from app.errors import BookingError, ErrorKind, STATUS_CODES

logger = structlog.get_logger()

SESSION_STORAGE_KEY = "bookingSessionId"

_KIND_BY_STATUS = {status: kind for kind, status in STATUS_CODES.items()}


def new_session_id() -> str:
    """Opaque per-tab identifier: session_<epoch ms>_<9 random chars>"""
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(9))
    return f"session_{int(_time.time() * 1000)}_{suffix}"


def session_id_for(storage: MutableMapping[str, str]) -> str:
    """Read the session id from session-scoped storage, creating it once"""
    session_id = storage.get(SESSION_STORAGE_KEY)
    if not session_id:
        session_id = new_session_id()
        storage[SESSION_STORAGE_KEY] = session_id
    return session_id


class SlotServiceError(BookingError):
    """A slot or booking request failed"""
    kind = ErrorKind.NETWORK


class HoldRejected(SlotServiceError):
    """The server refused to hold the slot"""
    kind = ErrorKind.CONFLICT


class BookingConflict(SlotServiceError):
    """The reservation was refused because the table or time is taken"""
    kind = ErrorKind.CONFLICT


class NegotiatorState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    HOLDING = "holding"
    HELD = "held"


def _error_from_response(response: httpx.Response, error_class=SlotServiceError) -> SlotServiceError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    text = body.get("error") or body.get("detail") or f"HTTP {response.status_code}"
    if not isinstance(text, str):
        text = str(text)

    code = body.get("code")
    if code in {kind.value for kind in ErrorKind}:
        kind = ErrorKind(code)
    else:
        kind = _KIND_BY_STATUS.get(response.status_code, ErrorKind.SERVER)
    return error_class(text, kind)


class SlotHoldNegotiator:
    """
    Holds one date+time slot on behalf of a single session.

    State machine:
        IDLE -> FETCHING -> IDLE            fetch_slots()
        IDLE -> HOLDING -> HELD | IDLE      select(time)
        HELD -> HOLDING -> HELD | IDLE      select(other_time), previous hold released first
        HELD -> IDLE                        change_date(), submit(), aclose()

    While the picker is open (`open()` .. `close()`) the slot list is polled
    every `poll_interval` seconds. While a slot is held it is re-held every
    `refresh_interval` seconds so the server-side TTL does not lapse.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        date: Optional[str] = None,
        session_id: Optional[str] = None,
        locale: str = "th",
        poll_interval: float = 3.0,
        refresh_interval: float = 20.0,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.date = date
        self.session_id = session_id or new_session_id()
        self.locale = locale
        self.poll_interval = poll_interval
        self.refresh_interval = refresh_interval

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

        self.state = NegotiatorState.IDLE
        self.value: Optional[str] = None
        self.slots: List[TimeSlot] = []

        self._generation = 0
        self._poll_task: Optional[asyncio.Task] = None
        self._keepalive_task: Optional[asyncio.Task] = None
        self._listeners: List[Callable] = []

        # Set while no select() is waiting on the network
        self._selects_in_flight = 0
        self._selects_settled = asyncio.Event()
        self._selects_settled.set()

    async def __aenter__(self) -> "SlotHoldNegotiator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -- subscriptions ---------------------------------------------------

    def subscribe(self, listener: Callable[[List[TimeSlot]], None]) -> Callable[[], None]:
        """Register a callback for every fetched slot list; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            result = listener(list(self.slots))
            if inspect.isawaitable(result):
                await result

    # -- fetching ----------------------------------------------------------

    def _resting_state(self) -> NegotiatorState:
        return NegotiatorState.HELD if self.value else NegotiatorState.IDLE

    async def fetch_slots(self) -> List[TimeSlot]:
        """Reload the slot list for the current date"""
        if not self.date:
            return []

        date = self.date
        if self.state == NegotiatorState.IDLE:
            self.state = NegotiatorState.FETCHING

        try:
            response = await self._client.get(
                "/api/timeslots",
                params={"date": date, "sessionId": self.session_id, "locale": self.locale},
            )
        except httpx.HTTPError as e:
            raise SlotServiceError(str(e), ErrorKind.NETWORK) from e
        finally:
            if self.state == NegotiatorState.FETCHING:
                self.state = self._resting_state()

        if response.status_code >= 400:
            raise _error_from_response(response)

        if date != self.date:
            logger.debug("Discarding slots for previous date", date=date)
            return self.slots

        self.slots = [TimeSlot(**slot) for slot in response.json().get("slots", [])]
        await self._notify()
        return self.slots

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.fetch_slots()
            except SlotServiceError as e:
                logger.warning("Slot refresh failed", date=self.date, error=e.error)

    @property
    def is_open(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def open(self) -> List[TimeSlot]:
        """Fetch now and keep polling until close()"""
        slots = await self.fetch_slots()
        if not self.is_open:
            self._poll_task = asyncio.create_task(self._poll())
        return slots

    def close(self) -> None:
        """Stop polling"""
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    # -- holding -----------------------------------------------------------

    async def _post_action(self, date: str, time: str, action: str) -> httpx.Response:
        return await self._client.post(
            "/api/timeslots",
            json={
                "date": date,
                "time": time,
                "action": action,
                "sessionId": self.session_id,
                "locale": self.locale,
            },
        )

    async def _release(self, date: str, time: str) -> None:
        """Best-effort release; failures are logged, never raised"""
        try:
            response = await self._post_action(date, time, "release")
        except httpx.HTTPError as e:
            logger.warning("Failed to release time slot", date=date, time=time, error=str(e))
            return
        if response.status_code >= 400:
            logger.warning(
                "Release refused",
                date=date,
                time=time,
                status_code=response.status_code,
            )

    def _stop_keepalive(self) -> None:
        if self._keepalive_task is not None:
            self._keepalive_task.cancel()
            self._keepalive_task = None

    async def _keepalive(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            if self.state != NegotiatorState.HELD or not self.value:
                return
            date, time = self.date, self.value
            try:
                response = await self._post_action(date, time, "hold")
            except httpx.HTTPError as e:
                logger.warning("Hold refresh failed", date=date, time=time, error=str(e))
                continue
            if response.status_code >= 400 and self.value == time and self.date == date:
                logger.warning("Hold lost", date=date, time=time, status_code=response.status_code)
                self.value = None
                self.state = NegotiatorState.IDLE
                self._keepalive_task = None
                return

    async def select(self, time: str) -> Optional[str]:
        """
        Hold `time` on the current date.

        Returns the held time, or None when the response arrived after the
        date changed or the negotiator was closed. Raises HoldRejected when
        the server refuses; the slot list is re-fetched before raising.
        """
        self._selects_in_flight += 1
        self._selects_settled.clear()
        try:
            return await self._select(time)
        finally:
            self._selects_in_flight -= 1
            if not self._selects_in_flight:
                self._selects_settled.set()

    async def _select(self, time: str) -> Optional[str]:
        if not self.date:
            raise SlotServiceError("Select a date first", ErrorKind.VALIDATION)
        if self.state == NegotiatorState.HOLDING:
            raise SlotServiceError("A hold request is already in progress", ErrorKind.VALIDATION)

        self._generation += 1
        generation = self._generation
        date = self.date
        previous = self.value

        self.state = NegotiatorState.HOLDING
        self._stop_keepalive()

        try:
            if previous and previous != time:
                self.value = None
                await self._release(date, previous)
            response = await self._post_action(date, time, "hold")
        except httpx.HTTPError as e:
            if generation == self._generation:
                self.state = self._resting_state()
            raise SlotServiceError(str(e), ErrorKind.NETWORK) from e

        if generation != self._generation or date != self.date:
            logger.info("Discarding stale hold response", date=date, time=time)
            if response.status_code < 400:
                await self._release(date, time)
            return None

        if response.status_code < 400 and response.json().get("success"):
            self.value = time
            self.state = NegotiatorState.HELD
            self.close()
            self._keepalive_task = asyncio.create_task(self._keepalive())
            logger.info("Time slot held", date=date, time=time, session_id=self.session_id)
            return time

        self.value = None
        self.state = NegotiatorState.IDLE
        error = _error_from_response(response, HoldRejected)
        try:
            await self.fetch_slots()
        except SlotServiceError as e:
            logger.warning("Slot refresh after refusal failed", date=date, error=e.error)
        raise error

    async def change_date(self, date: str) -> None:
        """Switch dates, releasing any hold on the old one"""
        self._generation += 1
        self._stop_keepalive()

        previous_date, previous = self.date, self.value
        self.date = date
        self.value = None
        self.slots = []
        self.state = NegotiatorState.IDLE

        if previous_date and previous:
            await self._release(previous_date, previous)
        if self.is_open:
            await self.fetch_slots()

    # -- booking -----------------------------------------------------------

    async def submit(self, details: dict) -> dict:
        """
        Create a reservation for the held slot.

        `details` carries the guest fields (guest_name, guest_phone,
        party_size, ...). On 409 the slot list is re-fetched and
        BookingConflict is raised; the hold is kept so another table can be
        tried.
        """
        if not self.date or not self.value:
            raise SlotServiceError("Select a time before booking", ErrorKind.VALIDATION)

        payload = {
            **details,
            "reservation_date": self.date,
            "reservation_time": self.value,
            "sessionId": self.session_id,
            "locale": self.locale,
        }
        try:
            response = await self._client.post("/api/reservations", json=payload)
        except httpx.HTTPError as e:
            raise SlotServiceError(str(e), ErrorKind.NETWORK) from e

        if response.status_code == 409:
            error = _error_from_response(response, BookingConflict)
            try:
                await self.fetch_slots()
            except SlotServiceError as e:
                logger.warning("Slot refresh after conflict failed", date=self.date, error=e.error)
            raise error
        if response.status_code >= 400:
            raise _error_from_response(response)

        self._stop_keepalive()
        self.value = None
        self.state = NegotiatorState.IDLE
        return response.json()["data"]

    # -- teardown ----------------------------------------------------------

    async def aclose(self) -> None:
        """Stop background work and release the live hold"""
        self._generation += 1
        tasks = [task for task in (self._poll_task, self._keepalive_task) if task is not None]
        self.close()
        self._stop_keepalive()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        # An in-flight hold sees the bumped generation and releases itself
        await self._selects_settled.wait()

        if self.date and self.value:
            previous = self.value
            self.value = None
            await self._release(self.date, previous)
        self.state = NegotiatorState.IDLE

        if self._owns_client:
            await self._client.aclose()
