"""Process-wide booking state shared by the API routers"""

from app.booking.feed import ChangeFeed
from app.booking.holds import HoldStore
from app.booking.overlap import OverlapPolicy, OverlapRule
from app.config import settings


def server_policy() -> OverlapPolicy:
    """Occupancy rule used for holds, slot status and the submission check"""
    return OverlapPolicy(
        duration_minutes=settings.service_duration_minutes,
        buffer_minutes=settings.buffer_minutes,
        rule=OverlapRule.DISTANCE,
    )


# Holds are authoritative only within this process
hold_store = HoldStore(policy=server_policy(), ttl_seconds=settings.hold_ttl_seconds)
change_feed = ChangeFeed()


def get_hold_store() -> HoldStore:
    return hold_store


def get_change_feed() -> ChangeFeed:
    return change_feed
