"""In-process change notifications for realtime list refreshes"""

import enum
import inspect
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Union

import structlog

logger = structlog.get_logger()


class Entity(str, enum.Enum):
    RESERVATIONS = "reservations"
    TABLES = "tables"
    HOLIDAYS = "holidays"
    SETTINGS = "settings"


class Action(str, enum.Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class ChangeEvent:
    """A row-level change on one entity"""
    entity: Entity
    action: Action
    record_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "entity": self.entity.value,
            "action": self.action.value,
            "record_id": self.record_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


Handler = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by ChangeFeed.subscribe"""

    def __init__(self, feed: "ChangeFeed", entity: Entity, handler: Handler):
        self._feed = feed
        self.entity = entity
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self)
            self.active = False


class ChangeFeed:
    """
    Publish/subscribe hub for entity changes.

    Handlers may be plain or async callables. A failing handler is logged
    and skipped; delivery to the remaining subscribers continues.
    """

    def __init__(self):
        self._subscriptions: Dict[Entity, List[Subscription]] = {}

    def subscribe(self, entity: Entity, handler: Handler) -> Subscription:
        subscription = Subscription(self, Entity(entity), handler)
        self._subscriptions.setdefault(subscription.entity, []).append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.entity, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def subscriber_count(self, entity: Entity) -> int:
        return len(self._subscriptions.get(Entity(entity), []))

    async def publish(self, event: ChangeEvent) -> None:
        for subscription in list(self._subscriptions.get(event.entity, [])):
            try:
                result = subscription.handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Change handler failed",
                    entity=event.entity.value,
                    action=event.action.value,
                    error=str(e),
                )
