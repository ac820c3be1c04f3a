"""
Change Notifier

In-process publish/subscribe keyed by event id. Live viewers subscribe to an
event and receive small notices telling them to re-fetch the tally; they
never apply deltas. Delivery is at-most-once with no persistence: a full
subscriber queue drops the message, and publishing never raises.
"""

import asyncio
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Literal, Union

import structlog
from pydantic import BaseModel

from core.config import settings

logger = structlog.get_logger(__name__)


class VoteCast(BaseModel):
    """A vote was admitted."""

    type: Literal["vote_cast"] = "vote_cast"
    event_id: str
    team_name: str
    total_votes: int


class EventChanged(BaseModel):
    """An event was edited or deleted."""

    type: Literal["event_updated", "event_deleted"]
    event_id: str


Notice = Union[VoteCast, EventChanged]


@dataclass(eq=False)
class Subscription:
    """A single viewer's queue for one event."""

    event_id: str
    queue: asyncio.Queue = field(repr=False)

    async def get(self) -> Notice:
        return await self.queue.get()


class ChangeNotifier:
    """Fan-out of notices to the subscribers of each event."""

    def __init__(self, queue_size: int | None = None):
        self.queue_size = queue_size or settings.LIVE_QUEUE_SIZE
        self._subscribers: dict[str, set[Subscription]] = {}

    def subscribe(self, event_id: str) -> Subscription:
        subscription = Subscription(event_id=event_id, queue=asyncio.Queue(maxsize=self.queue_size))
        self._subscribers.setdefault(event_id, set()).add(subscription)
        logger.debug(
            "live_subscribed",
            event_id=event_id,
            subscribers=len(self._subscribers[event_id]),
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.event_id)
        if not subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscribers[subscription.event_id]
        logger.debug("live_unsubscribed", event_id=subscription.event_id)

    def subscriber_count(self, event_id: str) -> int:
        return len(self._subscribers.get(event_id, ()))

    def publish(self, event_id: str, message: Notice) -> int:
        """
        Deliver a notice to every current subscriber of ``event_id``.

        Returns the number of queues the notice was placed on. Subscribers
        whose queue is full miss this notice.
        """
        delivered = 0
        try:
            for subscription in list(self._subscribers.get(event_id, ())):
                try:
                    subscription.queue.put_nowait(message)
                    delivered += 1
                except asyncio.QueueFull:
                    logger.warning("live_queue_full", event_id=event_id, type=message.type)
        except Exception as e:
            logger.error("live_publish_failed", event_id=event_id, error=str(e))
        return delivered


@lru_cache
def get_notifier() -> ChangeNotifier:
    """Process-wide notifier shared by the API and the live endpoint."""
    return ChangeNotifier()
