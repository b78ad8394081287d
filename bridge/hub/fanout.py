from __future__ import annotations

import asyncio
import itertools
import threading
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from loguru import logger

from bridge.core.queues import BoundedQueue

HEARTBEAT_FRAME = ": heartbeat\n\n"


def format_event(payload: str) -> str:
    return f"data: {payload}\n\n"


@dataclass(frozen=True, eq=False)
class Subscription:
    subscriber_id: int
    queue: BoundedQueue[str]


class SubscriberHub:
    """
    Browser subscribers of the live snapshot table.

    Each subscriber has its own small queue; a subscriber that falls behind
    misses intermediate tables and catches up with the next one.
    """

    def __init__(self, *, queue_size: int = 10, heartbeat_interval: float = 20.0) -> None:
        self._queue_size = queue_size
        self._heartbeat_interval = heartbeat_interval
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: dict[int, Subscription] = {}

    def subscribe(self) -> Subscription:
        with self._lock:
            subscription = Subscription(subscriber_id=next(self._ids), queue=BoundedQueue(self._queue_size))
            self._subscribers[subscription.subscriber_id] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers.pop(subscription.subscriber_id, None)

    def broadcast(self, payload: str) -> int:
        with self._lock:
            subscribers = list(self._subscribers.values())
        delivered = 0
        for subscription in subscribers:
            if subscription.queue.offer(payload):
                delivered += 1
            else:
                logger.debug("Subscriber {} is behind; skipping update", subscription.subscriber_id)
        return delivered

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    async def stream(
        self,
        current_table: Callable[[], str],
        *,
        heartbeat_interval: Optional[float] = None,
    ) -> AsyncIterator[str]:
        """
        Yield server-sent event frames for one subscriber.

        The subscriber is registered before the current table is read, so no
        update can fall between the initial state and the live feed.
        """
        interval = heartbeat_interval if heartbeat_interval is not None else self._heartbeat_interval
        subscription = self.subscribe()
        try:
            yield format_event(current_table())
            while True:
                try:
                    payload = await asyncio.wait_for(subscription.queue.get(), timeout=interval)
                except asyncio.TimeoutError:
                    yield HEARTBEAT_FRAME
                    continue
                yield format_event(payload)
        finally:
            self.unsubscribe(subscription)
