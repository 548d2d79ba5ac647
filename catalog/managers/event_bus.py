import asyncio
import itertools
from enum import Enum
from typing import Any

from catalog.logging import logger
from catalog.utils.metrics import (
    events_dropped_total,
    events_published_total,
    subscribers_active,
)


class EventKind(str, Enum):
    """Kinds of events published on the bus."""

    BOOK_ADDED = "BOOK_ADDED"


class EventSubscription:
    """
    A single subscriber's view of one event kind.

    Iterate it with ``async for`` to receive payloads. Use it as an async
    context manager so the subscription is torn down when the consumer
    stops, whether it finished, failed or was cancelled.

    Each subscription owns a bounded queue. When the queue is full the
    oldest pending payload is dropped to make room for the newest one.
    """

    def __init__(
        self, bus: "EventBus", kind: EventKind, key: int, max_size: int
    ) -> None:
        self.bus = bus
        self.kind = kind
        self.key = key
        self.queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_size)
        self.dropped = 0

    def deliver(self, payload: Any) -> None:
        """Queue a payload without waiting, dropping the oldest on overflow."""
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
            events_dropped_total.labels(event=self.kind.value).inc()
            logger.warning(
                f"Subscriber {self.key} for {self.kind.value} is falling behind, "
                f"dropped oldest event ({self.dropped} dropped so far)"
            )
        self.queue.put_nowait(payload)

    def close(self) -> None:
        self.bus.unsubscribe(self)

    def __aiter__(self) -> "EventSubscription":
        return self

    async def __anext__(self) -> Any:
        return await self.queue.get()

    async def __aenter__(self) -> "EventSubscription":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()


class EventBus:
    """
    In-process publish/subscribe hub.

    Tracks subscribers per event kind and fans published payloads out to
    every subscriber registered at publication time. Delivery is
    best-effort and at most once: there is no replay for late subscribers
    and nothing is redelivered after a subscriber leaves.

    ``publish`` never awaits a subscriber, so a slow consumer can neither
    delay the publisher nor the other subscribers.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self.max_queue_size = max_queue_size
        self.subscribers: dict[EventKind, dict[int, EventSubscription]] = {
            kind: {} for kind in EventKind
        }
        self._keys = itertools.count(1)

    def subscribe(self, kind: EventKind) -> EventSubscription:
        """
        Register a new subscriber for ``kind``.

        Args:
            kind: Event kind to listen to.

        Returns:
            EventSubscription receiving every later publication of ``kind``.
        """
        subscription = EventSubscription(
            self, kind, next(self._keys), self.max_queue_size
        )
        self.subscribers[kind][subscription.key] = subscription
        subscribers_active.labels(event=kind.value).set(
            len(self.subscribers[kind])
        )
        logger.debug(f"Subscriber {subscription.key} added for {kind.value}")
        return subscription

    def unsubscribe(self, subscription: EventSubscription) -> None:
        """
        Remove a subscriber. Unknown or already removed subscribers are ignored.
        """
        registered = self.subscribers[subscription.kind]
        if registered.pop(subscription.key, None) is None:
            return

        subscribers_active.labels(event=subscription.kind.value).set(
            len(registered)
        )
        logger.debug(
            f"Subscriber {subscription.key} removed for {subscription.kind.value}"
        )

    def subscriber_count(self, kind: EventKind) -> int:
        return len(self.subscribers[kind])

    def publish(self, kind: EventKind, payload: Any) -> int:
        """
        Fan a payload out to every current subscriber of ``kind``.

        Args:
            kind: Event kind being published.
            payload: Object handed to subscribers as-is.

        Returns:
            Number of subscribers the payload was queued for.
        """
        # Snapshot so subscribers may leave while we iterate
        subscriptions = list(self.subscribers[kind].values())

        for subscription in subscriptions:
            subscription.deliver(payload)

        events_published_total.labels(event=kind.value).inc()
        logger.debug(
            f"Published {kind.value} to {len(subscriptions)} subscriber(s)"
        )
        return len(subscriptions)
