"""In-memory async event bus for realtime league updates.

Pub/sub pattern: write endpoints publish change notifications, the SSE
endpoint subscribes. Each subscriber gets an asyncio.Queue. Events are
fire-and-forget: with no subscribers listening they are dropped. Clients
react to a notification by re-fetching standings; the bus never carries
computed standings itself.

One bus is owned by ``app.state.event_bus``, created in the lifespan
handler and closed at shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)

SCORE_UPDATED = "score.updated"
MATCH_UPDATED = "match.updated"
STANDINGS_UPDATED = "standings.updated"
TEAM_UPDATED = "team.updated"
PLAYER_UPDATED = "player.updated"

EVENT_TYPES: frozenset[str] = frozenset(
    {SCORE_UPDATED, MATCH_UPDATED, STANDINGS_UPDATED, TEAM_UPDATED, PLAYER_UPDATED}
)


class EventBus:
    """Async pub/sub event bus.

    Usage:
        bus = EventBus()

        # Subscriber (SSE endpoint)
        async with bus.subscribe("score.updated") as sub:
            event = await sub.get(timeout=15)

        # Publisher (score entry)
        await bus.publish("score.updated", {"match_id": "m-1"})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[dict[str, Any]]]] = defaultdict(list)
        self._wildcard_subscribers: list[asyncio.Queue[dict[str, Any]]] = []
        self._closed = False

    async def publish(self, event_type: str, data: dict[str, Any]) -> int:
        """Publish an event to all subscribers of this type + wildcard subscribers.

        Returns the number of subscribers that received the event.
        """
        if self._closed:
            logger.debug("event_bus_closed dropping=%s", event_type)
            return 0

        envelope = {"type": event_type, "data": data}
        count = 0

        for queue in self._subscribers.get(event_type, []):
            try:
                queue.put_nowait(envelope)
                count += 1
            except asyncio.QueueFull:
                logger.warning("Dropping event %s for slow subscriber", event_type)

        for queue in self._wildcard_subscribers:
            try:
                queue.put_nowait(envelope)
                count += 1
            except asyncio.QueueFull:
                logger.warning("Dropping wildcard event %s for slow subscriber", event_type)

        return count

    def subscribe(self, event_type: str | None = None, max_size: int = 100) -> Subscription:
        """Create a subscription for a specific event type (or all events if None).

        Must be used as an async context manager to ensure cleanup.
        """
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_size)
        return Subscription(self, queue, event_type)

    def close(self) -> None:
        """Stop accepting events and drop every subscriber queue."""
        self._closed = True
        self._subscribers.clear()
        self._wildcard_subscribers.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    def _register(self, queue: asyncio.Queue[dict[str, Any]], event_type: str | None) -> None:
        if event_type is None:
            self._wildcard_subscribers.append(queue)
        else:
            self._subscribers[event_type].append(queue)

    def _unregister(self, queue: asyncio.Queue[dict[str, Any]], event_type: str | None) -> None:
        if event_type is None:
            with contextlib.suppress(ValueError):
                self._wildcard_subscribers.remove(queue)
        else:
            with contextlib.suppress(ValueError):
                self._subscribers[event_type].remove(queue)

    @property
    def subscriber_count(self) -> int:
        """Total number of active subscriptions."""
        typed = sum(len(subs) for subs in self._subscribers.values())
        return typed + len(self._wildcard_subscribers)


class Subscription:
    """An active subscription to the event bus. Use as async context manager."""

    def __init__(
        self,
        bus: EventBus,
        queue: asyncio.Queue[dict[str, Any]],
        event_type: str | None,
    ) -> None:
        self._bus = bus
        self._queue = queue
        self._event_type = event_type

    async def __aenter__(self) -> Subscription:
        self._bus._register(self._queue, self._event_type)
        return self

    async def __aexit__(self, *args: object) -> None:
        self._bus._unregister(self._queue, self._event_type)

    async def get(self, timeout: float | None = None) -> dict[str, Any] | None:
        """Get next event with optional timeout. Returns None on timeout."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None
