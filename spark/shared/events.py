from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Deque, List, Set

from spark.shared.gate import GateLogger

_log = GateLogger.get("EventBus")


class EventBus:
    """Broadcast pub/sub channel.

    Every subscriber gets its own queue and sees events in publish order.
    Subscribers only receive events published after they subscribed.
    """

    def __init__(self, max_history: int = 100, max_queue_size: int = 0):
        self._subscribers: Set[asyncio.Queue] = set()
        self._history: Deque[Any] = deque(maxlen=max_history)
        self._max_queue_size = max_queue_size

    def subscribe(self) -> asyncio.Queue:
        """Subscribe to events, returns a queue for receiving."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        """Unsubscribe from events."""
        self._subscribers.discard(queue)

    def publish(self, event: Any) -> None:
        """Publish an event to all subscribers.

        Never suspends, so a publish is atomic with respect to other tasks.
        """
        self._history.append(event)

        for queue in self._subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                _log.warning(f"Subscriber queue full, dropped event: {event!r}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def get_recent(self, count: int = 20) -> List[Any]:
        """Get recent events from history."""
        return list(self._history)[-count:]


__all__ = ["EventBus"]
