"""In-memory pub/sub bus for domain events with per-tick flush semantics.

Handlers subscribe to an event class and also receive instances of its
subclasses, so subscribing to a common base class sees every event.
"""
from __future__ import annotations

from typing import Any, Callable

_Handler = Callable[[Any], None]


class SignalBus:

    def __init__(self) -> None:
        self._subscribers: dict[type, list[_Handler]] = {}
        self._queue: list[Any] = []

    def subscribe(self, event_type: type, handler: _Handler) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type, handler: _Handler) -> None:
        handlers = self._subscribers.get(event_type)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def publish(self, event: Any) -> None:
        self._queue.append(event)

    def pending(self) -> list[Any]:
        return list(self._queue)

    def flush(self) -> int:
        """Deliver queued events in publish order. Returns how many were sent.

        Events published by handlers during the flush wait for the next one.
        """
        snapshot = self._queue
        self._queue = []
        for event in snapshot:
            for cls in type(event).__mro__:
                for handler in list(self._subscribers.get(cls, ())):
                    handler(event)
        return len(snapshot)

    def clear(self) -> None:
        self._queue.clear()
