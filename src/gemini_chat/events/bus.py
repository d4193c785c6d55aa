"""Publish/subscribe bus that tells the UI when session state changes.

Usage:
    bus = EventBus()

    async def on_turn_finalized(event):
        render(event.data["turn"])

    bus.subscribe("turn.finalized", on_turn_finalized)
    await bus.publish("turn.finalized", {"turn": turn})
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


@dataclass
class Event:
    """Event data container."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)
    source: str | None = None


class EventBus:
    """Deliver session events to sync or async handlers in subscription order.

    A failing handler is logged and skipped so one broken view cannot stall
    the session.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[[Event], Any]]] = {}

    def subscribe(self, event_name: str, handler: Callable[[Event], Any]) -> None:
        """Register ``handler`` for ``event_name``."""
        self._subscribers.setdefault(event_name, []).append(handler)
        LOGGER.debug("Subscribed to event: %s", event_name)

    def unsubscribe(self, event_name: str, handler: Callable[[Event], Any]) -> None:
        """Remove ``handler``; unknown handlers are ignored."""
        handlers = self._subscribers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))

    async def publish(
        self, event_name: str, data: dict[str, Any] | None = None, source: str | None = None
    ) -> Event:
        """Publish an event to all subscribers and return it."""
        event = Event(name=event_name, data=data or {}, source=source)
        for handler in list(self._subscribers.get(event_name, [])):
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:  # noqa: BLE001 - isolate broken subscribers.
                LOGGER.error(
                    "events.handler_failed",
                    extra={
                        "event": "events.handler_failed",
                        "event_name": event_name,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
        return event

    def clear(self, event_name: str | None = None) -> None:
        """Clear subscribers for one event, or all when ``event_name`` is None."""
        if event_name:
            self._subscribers.pop(event_name, None)
        else:
            self._subscribers.clear()
