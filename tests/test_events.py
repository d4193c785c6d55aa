"""Tests for the session event bus."""

from __future__ import annotations

import unittest

from gemini_chat.events import TURN_APPENDED, Event, EventBus


class EventBusTests(unittest.IsolatedAsyncioTestCase):
    """Validate delivery order, async handlers, and failure isolation."""

    async def test_sync_and_async_handlers_receive_event_in_order(self) -> None:
        bus = EventBus()
        received: list[str] = []

        def sync_handler(event: Event) -> None:
            received.append(f"sync:{event.data['n']}")

        async def async_handler(event: Event) -> None:
            received.append(f"async:{event.data['n']}")

        bus.subscribe(TURN_APPENDED, sync_handler)
        bus.subscribe(TURN_APPENDED, async_handler)
        event = await bus.publish(TURN_APPENDED, {"n": 1}, source="test")

        self.assertEqual(received, ["sync:1", "async:1"])
        self.assertEqual(event.source, "test")

    async def test_failing_handler_does_not_block_others(self) -> None:
        bus = EventBus()
        received: list[Event] = []

        def broken(event: Event) -> None:  # noqa: ARG001
            raise RuntimeError("render failed")

        bus.subscribe(TURN_APPENDED, broken)
        bus.subscribe(TURN_APPENDED, received.append)

        with self.assertLogs("gemini_chat.events.bus", level="ERROR") as logs:
            await bus.publish(TURN_APPENDED)

        self.assertEqual(len(received), 1)
        self.assertTrue(any("events.handler_failed" in line for line in logs.output))

    async def test_unsubscribe_and_clear(self) -> None:
        bus = EventBus()
        received: list[Event] = []
        bus.subscribe(TURN_APPENDED, received.append)
        self.assertEqual(bus.subscriber_count(TURN_APPENDED), 1)

        bus.unsubscribe(TURN_APPENDED, received.append)
        await bus.publish(TURN_APPENDED)
        self.assertEqual(received, [])

        bus.subscribe(TURN_APPENDED, received.append)
        bus.clear()
        self.assertEqual(bus.subscriber_count(TURN_APPENDED), 0)


if __name__ == "__main__":
    unittest.main()
