from __future__ import annotations

import unittest

from seriesscope.events import EventBus, HoverOutEvent


class EventBusTests(unittest.TestCase):
    def test_handlers_run_in_registration_order(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.on("hover_out", lambda e: seen.append("first"))
        bus.on("hover_out", lambda e: seen.append("second"))
        self.assertEqual(bus.emit(HoverOutEvent()), 2)
        self.assertEqual(seen, ["first", "second"])

    def test_named_handler_is_replaced_in_place(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.on("hover_out", lambda e: seen.append("a"), name="tooltip")
        bus.on("hover_out", lambda e: seen.append("b"))
        bus.on("hover_out", lambda e: seen.append("c"), name="tooltip")
        bus.emit(HoverOutEvent())
        self.assertEqual(seen, ["c", "b"])

    def test_off_by_handler_name_or_all(self) -> None:
        bus = EventBus()
        handler = lambda e: None  # noqa: E731
        bus.on("hover_out", handler)
        bus.on("hover_out", lambda e: None, name="legend")
        bus.on("hover_out", lambda e: None)
        self.assertEqual(bus.off("hover_out", handler), 1)
        self.assertEqual(bus.off("hover_out", name="legend"), 1)
        self.assertEqual(bus.off("hover_out"), 1)
        self.assertFalse(bus.has_handlers("hover_out"))

    def test_handler_exception_propagates(self) -> None:
        bus = EventBus()
        seen: list[str] = []

        def boom(event) -> None:
            raise RuntimeError("listener failed")

        bus.on("hover_out", boom)
        bus.on("hover_out", lambda e: seen.append("late"))
        with self.assertRaises(RuntimeError):
            bus.emit(HoverOutEvent())
        self.assertEqual(seen, [])

    def test_unknown_event_type_raises(self) -> None:
        bus = EventBus()
        with self.assertRaises(ValueError):
            bus.on("zoom", lambda e: None)
        with self.assertRaises(ValueError):
            bus.has_handlers("zoom")


if __name__ == "__main__":
    unittest.main()
