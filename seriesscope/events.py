from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Literal, Union

from seriesscope.series import Key, KeyBucket, Series


LOGGER = logging.getLogger(__name__)

EventType = Literal[
    "hover",
    "hover_out",
    "click",
    "brush_start",
    "brush_move",
    "brush_end",
    "data_filter",
]

EVENT_TYPES: tuple[str, ...] = (
    "hover",
    "hover_out",
    "click",
    "brush_start",
    "brush_move",
    "brush_end",
    "data_filter",
)

BrushPhase = Literal["start", "move", "end"]


@dataclass(frozen=True)
class HoverEvent:
    bucket: KeyBucket
    pixel_x: float
    event_type: EventType = "hover"


@dataclass(frozen=True)
class HoverOutEvent:
    event_type: EventType = "hover_out"


@dataclass(frozen=True)
class ClickEvent:
    bucket: KeyBucket
    pixel_x: float
    event_type: EventType = "click"


@dataclass(frozen=True)
class BrushEvent:
    phase: BrushPhase
    extent: tuple[Key, Key]
    selection: tuple[float, float]
    key_type: str

    @property
    def event_type(self) -> EventType:
        return f"brush_{self.phase}"  # type: ignore[return-value]

    @property
    def is_timeseries(self) -> bool:
        return self.key_type == "time"


@dataclass(frozen=True)
class DataFilterEvent:
    extent: tuple[Key, Key]
    series: tuple[Series, ...]
    event_type: EventType = "data_filter"


ChartEvent = Union[HoverEvent, HoverOutEvent, ClickEvent, BrushEvent, DataFilterEvent]
EventHandler = Callable[[Any], object | None]


class EventBus:
    """Synchronous, ordered event delivery.

    Handlers run in registration order on the emitting call stack; a slow handler
    delays the ones after it and an exception stops delivery and propagates.
    Registering under an existing `name` replaces that handler in place.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[tuple[str | None, EventHandler]]] = {t: [] for t in EVENT_TYPES}

    def on(self, event_type: str, handler: EventHandler, *, name: str | None = None) -> None:
        slots = self._slots(event_type)
        if name is not None:
            for i, (existing, _) in enumerate(slots):
                if existing == name:
                    slots[i] = (name, handler)
                    return
        slots.append((name, handler))

    def off(self, event_type: str, handler: EventHandler | None = None, *, name: str | None = None) -> int:
        slots = self._slots(event_type)
        kept = [
            (n, h)
            for n, h in slots
            if not ((name is not None and n == name) or (handler is not None and h is handler))
        ]
        if handler is None and name is None:
            kept = []
        removed = len(slots) - len(kept)
        slots[:] = kept
        return removed

    def has_handlers(self, event_type: str) -> bool:
        return bool(self._slots(event_type))

    def emit(self, event: ChartEvent) -> int:
        slots = list(self._slots(event.event_type))
        LOGGER.debug("emit %s to %d handler(s)", event.event_type, len(slots))
        for _, handler in slots:
            handler(event)
        return len(slots)

    def _slots(self, event_type: str) -> list[tuple[str | None, EventHandler]]:
        try:
            return self._handlers[event_type]
        except KeyError as exc:
            raise ValueError(f"unknown event type: {event_type}") from exc
