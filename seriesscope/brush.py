from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Literal

from seriesscope.events import BrushEvent, BrushPhase, EventBus
from seriesscope.inversion import contains_pixel, invert_x
from seriesscope.keys import coerce_key
from seriesscope.scales import XScale
from seriesscope.series import Key
from seriesscope.state import ChartState


LOGGER = logging.getLogger(__name__)

BrushState = Literal["idle", "dragging", "committed"]
BrushSource = Literal["user", "programmatic"]

_ONE_DAY = dt.timedelta(days=1)


class BrushRangeExtractor:
    """Horizontal range-selection state machine over the chart's x scale.

    idle -> dragging on a pointer-down inside the plotted range. Moves while
    dragging emit `brush_move` with both endpoints inverted. A user release of a
    non-empty selection commits: time extents snap to whole days, the pixel
    selection re-snaps to `x_scale(extent)` and `brush_end` fires. Empty releases
    and gestures with any programmatic step go back to idle silently, and so
    does `clear()`.
    """

    def __init__(
        self,
        state_provider: Callable[[], ChartState | None],
        bus: EventBus,
        on_commit: Callable[[tuple[Key, Key]], None] | None = None,
    ) -> None:
        self._state_provider = state_provider
        self._bus = bus
        self._on_commit = on_commit
        self.state: BrushState = "idle"
        self._anchor: float | None = None
        self._programmatic = False
        self._selection: tuple[float, float] | None = None
        self._extent: tuple[Key, Key] | None = None

    @property
    def selection(self) -> tuple[float, float] | None:
        return self._selection

    @property
    def extent(self) -> tuple[Key, Key] | None:
        return self._extent

    def pointer_down(self, pixel: float, *, source: BrushSource = "user") -> BrushState:
        chart = self._active_state()
        if chart is None or not contains_pixel(chart.scales.x_scale, float(pixel)):
            return self.state
        self.state = "dragging"
        self._anchor = float(pixel)
        self._programmatic = source != "user"
        self._selection = (self._anchor, self._anchor)
        self._extent = self._resolve(chart.scales.x_scale, self._selection)
        self._emit("start", chart)
        return self.state

    def pointer_move(self, pixel: float, *, source: BrushSource = "user") -> BrushState:
        if self.state != "dragging":
            return self.state
        chart = self._active_state()
        if chart is None:
            return self._reset()
        self._programmatic = self._programmatic or source != "user"
        self._update(chart.scales.x_scale, pixel)
        self._emit("move", chart)
        return self.state

    def pointer_up(self, pixel: float | None = None, *, source: BrushSource = "user") -> BrushState:
        if self.state != "dragging":
            return self.state
        chart = self._active_state()
        if chart is None:
            return self._reset()
        x_scale = chart.scales.x_scale
        if pixel is not None:
            self._update(x_scale, pixel)
        if source != "user" or self._programmatic or self._is_empty() or self._extent is None:
            LOGGER.debug("brush released without a committable selection (source=%s)", source)
            return self._reset()

        extent = self._extent
        if chart.key_type == "time" and chart.config.brush.time_snap == "day":
            extent = snap_to_days(extent)
        selection = _pixels_for(x_scale, extent)
        if selection is None or selection[1] - selection[0] <= 0:
            # A drag inside one category snaps back to a single point.
            LOGGER.debug("brush selection collapsed to %r after snapping", extent)
            return self._reset()
        self._extent = extent
        self._selection = selection
        self.state = "committed"
        self._emit("end", chart)
        if self._on_commit is not None:
            self._on_commit(extent)
        return self.state

    def clear(self) -> BrushState:
        return self._reset()

    def select_extent(self, extent: tuple[Any, Any]) -> BrushState:
        """Programmatically place the selection over a domain extent; emits nothing."""

        chart = self._state_provider()
        if chart is None:
            raise ValueError("cannot select an extent before any data is set")
        key_type = chart.key_type
        keys = (coerce_key(extent[0], key_type), coerce_key(extent[1], key_type))
        selection = _pixels_for(chart.scales.x_scale, keys)
        if selection is None:
            raise ValueError(f"extent is outside the x domain: {extent!r}")
        if selection[0] > selection[1]:
            keys = (keys[1], keys[0])
            selection = (selection[1], selection[0])
        self._anchor = None
        self._extent = keys
        self._selection = selection
        self.state = "committed"
        return self.state

    def select_fraction(self, start: float, end: float) -> BrushState:
        """Programmatically select between two fractions of the chart width; emits nothing."""

        if not (0.0 <= start <= 1.0 and 0.0 <= end <= 1.0):
            raise ValueError(f"brush fractions must lie in [0, 1]: {(start, end)!r}")
        chart = self._state_provider()
        if chart is None:
            raise ValueError("cannot select a range before any data is set")
        width = float(chart.config.chart_width)
        selection = (min(start, end) * width, max(start, end) * width)
        extent = self._resolve(chart.scales.x_scale, selection)
        if extent is None:
            raise ValueError(f"fractions fall outside the plotted range: {(start, end)!r}")
        self._anchor = None
        self._extent = extent
        self._selection = selection
        self.state = "committed"
        return self.state

    def _active_state(self) -> ChartState | None:
        chart = self._state_provider()
        if chart is None or not chart.config.brush.enabled:
            return None
        return chart

    def _update(self, x_scale: XScale, pixel: float) -> None:
        lo, hi = sorted(x_scale.range)
        clamped = min(max(float(pixel), lo), hi)
        anchor = self._anchor if self._anchor is not None else clamped
        self._selection = (min(anchor, clamped), max(anchor, clamped))
        self._extent = self._resolve(x_scale, self._selection)

    def _resolve(self, x_scale: XScale, selection: tuple[float, float]) -> tuple[Key, Key] | None:
        k0 = invert_x(x_scale, selection[0])
        k1 = invert_x(x_scale, selection[1])
        if k0 is None or k1 is None:
            return None
        return (k0, k1)

    def _is_empty(self) -> bool:
        return self._selection is None or self._selection[1] - self._selection[0] <= 0

    def _emit(self, phase: BrushPhase, chart: ChartState) -> None:
        if self._extent is None or self._selection is None:
            return
        self._bus.emit(
            BrushEvent(phase=phase, extent=self._extent, selection=self._selection, key_type=chart.key_type)
        )

    def _reset(self) -> BrushState:
        self.state = "idle"
        self._anchor = None
        self._programmatic = False
        self._selection = None
        self._extent = None
        return self.state


def snap_to_days(extent: tuple[dt.datetime, dt.datetime]) -> tuple[dt.datetime, dt.datetime]:
    """Round both ends to the nearest UTC midnight; if that collapses the range,
    use the day containing the start instead."""

    start = _round_day(extent[0])
    end = _round_day(extent[1])
    if start >= end:
        start = _floor_day(extent[0])
        end = start + _ONE_DAY
    return (start, end)


def _floor_day(value: dt.datetime) -> dt.datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _round_day(value: dt.datetime) -> dt.datetime:
    floor = _floor_day(value)
    if value - floor >= _ONE_DAY / 2:
        return floor + _ONE_DAY
    return floor


def _pixels_for(x_scale: XScale, extent: tuple[Key, Key]) -> tuple[float, float] | None:
    p0 = x_scale(extent[0])
    p1 = x_scale(extent[1])
    if p0 is None or p1 is None:
        return None
    return (float(p0), float(p1))
