from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from seriesscope.brush import BrushRangeExtractor
from seriesscope.config import ChartConfig, chart_config_from_mapping, merge_chart_config
from seriesscope.events import ClickEvent, DataFilterEvent, EventBus, EventHandler, HoverEvent, HoverOutEvent
from seriesscope.filters import filter_by_extent
from seriesscope.inversion import HoverPoint, nearest_bucket
from seriesscope.series import Key
from seriesscope.state import ChartState, build_chart_state


LOGGER = logging.getLogger(__name__)


class Chart:
    """Owns one chart's derived model and routes pointer input to events.

    Every `set_data` / `set_config` call rebuilds the whole model and swaps it in
    only after every stage succeeded; on error the previous state stays active.
    """

    def __init__(self, config: ChartConfig | Mapping[str, Any] | None = None, data: Any = None) -> None:
        if config is None:
            config = ChartConfig()
        elif isinstance(config, Mapping):
            config = chart_config_from_mapping(config)
        self._config = config
        self._raw: Any = None
        self._state: ChartState | None = None
        self._hovered: HoverPoint | None = None
        self.events = EventBus()
        self.brush = BrushRangeExtractor(lambda: self._state, self.events, on_commit=self._emit_data_filter)
        if data is not None:
            self.set_data(data)

    @property
    def config(self) -> ChartConfig:
        return self._config

    @property
    def state(self) -> ChartState | None:
        return self._state

    @property
    def hovered(self) -> HoverPoint | None:
        return self._hovered

    def set_data(self, raw: Any) -> ChartState:
        state = build_chart_state(raw, self._config)
        self._raw = raw
        self._install(state)
        return state

    def set_config(self, config: ChartConfig | Mapping[str, Any]) -> ChartConfig:
        """Replace (ChartConfig) or patch (mapping of sections) the configuration."""

        if isinstance(config, Mapping):
            config = merge_chart_config(self._config, config)
        if self._raw is not None:
            state = build_chart_state(self._raw, config)
            self._config = config
            self._install(state)
        else:
            self._config = config
        return self._config

    def on(self, event_type: str, handler: EventHandler, *, name: str | None = None) -> None:
        self.events.on(event_type, handler, name=name)

    def off(self, event_type: str, handler: EventHandler | None = None, *, name: str | None = None) -> int:
        return self.events.off(event_type, handler, name=name)

    def pointer_move(self, pixel_x: float) -> HoverPoint | None:
        """Hover: resolve the pointer to a key bucket and emit `hover`, or `hover_out` on no match."""

        if self._state is None:
            return None
        point = nearest_bucket(self._state, pixel_x)
        if point is None:
            self.pointer_out()
            return None
        self._hovered = point
        self.events.emit(HoverEvent(bucket=point.bucket, pixel_x=point.pixel_x))
        return point

    def pointer_out(self) -> None:
        had_hover = self._hovered is not None
        self._hovered = None
        if had_hover:
            self.events.emit(HoverOutEvent())

    def click(self, pixel_x: float) -> HoverPoint | None:
        if self._state is None:
            return None
        point = nearest_bucket(self._state, pixel_x)
        if point is not None:
            self.events.emit(ClickEvent(bucket=point.bucket, pixel_x=point.pixel_x))
        return point

    def _install(self, state: ChartState) -> None:
        self._state = state
        self._hovered = None
        self.brush.clear()

    def _emit_data_filter(self, extent: tuple[Key, Key]) -> None:
        state = self._state
        if state is None:
            return
        series = filter_by_extent(state.normalized, extent, state.config.key)
        LOGGER.debug("brush committed %r; %d series filtered", extent, len(series))
        self.events.emit(DataFilterEvent(extent=extent, series=series))
