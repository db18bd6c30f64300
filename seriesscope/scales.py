from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
import math
from typing import Any, Iterable, Sequence

import numpy as np

from seriesscope.config import ChartConfig, ColorEntry
from seriesscope.errors import ChartConfigError, EmptyDomainError
from seriesscope.indexing import GroupSplit, KeyIndex
from seriesscope.keys import coerce_key, ms_to_time, time_to_ms
from seriesscope.series import Key, NormalizedData
from seriesscope.stacking import StackLayout


_ONE_DAY = dt.timedelta(days=1)


class LinearScale:
    kind = "linear"
    continuous = True

    def __init__(self, domain: tuple[float, float], range: tuple[float, float]) -> None:
        self._d0 = float(domain[0])
        self._d1 = float(domain[1])
        self._r0 = float(range[0])
        self._r1 = float(range[1])

    @property
    def domain(self) -> tuple[float, float]:
        return (self._d0, self._d1)

    @property
    def range(self) -> tuple[float, float]:
        return (self._r0, self._r1)

    def __call__(self, value: float) -> float:
        if self._d1 == self._d0:
            return (self._r0 + self._r1) / 2.0
        t = (float(value) - self._d0) / (self._d1 - self._d0)
        return self._r0 + t * (self._r1 - self._r0)

    def invert(self, pixel: float) -> float:
        if self._r1 == self._r0:
            return self._d0
        t = (float(pixel) - self._r0) / (self._r1 - self._r0)
        return self._d0 + t * (self._d1 - self._d0)

    def ticks(self, count: int = 10) -> np.ndarray:
        lo, hi = sorted(self.domain)
        return generate_nice_ticks(lo, hi, count)

    def nice(self, count: int = 10) -> "LinearScale":
        return LinearScale(nice_domain(self._d0, self._d1, count), self.range)

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"


class TimeScale:
    kind = "time"
    continuous = True

    def __init__(self, domain: tuple[dt.datetime, dt.datetime], range: tuple[float, float]) -> None:
        self._domain = (domain[0], domain[1])
        self._linear = LinearScale((time_to_ms(domain[0]), time_to_ms(domain[1])), range)

    @property
    def domain(self) -> tuple[dt.datetime, dt.datetime]:
        return self._domain

    @property
    def range(self) -> tuple[float, float]:
        return self._linear.range

    def __call__(self, value: dt.datetime) -> float:
        return self._linear(time_to_ms(value))

    def invert(self, pixel: float) -> dt.datetime:
        return ms_to_time(self._linear.invert(pixel))

    def ticks(self, count: int = 10) -> list[dt.datetime]:
        return [ms_to_time(float(t)) for t in self._linear.ticks(count)]

    def __repr__(self) -> str:
        return f"TimeScale(domain=({self._domain[0].isoformat()}, {self._domain[1].isoformat()}), range={self.range})"


class PointScale:
    """Evenly spaced categorical positions: key i sits at `range[0] + i * step`."""

    kind = "point"
    continuous = False

    def __init__(self, domain: Sequence[str], range: tuple[float, float]) -> None:
        self._domain = tuple(domain)
        self._r0 = float(range[0])
        self._r1 = float(range[1])
        self._index = {key: i for i, key in enumerate(self._domain)}

    @property
    def domain(self) -> tuple[str, ...]:
        return self._domain

    @property
    def range(self) -> tuple[float, float]:
        return (self._r0, self._r1)

    def step(self) -> float:
        if not self._domain:
            return 0.0
        return (self._r1 - self._r0) / len(self._domain)

    def __call__(self, key: str) -> float | None:
        i = self._index.get(key)
        if i is None:
            return None
        return self._r0 + i * self.step()

    def index_at(self, pixel: float) -> int | None:
        step = self.step()
        if step <= 0:
            return None
        raw = (float(pixel) - self._r0) / step - 0.5
        # Half-up rounding; the tolerance keeps exact key positions on their own index.
        index = math.floor(raw + 0.5 + 1e-9)
        return max(0, min(len(self._domain) - 1, index))

    def __repr__(self) -> str:
        return f"PointScale(domain={list(self._domain)!r}, range={self.range})"


class OrdinalScale:
    def __init__(self, mapping: dict[Any, Any], domain: Sequence[Any], unknown: Any) -> None:
        self._mapping = dict(mapping)
        self._domain = tuple(domain)
        self._unknown = unknown

    @property
    def domain(self) -> tuple[Any, ...]:
        return self._domain

    @property
    def unknown(self) -> Any:
        return self._unknown

    def __call__(self, key: Any) -> Any:
        try:
            return self._mapping.get(key, self._unknown)
        except TypeError:
            return self._unknown

    def as_dict(self) -> dict[Any, Any]:
        return {key: self(key) for key in self._domain}

    def __repr__(self) -> str:
        return f"OrdinalScale({self.as_dict()!r}, unknown={self._unknown!r})"


XScale = LinearScale | TimeScale | PointScale


@dataclass(frozen=True)
class ScaleSet:
    x_scale: XScale
    y_scale: LinearScale
    color_scale: OrdinalScale
    style_scale: OrdinalScale
    chart_type_scale: OrdinalScale
    y2_scale: LinearScale | None = None
    has_second_axis: bool = False


def build_x_scale(keys: Sequence[Key], config: ChartConfig) -> XScale:
    """Build the x scale over the ordered distinct keys."""

    key_type = config.key.key_type
    offset = config.scale.mark_width / 2.0 if config.scale.needs_x_outer_padding else 0.0
    x_range = (offset, float(config.chart_width) - offset)
    explicit = config.scale.x_domain

    if key_type == "string":
        domain = list(keys)
        if explicit != "auto":
            domain = _slice_categories(domain, explicit)
        if not domain:
            raise EmptyDomainError("x")
        return PointScale(domain, x_range)

    if explicit != "auto":
        try:
            lo = coerce_key(explicit[0], key_type)
            hi = coerce_key(explicit[1], key_type)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ChartConfigError(f"x_domain is not a valid {key_type} extent: {explicit!r}") from exc
    else:
        if not keys:
            raise EmptyDomainError("x")
        lo = min(keys)
        hi = max(keys)

    if key_type == "time":
        if lo == hi:
            lo, hi = lo - _ONE_DAY, hi + _ONE_DAY
        return TimeScale((lo, hi), x_range)
    if lo == hi:
        lo, hi = lo - 1.0, hi + 1.0
    return LinearScale((lo, hi), x_range)


def build_y_scale(
    values: Iterable[float | None],
    config: ChartConfig,
    *,
    axis: str = "y",
    explicit: tuple[float, float] | str | None = None,
) -> LinearScale:
    """Linear y scale over the non-null values, nice-rounded outward.

    `explicit` defaults to the configured `y_domain` or `y2_domain` for `axis`.
    """

    if explicit is None:
        explicit = config.scale.y2_domain if axis == "y2" else config.scale.y_domain
    y_range = (float(config.chart_height), 0.0)
    if explicit != "auto":
        try:
            lo, hi = float(explicit[0]), float(explicit[1])
        except (TypeError, ValueError) as exc:
            raise ChartConfigError(f"{axis}_domain must be numeric: {explicit!r}") from exc
        return LinearScale((lo, hi), y_range)

    finite = np.asarray([v for v in values if v is not None], dtype=np.float64)
    if finite.size == 0:
        raise EmptyDomainError(axis)
    lo, hi = widen_degenerate(float(np.min(finite)), float(np.max(finite)))
    return LinearScale(nice_domain(lo, hi, config.scale.nice_count), y_range)


def build_color_scale(series_ids: Sequence[Any], schema: Sequence[ColorEntry], default_color: str) -> OrdinalScale:
    """Series id -> color: exact `key` match, then positional pairing, then the default."""

    return _ordinal_from_schema(series_ids, schema, "value", default_color)


def build_style_scale(series_ids: Sequence[Any], schema: Sequence[ColorEntry]) -> OrdinalScale:
    return _ordinal_from_schema(series_ids, schema, "style", "solid")


def build_chart_type_scale(series_ids: Sequence[Any], schema: Sequence[ColorEntry]) -> OrdinalScale:
    return _ordinal_from_schema(series_ids, schema, "chart_type", "line")


def widen_degenerate(lo: float, hi: float, buffer_ratio: float = 0.05) -> tuple[float, float]:
    if lo != hi:
        return (lo, hi)
    delta = max(1.0, abs(lo) * buffer_ratio)
    return (lo - delta, hi + delta)


def nice_domain(vmin: float, vmax: float, count: int = 10) -> tuple[float, float]:
    """Extend [vmin, vmax] outward to multiples of a human-friendly step."""

    if count <= 0:
        raise ValueError("count must be > 0")
    if vmin == vmax or not (np.isfinite(vmin) and np.isfinite(vmax)):
        return (vmin, vmax)
    reverse = vmin > vmax
    lo, hi = (vmax, vmin) if reverse else (vmin, vmax)
    span = _nice_number(hi - lo, round_result=False)
    step = _nice_number(span / max(count - 1, 1), round_result=True)
    nice_lo = float(np.floor(lo / step + 1e-9) * step)
    nice_hi = float(np.ceil(hi / step - 1e-9) * step)
    return (nice_hi, nice_lo) if reverse else (nice_lo, nice_hi)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.ceil(vmin / step - 1e-9) * step
    tick_max = np.floor(vmax / step + 1e-9) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


_ROUNDED_STEPS = ((1.5, 1.0), (3.0, 2.0), (7.0, 5.0))
_CEILING_STEPS = ((1.0, 1.0), (2.0, 2.0), (5.0, 5.0))


def _nice_number(value: float, *, round_result: bool) -> float:
    # Heckbert: snap the mantissa to 1, 2, 5 or 10 (nearest when rounding, else the ceiling).
    magnitude = 10.0 ** math.floor(math.log10(value))
    mantissa = value / magnitude
    if round_result:
        chosen = next((nice for limit, nice in _ROUNDED_STEPS if mantissa < limit), 10.0)
    else:
        chosen = next((nice for limit, nice in _CEILING_STEPS if mantissa <= limit), 10.0)
    return chosen * magnitude


def _ordinal_from_schema(series_ids: Sequence[Any], schema: Sequence[ColorEntry], attr: str, unknown: Any) -> OrdinalScale:
    ids = tuple(series_ids)
    id_set = set(ids)
    mapping: dict[Any, Any] = {}
    for entry in schema:
        value = getattr(entry, attr)
        if entry.key is None or value is None:
            continue
        if entry.key in id_set and entry.key not in mapping:
            mapping[entry.key] = value
    for i, series_id in enumerate(ids):
        if series_id in mapping or i >= len(schema):
            continue
        entry = schema[i]
        value = getattr(entry, attr)
        if entry.key is None and value is not None:
            mapping[series_id] = value
    return OrdinalScale(mapping, ids, unknown)


def _slice_categories(keys: list[Key], explicit: tuple[Any, Any]) -> list[Key]:
    start, end = str(explicit[0]), str(explicit[1])
    try:
        i0 = keys.index(start)
        i1 = keys.index(end)
    except ValueError as exc:
        raise ChartConfigError(f"x_domain categories not found in data: {explicit!r}") from exc
    if i0 > i1:
        i0, i1 = i1, i0
    return keys[i0 : i1 + 1]


def build_scales(
    normalized: NormalizedData,
    key_index: KeyIndex,
    groups: GroupSplit,
    config: ChartConfig,
    stack: StackLayout | None = None,
) -> ScaleSet:
    """Derive x/y/y2 and the ordinal series scales for one chart model.

    Stacked chart types take their y extent from `stack` unrounded and never get
    a second axis; the other types split y/y2 by axis group.
    """

    series_ids = normalized.series_ids
    schema = config.scale.color_schema
    x_scale = build_x_scale(key_index.keys, config)

    y2_scale = None
    if config.is_stacked:
        if stack is None:
            raise ValueError("stacked chart types need a stack layout")
        if config.scale.y_domain != "auto":
            y_scale = build_y_scale((), config, axis="y")
        else:
            # Stacked extents are used as-is: [min(0, lowest band), highest total].
            y_scale = LinearScale(widen_degenerate(*stack.domain), (float(config.chart_height), 0.0))
    else:
        by_id = {s.id: s for s in normalized.data_by_series}
        primary = [p.value for sid in groups.primary_ids for p in by_id[sid].values]
        y_scale = build_y_scale(primary, config, axis="y")
        if groups.has_second_axis:
            secondary = [p.value for sid in groups.secondary_ids for p in by_id[sid].values]
            y2_scale = build_y_scale(secondary, config, axis="y2")

    return ScaleSet(
        x_scale=x_scale,
        y_scale=y_scale,
        y2_scale=y2_scale,
        color_scale=build_color_scale(series_ids, schema, config.scale.default_color),
        style_scale=build_style_scale(series_ids, schema),
        chart_type_scale=build_chart_type_scale(series_ids, schema),
        has_second_axis=y2_scale is not None,
    )
