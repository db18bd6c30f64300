from __future__ import annotations

import dataclasses
from dataclasses import asdict, dataclass, field
from pathlib import Path
import tomllib
from typing import Any, Literal, Mapping, Sequence

from seriesscope.colors import CATEGORY_COLORS, DEFAULT_COLOR, palette
from seriesscope.errors import ChartConfigError, InvalidKeyTypeError


KeyType = Literal["time", "number", "string"]
ChartType = Literal["line", "area", "bar", "stackedLine", "stackedArea", "stackedBar"]

KEY_TYPES: tuple[str, ...] = ("time", "number", "string")
CHART_TYPES: tuple[str, ...] = ("line", "area", "bar", "stackedLine", "stackedArea", "stackedBar")
STACKED_CHART_TYPES: tuple[str, ...] = ("stackedLine", "stackedArea", "stackedBar")
BAR_CHART_TYPES: tuple[str, ...] = ("bar", "stackedBar")
SORT_ORDERS: tuple[str, ...] = ("ascending", "descending")
INVALID_KEY_POLICIES: tuple[str, ...] = ("reject", "drop")
NULL_POLICIES: tuple[str, ...] = ("zero", "retain")
TIME_SNAPS: tuple[str | None, ...] = ("day", None)


@dataclass(frozen=True)
class Margin:
    top: int = 48
    right: int = 32
    bottom: int = 48
    left: int = 32

    def __post_init__(self) -> None:
        for name in ("top", "right", "bottom", "left"):
            if getattr(self, name) < 0:
                raise ChartConfigError(f"Margin.{name} must be >= 0")


@dataclass(frozen=True)
class KeyConfig:
    key_type: KeyType = "time"
    sort_order: str = "ascending"
    category_order: tuple[str, ...] | None = None
    invalid_key_policy: str = "reject"

    def __post_init__(self) -> None:
        if self.key_type not in KEY_TYPES:
            raise InvalidKeyTypeError(self.key_type)
        if self.sort_order not in SORT_ORDERS:
            raise ChartConfigError(f"unsupported sort_order: {self.sort_order!r}")
        if self.invalid_key_policy not in INVALID_KEY_POLICIES:
            raise ChartConfigError(f"unsupported invalid_key_policy: {self.invalid_key_policy!r}")
        if self.category_order is not None:
            if self.key_type != "string":
                raise ChartConfigError("category_order only applies to key_type 'string'")
            object.__setattr__(self, "category_order", tuple(str(c) for c in self.category_order))


@dataclass(frozen=True)
class ColorEntry:
    value: str
    key: Any = None
    style: str | None = None
    chart_type: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ChartConfigError("ColorEntry.value must be a non-empty string")


def _default_schema() -> tuple[ColorEntry, ...]:
    return tuple(ColorEntry(value=color) for color in CATEGORY_COLORS)


@dataclass(frozen=True)
class ScaleConfig:
    chart_type: ChartType = "line"
    color_schema: tuple[ColorEntry, ...] = field(default_factory=_default_schema)
    default_color: str = DEFAULT_COLOR
    x_domain: tuple[Any, Any] | str = "auto"
    y_domain: tuple[float, float] | str = "auto"
    y2_domain: tuple[float, float] | str = "auto"
    mark_width: float = 0.0
    nice_count: int = 10

    def __post_init__(self) -> None:
        if self.chart_type not in CHART_TYPES:
            raise ChartConfigError(f"unsupported chart_type: {self.chart_type!r}")
        object.__setattr__(self, "color_schema", tuple(self.color_schema))
        for name in ("x_domain", "y_domain", "y2_domain"):
            object.__setattr__(self, name, _coerce_domain(getattr(self, name), name))
        if self.mark_width < 0:
            raise ChartConfigError("mark_width must be >= 0")
        if self.nice_count <= 0:
            raise ChartConfigError("nice_count must be > 0")

    @property
    def is_stacked(self) -> bool:
        return self.chart_type in STACKED_CHART_TYPES

    @property
    def needs_x_outer_padding(self) -> bool:
        return self.chart_type in BAR_CHART_TYPES


@dataclass(frozen=True)
class StackConfig:
    null_policy: str = "zero"

    def __post_init__(self) -> None:
        if self.null_policy not in NULL_POLICIES:
            raise ChartConfigError(f"unsupported null_policy: {self.null_policy!r}")

    @property
    def retain_nulls(self) -> bool:
        return self.null_policy == "retain"


@dataclass(frozen=True)
class BrushConfig:
    enabled: bool = True
    time_snap: str | None = "day"

    def __post_init__(self) -> None:
        if self.time_snap not in TIME_SNAPS:
            raise ChartConfigError(f"unsupported time_snap: {self.time_snap!r}")


@dataclass(frozen=True)
class ChartConfig:
    width: int = 800
    height: int = 500
    margin: Margin = field(default_factory=Margin)
    key: KeyConfig = field(default_factory=KeyConfig)
    scale: ScaleConfig = field(default_factory=ScaleConfig)
    stack: StackConfig = field(default_factory=StackConfig)
    brush: BrushConfig = field(default_factory=BrushConfig)

    def __post_init__(self) -> None:
        if self.chart_width <= 0 or self.chart_height <= 0:
            raise ChartConfigError("chart width/height must be > 0 after subtracting margins")

    @property
    def chart_width(self) -> int:
        return self.width - self.margin.left - self.margin.right

    @property
    def chart_height(self) -> int:
        return self.height - self.margin.top - self.margin.bottom

    @property
    def is_stacked(self) -> bool:
        return self.scale.is_stacked

    def replace(self, **changes: Any) -> "ChartConfig":
        return dataclasses.replace(self, **changes)


_SECTIONS: dict[str, type] = {
    "margin": Margin,
    "key": KeyConfig,
    "scale": ScaleConfig,
    "stack": StackConfig,
    "brush": BrushConfig,
}


def chart_config_from_mapping(raw: Mapping[str, Any]) -> ChartConfig:
    """Build a validated `ChartConfig` from nested plain data (TOML/JSON shaped).

    Unknown sections or fields are rejected instead of ignored.
    """

    if not isinstance(raw, Mapping):
        raise ChartConfigError("chart config must be a mapping")
    kwargs: dict[str, Any] = {}
    for name, value in raw.items():
        if name in ("width", "height"):
            kwargs[name] = _coerce_int(value, name)
            continue
        section = _SECTIONS.get(name)
        if section is None:
            raise ChartConfigError(f"unknown chart config field: {name}")
        if not isinstance(value, Mapping):
            raise ChartConfigError(f"chart config section `{name}` must be a table")
        kwargs[name] = _build_section(section, name, value)
    return ChartConfig(**kwargs)


def merge_chart_config(base: ChartConfig, overrides: Mapping[str, Any]) -> ChartConfig:
    merged = asdict(base)
    for name, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(name), dict):
            section = dict(merged[name])
            section.update(value)
            merged[name] = section
        else:
            merged[name] = value
    return chart_config_from_mapping(merged)


def load_chart_config(path: str | Path) -> ChartConfig:
    config_path = Path(path)
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    return chart_config_from_mapping(raw)


def _build_section(section: type, name: str, values: Mapping[str, Any]) -> Any:
    known = {f.name for f in dataclasses.fields(section)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ChartConfigError(f"unknown field(s) in `{name}`: {', '.join(unknown)}")
    data = dict(values)
    if section is ScaleConfig and "color_schema" in data:
        data["color_schema"] = _coerce_color_schema(data["color_schema"])
    if section is KeyConfig and data.get("category_order") is not None:
        data["category_order"] = tuple(data["category_order"])
    try:
        return section(**data)
    except TypeError as exc:
        raise ChartConfigError(f"invalid `{name}` section: {exc}") from exc


def _coerce_color_schema(raw: Any) -> tuple[ColorEntry, ...]:
    if isinstance(raw, str):
        try:
            return tuple(ColorEntry(value=color) for color in palette(raw))
        except ValueError as exc:
            raise ChartConfigError(str(exc)) from exc
    if not isinstance(raw, Sequence):
        raise ChartConfigError("color_schema must be a palette name or a list of entries")
    entries: list[ColorEntry] = []
    for i, item in enumerate(raw):
        if isinstance(item, ColorEntry):
            entries.append(item)
        elif isinstance(item, str):
            entries.append(ColorEntry(value=item))
        elif isinstance(item, Mapping):
            if "value" not in item:
                raise ChartConfigError(f"color_schema[{i}] is missing `value`")
            entries.append(
                ColorEntry(
                    value=item["value"],
                    key=item.get("key"),
                    style=item.get("style"),
                    chart_type=item.get("chart_type", item.get("type")),
                )
            )
        else:
            raise ChartConfigError(f"color_schema[{i}] has unsupported type {type(item)!r}")
    return tuple(entries)


def _coerce_domain(value: Any, name: str) -> tuple[Any, Any] | str:
    if value == "auto":
        return "auto"
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise ChartConfigError(f"{name} must be 'auto' or a [min, max] pair")
    return (value[0], value[1])


def _coerce_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ChartConfigError(f"{name} must be a number")
    return int(value)
