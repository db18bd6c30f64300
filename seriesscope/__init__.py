from seriesscope.api import chart_from_config
from seriesscope.brush import BrushRangeExtractor
from seriesscope.chart import Chart
from seriesscope.config import (
    BrushConfig,
    ChartConfig,
    ColorEntry,
    KeyConfig,
    Margin,
    ScaleConfig,
    StackConfig,
    chart_config_from_mapping,
    load_chart_config,
    merge_chart_config,
)
from seriesscope.errors import (
    AxisGroupOverflowError,
    ChartConfigError,
    ChartDataError,
    EmptyDomainError,
    InvalidKeyTypeError,
    UnparsableKeyError,
)
from seriesscope.events import BrushEvent, DataFilterEvent, EventBus, HoverEvent
from seriesscope.inversion import HoverPoint, invert_x, nearest_bucket
from seriesscope.series import DataPoint, FlatPoint, KeyBucket, NormalizedData, Series
from seriesscope.state import ChartState, build_chart_state

__all__ = [
    "AxisGroupOverflowError",
    "BrushConfig",
    "BrushEvent",
    "BrushRangeExtractor",
    "Chart",
    "ChartConfig",
    "ChartConfigError",
    "ChartDataError",
    "ChartState",
    "ColorEntry",
    "DataFilterEvent",
    "DataPoint",
    "EmptyDomainError",
    "EventBus",
    "FlatPoint",
    "HoverEvent",
    "HoverPoint",
    "InvalidKeyTypeError",
    "KeyBucket",
    "KeyConfig",
    "Margin",
    "NormalizedData",
    "ScaleConfig",
    "Series",
    "StackConfig",
    "UnparsableKeyError",
    "build_chart_state",
    "chart_from_config",
    "chart_config_from_mapping",
    "invert_x",
    "load_chart_config",
    "merge_chart_config",
    "nearest_bucket",
]
