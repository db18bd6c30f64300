from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from seriesscope.chart import Chart
from seriesscope.config import ChartConfig, chart_config_from_mapping, load_chart_config


def chart_from_config(config: str | Path | Mapping[str, Any] | ChartConfig | None = None, data: Any = None) -> Chart:
    """Create a `Chart` from a TOML path, a nested mapping or a `ChartConfig`."""

    if config is None:
        resolved = ChartConfig()
    elif isinstance(config, ChartConfig):
        resolved = config
    elif isinstance(config, Mapping):
        resolved = chart_config_from_mapping(config)
    else:
        resolved = load_chart_config(config)
    return Chart(resolved, data=data)
