from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any

from seriesscope import Chart, ChartConfig, load_chart_config
from seriesscope.events import DataFilterEvent


def main() -> None:
    parser = argparse.ArgumentParser(prog="seriesscope")
    sub = parser.add_subparsers(dest="command", required=True)

    describe = sub.add_parser("describe", help="Build the chart model for a JSON data file and print a summary.")
    describe.add_argument("data", type=Path, help="JSON file: {\"series\": [...]} or a list of series.")
    describe.add_argument("--config", type=Path, default=None, help="Chart config TOML file.")
    describe.add_argument("--hover", type=float, default=None, help="Resolve a pointer x-position (pixels).")
    describe.add_argument(
        "--brush",
        type=float,
        nargs=2,
        metavar=("X0", "X1"),
        default=None,
        help="Simulate a brush drag between two pixel positions.",
    )
    describe.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "describe":
        config = load_chart_config(args.config) if args.config is not None else ChartConfig()
        with args.data.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        print(json.dumps(_describe(Chart(config, data=raw), args.hover, args.brush), indent=2))
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def _describe(chart: Chart, hover: float | None, brush: list[float] | None) -> dict[str, Any]:
    state = chart.state
    assert state is not None
    scales = state.scales
    summary: dict[str, Any] = {
        "key_type": state.key_type,
        "chart_type": state.config.scale.chart_type,
        "series": [
            {
                "id": s.id,
                "label": s.label,
                "group": s.group,
                "points": len(s.values),
                "axis": state.groups.axis_for(s.id),
                "color": scales.color_scale(s.id),
                "style": scales.style_scale(s.id),
                "chart_type": scales.chart_type_scale(s.id),
            }
            for s in state.data_by_series
        ],
        "keys": len(state.key_index),
        "dropped": [
            {"series_id": d.series_id, "index": d.index, "raw_key": repr(d.raw_key), "reason": d.reason}
            for d in state.dropped
        ],
        "x": {"kind": scales.x_scale.kind, "domain": list(scales.x_scale.domain), "range": list(scales.x_scale.range)},
        "y": {"domain": list(scales.y_scale.domain), "ticks": scales.y_scale.ticks().tolist()},
    }
    if scales.y2_scale is not None:
        summary["y2"] = {"domain": list(scales.y2_scale.domain), "ticks": scales.y2_scale.ticks().tolist()}
    if state.stack is not None:
        summary["stack"] = {
            "domain": list(state.stack.domain),
            "totals": [{"key": row.key, "total": row.total} for row in state.stack.rows],
        }

    if hover is not None:
        point = chart.pointer_move(hover)
        summary["hover"] = None
        if point is not None:
            summary["hover"] = {
                "key": point.bucket.key,
                "pixel_x": point.pixel_x,
                "values": {p.id: p.value for p in point.bucket.series},
            }

    if brush is not None:
        filtered: list[DataFilterEvent] = []
        chart.on("data_filter", filtered.append)
        chart.brush.pointer_down(brush[0])
        chart.brush.pointer_up(brush[1])
        summary["brush"] = None
        if filtered:
            event = filtered[-1]
            summary["brush"] = {
                "extent": list(event.extent),
                "selection": list(chart.brush.selection or ()),
                "points": {s.id: len(s.values) for s in event.series},
            }
    return _jsonable(summary)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dt.datetime):
        return value.isoformat()
    return value


if __name__ == "__main__":
    main()
