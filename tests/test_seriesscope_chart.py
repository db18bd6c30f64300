from __future__ import annotations

import datetime as dt
from pathlib import Path
import tempfile
import unittest

from seriesscope import (
    AxisGroupOverflowError,
    Chart,
    ChartConfig,
    EmptyDomainError,
    InvalidKeyTypeError,
    KeyConfig,
    Margin,
    ScaleConfig,
    chart_from_config,
)


UTC = dt.timezone.utc


def _config(**changes) -> ChartConfig:
    base = ChartConfig(width=400, height=300, margin=Margin(0, 0, 0, 0), key=KeyConfig(key_type="number"))
    return base.replace(**changes)


_DATA = {
    "series": [
        {"id": "cpu", "group": "pct", "values": [[0, 10], [50, 30], [100, 20]]},
        {"id": "mem", "group": "bytes", "values": [[0, 1000], [100, 4000]]},
    ]
}


class _Recorder:
    def __init__(self, chart: Chart, *event_types: str) -> None:
        self.events = []
        for event_type in event_types:
            chart.on(event_type, self.events.append)


class ChartTests(unittest.TestCase):
    def test_state_exposes_derived_model(self) -> None:
        chart = Chart(_config(), data=_DATA)
        state = chart.state
        assert state is not None
        self.assertEqual([s.id for s in state.data_by_series], ["cpu", "mem"])
        self.assertEqual([b.key for b in state.data_by_key], [0.0, 50.0, 100.0])
        self.assertTrue(state.scales.has_second_axis)
        assert state.scales.y2_scale is not None
        self.assertEqual(state.scales.y_scale.domain, (10.0, 30.0))
        self.assertEqual(state.scales.y2_scale.domain, (1000.0, 4000.0))
        self.assertEqual(state.scales.color_scale("cpu"), "#ea5545")

    def test_hover_emits_bucket_and_pixel(self) -> None:
        chart = Chart(_config(), data=_DATA)
        recorder = _Recorder(chart, "hover", "hover_out")
        point = chart.pointer_move(150.0)
        assert point is not None
        self.assertEqual(point.bucket.key, 50.0)
        self.assertAlmostEqual(point.pixel_x, 200.0)
        self.assertEqual(recorder.events[0].event_type, "hover")
        self.assertEqual(recorder.events[0].bucket.value_for("cpu"), 30.0)
        self.assertIs(chart.hovered, point)

    def test_hover_outside_the_plot_emits_hover_out_once(self) -> None:
        chart = Chart(_config(), data=_DATA)
        recorder = _Recorder(chart, "hover", "hover_out")
        chart.pointer_move(10.0)
        self.assertIsNone(chart.pointer_move(-5.0))
        chart.pointer_out()
        self.assertEqual([e.event_type for e in recorder.events], ["hover", "hover_out"])
        self.assertIsNone(chart.hovered)

    def test_click_emits_click_event(self) -> None:
        chart = Chart(_config(), data=_DATA)
        recorder = _Recorder(chart, "click")
        chart.click(399.0)
        self.assertEqual(recorder.events[0].bucket.key, 100.0)

    def test_pointer_input_before_data_is_ignored(self) -> None:
        chart = Chart(_config())
        self.assertIsNone(chart.state)
        self.assertIsNone(chart.pointer_move(10.0))
        self.assertIsNone(chart.click(10.0))
        self.assertEqual(chart.brush.pointer_down(10.0), "idle")

    def test_configured_y_domains_override_computed_extents(self) -> None:
        config = _config().replace(scale=ScaleConfig(y_domain=(0, 50), y2_domain=(0, 10000)))
        state = Chart(config, data=_DATA).state
        assert state is not None
        assert state.scales.y2_scale is not None
        self.assertEqual(state.scales.y_scale.domain, (0.0, 50.0))
        self.assertEqual(state.scales.y2_scale.domain, (0.0, 10000.0))

    def test_failed_rebuild_keeps_previous_state(self) -> None:
        chart = Chart(_config(), data=_DATA)
        before = chart.state
        bad = {"series": [{"id": i, "group": i, "values": [[0, 1]]} for i in range(3)]}
        with self.assertRaises(AxisGroupOverflowError):
            chart.set_data(bad)
        self.assertIs(chart.state, before)
        with self.assertRaises(EmptyDomainError):
            chart.set_data({"series": [{"id": "a", "values": [[0, None]]}]})
        self.assertIs(chart.state, before)

    def test_failed_config_change_keeps_previous_config(self) -> None:
        chart = Chart(_config(), data=_DATA)
        before = chart.config
        with self.assertRaises(InvalidKeyTypeError):
            chart.set_config({"key": {"key_type": "duration"}})
        self.assertIs(chart.config, before)

    def test_config_change_rebuilds_from_last_data(self) -> None:
        chart = Chart(_config(), data=_DATA)
        chart.set_config({"scale": {"chart_type": "stackedArea"}})
        state = chart.state
        assert state is not None
        assert state.stack is not None
        self.assertEqual(state.stack.rows[0].total, 1010.0)
        self.assertFalse(state.scales.has_second_axis)

        chart.set_config({"key": {"key_type": "string"}})
        state = chart.state
        assert state is not None
        self.assertEqual(state.scales.x_scale.kind, "point")
        self.assertEqual(state.key_index.keys, ("0", "100", "50"))

    def test_chart_from_mapping_and_toml(self) -> None:
        chart = chart_from_config({"key": {"key_type": "number"}}, data=_DATA)
        self.assertIsNotNone(chart.state)
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "chart.toml"
            path.write_text('[key]\nkey_type = "time"\n', encoding="utf-8")
            chart = chart_from_config(path)
        self.assertEqual(chart.config.key.key_type, "time")
        self.assertIsNone(chart.state)

    def test_time_chart_hover(self) -> None:
        start = dt.datetime(2024, 1, 1, tzinfo=UTC)
        raw = [{"id": "a", "values": [[(start + dt.timedelta(days=i)).isoformat(), i] for i in range(5)]}]
        chart = Chart(_config(key=KeyConfig(key_type="time")), data=raw)
        point = chart.pointer_move(150.0)
        assert point is not None
        self.assertEqual(point.bucket.key, dt.datetime(2024, 1, 3, tzinfo=UTC))
        self.assertAlmostEqual(point.pixel_x, 200.0)


if __name__ == "__main__":
    unittest.main()
