from __future__ import annotations

import unittest

from seriesscope import ChartConfig, KeyConfig, Margin, ScaleConfig, StackConfig, build_chart_state


def _stacked_config(null_policy: str) -> ChartConfig:
    return ChartConfig(
        width=400,
        height=300,
        margin=Margin(0, 0, 0, 0),
        key=KeyConfig(key_type="number"),
        scale=ScaleConfig(chart_type="stackedArea"),
        stack=StackConfig(null_policy=null_policy),
    )


_EXAMPLE = [
    {"id": "X", "values": [[1, 10], [2, 20]]},
    {"id": "Y", "values": [[1, 5], [2, None]]},
]


class StackLayoutTests(unittest.TestCase):
    def test_retained_nulls_are_excluded_from_the_stack(self) -> None:
        state = build_chart_state(_EXAMPLE, _stacked_config("retain"))
        stack = state.stack
        assert stack is not None
        self.assertEqual(stack.rows[0].values, {"X": 10.0, "Y": 5.0})
        self.assertEqual(stack.rows[0].total, 15.0)
        self.assertEqual(stack.rows[1].values, {"X": 20.0, "Y": None})
        self.assertEqual(stack.rows[1].total, 20.0)
        self.assertEqual(stack.domain, (0.0, 20.0))
        self.assertEqual(state.scales.y_scale.domain, (0.0, 20.0))

    def test_bands_accumulate_in_series_order(self) -> None:
        stack = build_chart_state(_EXAMPLE, _stacked_config("retain")).stack
        assert stack is not None
        self.assertEqual(stack.band("X", 0), (0.0, 10.0))
        self.assertEqual(stack.band("Y", 0), (10.0, 15.0))
        self.assertIsNone(stack.band("Y", 1))
        self.assertEqual(stack.bands_at(1), {"X": (0.0, 20.0), "Y": None})

    def test_zero_policy_fills_missing_values(self) -> None:
        stack = build_chart_state(_EXAMPLE, _stacked_config("zero")).stack
        assert stack is not None
        self.assertEqual(stack.rows[1].values, {"X": 20.0, "Y": 0.0})
        self.assertEqual(stack.band("Y", 1), (20.0, 20.0))

    def test_band_heights_sum_to_row_total(self) -> None:
        raw = [
            {"id": "a", "values": [[1, 3], [2, -2], [3, 4]]},
            {"id": "b", "values": [[1, 1], [3, 6]]},
            {"id": "c", "values": [[2, 7], [3, None]]},
        ]
        for policy in ("zero", "retain"):
            stack = build_chart_state(raw, _stacked_config(policy)).stack
            assert stack is not None
            for r, row in enumerate(stack.rows):
                heights = [band[1] - band[0] for band in stack.bands_at(r).values() if band is not None]
                self.assertAlmostEqual(sum(heights), row.total)

    def test_stacked_y_domain_is_not_rounded(self) -> None:
        raw = [
            {"id": "a", "values": [[1, 9], [2, 3]]},
            {"id": "b", "values": [[1, 8], [2, 2]]},
        ]
        state = build_chart_state(raw, _stacked_config("zero"))
        assert state.stack is not None
        self.assertEqual([row.total for row in state.stack.rows], [17.0, 5.0])
        self.assertEqual(state.scales.y_scale.domain, (0.0, 17.0))
        self.assertEqual(state.scales.y_scale.range, (300.0, 0.0))

    def test_explicit_y_domain_overrides_the_stack_extent(self) -> None:
        config = _stacked_config("zero").replace(scale=ScaleConfig(chart_type="stackedBar", y_domain=(0, 50)))
        state = build_chart_state(_EXAMPLE, config)
        self.assertEqual(state.scales.y_scale.domain, (0.0, 50.0))

    def test_negative_values_extend_the_domain_below_zero(self) -> None:
        raw = [{"id": "a", "values": [[1, -5], [2, 3]]}]
        stack = build_chart_state(raw, _stacked_config("zero")).stack
        assert stack is not None
        self.assertEqual(stack.domain, (-5.0, 3.0))

    def test_duplicate_keys_in_one_series_are_summed(self) -> None:
        raw = [{"id": "a", "values": [[1, 2], [1, 3]]}]
        with self.assertLogs("seriesscope.stacking", level="WARNING"):
            stack = build_chart_state(raw, _stacked_config("zero")).stack
        assert stack is not None
        self.assertEqual(stack.rows[0].values, {"a": 5.0})

    def test_stacked_charts_use_a_single_axis(self) -> None:
        raw = [
            {"id": "a", "group": "l", "values": [[1, 2]]},
            {"id": "b", "group": "r", "values": [[1, 3]]},
        ]
        state = build_chart_state(raw, _stacked_config("zero"))
        self.assertFalse(state.scales.has_second_axis)
        self.assertIsNone(state.scales.y2_scale)

    def test_unstacked_charts_have_no_stack(self) -> None:
        config = _stacked_config("zero").replace(scale=ScaleConfig(chart_type="line"))
        self.assertIsNone(build_chart_state(_EXAMPLE, config).stack)


if __name__ == "__main__":
    unittest.main()
