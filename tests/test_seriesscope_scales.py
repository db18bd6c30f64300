from __future__ import annotations

import datetime as dt
import unittest

import numpy as np

from seriesscope import ChartConfig, ChartConfigError, ColorEntry, EmptyDomainError, KeyConfig, Margin, ScaleConfig
from seriesscope.scales import (
    LinearScale,
    PointScale,
    TimeScale,
    build_chart_type_scale,
    build_color_scale,
    build_style_scale,
    build_x_scale,
    build_y_scale,
    generate_nice_ticks,
    nice_domain,
)


UTC = dt.timezone.utc


def _config(key_type: str = "number", width: int = 500, height: int = 200, **scale) -> ChartConfig:
    return ChartConfig(
        width=width,
        height=height,
        margin=Margin(0, 0, 0, 0),
        key=KeyConfig(key_type=key_type),
        scale=ScaleConfig(**scale),
    )


class XScaleTests(unittest.TestCase):
    def test_categorical_step_and_positions(self) -> None:
        keys = ["a", "b", "c", "d", "e"]
        x = build_x_scale(keys, _config("string", width=400))
        self.assertIsInstance(x, PointScale)
        self.assertEqual(x.step(), 80)
        self.assertEqual(x(keys[2]), 160)
        self.assertIsNone(x("z"))

    def test_categorical_explicit_domain_slices_keys(self) -> None:
        x = build_x_scale(["a", "b", "c", "d"], _config("string", width=400, x_domain=("b", "c")))
        self.assertEqual(x.domain, ("b", "c"))
        with self.assertRaises(ChartConfigError):
            build_x_scale(["a", "b"], _config("string", x_domain=("a", "zz")))

    def test_number_domain_maps_to_chart_width(self) -> None:
        x = build_x_scale([1.0, 5.0, 10.0], _config("number"))
        self.assertIsInstance(x, LinearScale)
        self.assertAlmostEqual(x(1.0), 0.0)
        self.assertAlmostEqual(x(10.0), 500.0)

    def test_time_domain_maps_to_chart_width(self) -> None:
        keys = [dt.datetime(2024, 1, 1, tzinfo=UTC), dt.datetime(2024, 1, 11, tzinfo=UTC)]
        x = build_x_scale(keys, _config("time"))
        self.assertIsInstance(x, TimeScale)
        self.assertAlmostEqual(x(keys[0]), 0.0)
        self.assertAlmostEqual(x(keys[1]), 500.0)
        self.assertAlmostEqual(x(dt.datetime(2024, 1, 6, tzinfo=UTC)), 250.0)

    def test_bar_charts_inset_the_range_by_half_a_mark(self) -> None:
        x = build_x_scale([0.0, 10.0], _config("number", chart_type="bar", mark_width=20.0))
        self.assertEqual(x.range, (10.0, 490.0))
        self.assertAlmostEqual(x(0.0), 10.0)

    def test_single_key_domain_is_widened(self) -> None:
        x = build_x_scale([5.0], _config("number"))
        self.assertEqual(x.domain, (4.0, 6.0))
        t = build_x_scale([dt.datetime(2024, 1, 2, tzinfo=UTC)], _config("time"))
        self.assertEqual(t.domain, (dt.datetime(2024, 1, 1, tzinfo=UTC), dt.datetime(2024, 1, 3, tzinfo=UTC)))

    def test_explicit_x_domain_overrides_extent(self) -> None:
        x = build_x_scale([10.0, 20.0], _config("number", x_domain=(0, 1000)))
        self.assertEqual(x.domain, (0.0, 1000.0))
        with self.assertRaises(ChartConfigError):
            build_x_scale([10.0], _config("number", x_domain=("low", "high")))

    def test_empty_keys_raise(self) -> None:
        with self.assertRaises(EmptyDomainError):
            build_x_scale([], _config("number"))
        with self.assertRaises(EmptyDomainError):
            build_x_scale([], _config("string"))


class YScaleTests(unittest.TestCase):
    def test_extent_is_rounded_outward(self) -> None:
        y = build_y_scale([3.0, None, 97.0], _config())
        self.assertEqual(y.domain, (0.0, 100.0))
        self.assertEqual(y.range, (200.0, 0.0))

    def test_explicit_domain_is_kept_as_is(self) -> None:
        y = build_y_scale([3.0, 97.0], _config(y_domain=(-5, 13)))
        self.assertEqual(y.domain, (-5.0, 13.0))

    def test_y2_axis_reads_its_own_configured_domain(self) -> None:
        config = _config(y_domain=(0, 1), y2_domain=(-2, 8))
        self.assertEqual(build_y_scale([3.0], config, axis="y2").domain, (-2.0, 8.0))
        self.assertEqual(build_y_scale([3.0], config).domain, (0.0, 1.0))
        self.assertEqual(build_y_scale([3.0, 97.0], config, explicit="auto").domain, (0.0, 100.0))

    def test_degenerate_extent_is_widened(self) -> None:
        y = build_y_scale([5.0, 5.0], _config())
        lo, hi = y.domain
        self.assertLess(lo, 5.0)
        self.assertGreater(hi, 5.0)

    def test_all_null_values_raise(self) -> None:
        with self.assertRaises(EmptyDomainError) as ctx:
            build_y_scale([None, None], _config(), axis="y2")
        self.assertEqual(ctx.exception.axis, "y2")

    def test_linear_invert_and_ticks(self) -> None:
        y = LinearScale((0.0, 100.0), (200.0, 0.0))
        self.assertAlmostEqual(y(25.0), 150.0)
        self.assertAlmostEqual(y.invert(150.0), 25.0)
        self.assertEqual(y.ticks(5).tolist(), [0.0, 20.0, 40.0, 60.0, 80.0, 100.0])

    def test_nice_domain_and_ticks(self) -> None:
        self.assertEqual(nice_domain(0.0, 17.0, 10), (0.0, 18.0))
        self.assertEqual(nice_domain(0.0, 20.0, 10), (0.0, 20.0))
        self.assertEqual(nice_domain(97.0, 3.0, 10), (100.0, 0.0))
        ticks = generate_nice_ticks(-1.0, 1.0, 5)
        self.assertTrue(np.all(ticks >= -1.0))
        self.assertIn(0.0, ticks.tolist())


class OrdinalScaleTests(unittest.TestCase):
    def test_color_precedence(self) -> None:
        schema = (ColorEntry("red", key="b"), ColorEntry("green"), ColorEntry("blue"))
        colors = build_color_scale(("a", "b", "c"), schema, "skyblue")
        self.assertEqual(colors("b"), "red")
        self.assertEqual(colors("c"), "blue")
        self.assertEqual(colors("a"), "skyblue")
        self.assertEqual(colors("unknown"), "skyblue")

    def test_color_scale_is_deterministic(self) -> None:
        schema = (ColorEntry("red"), ColorEntry("green"))
        first = build_color_scale(("a", "b"), schema, "skyblue").as_dict()
        second = build_color_scale(("a", "b"), schema, "skyblue").as_dict()
        self.assertEqual(first, second)
        self.assertEqual(first, {"a": "red", "b": "green"})

    def test_style_and_chart_type_fallbacks(self) -> None:
        schema = (ColorEntry("red", key="b", style="dashed", chart_type="bar"),)
        styles = build_style_scale(("a", "b"), schema)
        types = build_chart_type_scale(("a", "b"), schema)
        self.assertEqual(styles("b"), "dashed")
        self.assertEqual(styles("a"), "solid")
        self.assertEqual(types("b"), "bar")
        self.assertEqual(types("a"), "line")


if __name__ == "__main__":
    unittest.main()
