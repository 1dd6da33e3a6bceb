from __future__ import annotations

import math
import unittest

import numpy as np

from gridplot.config import Margins
from gridplot.scales import (
    Bounds,
    DataTransform,
    format_number,
    format_ticks_for_axis,
    generate_nice_ticks,
    nice_step,
    pad_range,
    transform_point,
)


def _mantissa(step: float) -> float:
    return step / 10.0 ** math.floor(math.log10(step))


class NiceTickTests(unittest.TestCase):
    RANGES = [
        (0.0, 1.0),
        (-3.7, 12.2),
        (0.001, 0.0042),
        (-1.0e6, 2.5e6),
        (-0.5, 10.5),
        (5.0, 5.0001),
        (-250.0, -12.0),
        (0.86, 8.14),
    ]

    def test_ticks_are_sorted_in_range_and_evenly_spaced_by_nice_step(self) -> None:
        for vmin, vmax in self.RANGES:
            for target in range(1, 11):
                with self.subTest(vmin=vmin, vmax=vmax, target=target):
                    ticks = generate_nice_ticks(vmin, vmax, target)
                    if ticks.size == 0:
                        continue
                    step = nice_step(vmin, vmax, target)
                    eps = step * 0.001
                    self.assertTrue(np.all(np.diff(ticks) > 0))
                    self.assertGreaterEqual(float(ticks[0]), vmin - eps)
                    self.assertLessEqual(float(ticks[-1]), vmax + eps)
                    if ticks.size >= 2:
                        gaps = np.diff(ticks)
                        self.assertTrue(np.allclose(gaps, gaps[0], rtol=1e-9, atol=step * 1e-9))
                        m = _mantissa(float(gaps[0]))
                        self.assertTrue(any(math.isclose(m, c, rel_tol=1e-6) for c in (1.0, 2.0, 5.0, 10.0)), m)

    def test_step_refines_until_enough_ticks(self) -> None:
        for vmin, vmax in self.RANGES:
            for target in range(2, 9):
                with self.subTest(vmin=vmin, vmax=vmax, target=target):
                    self.assertGreaterEqual(generate_nice_ticks(vmin, vmax, target).size, target - 1)

    def test_padded_zero_to_ten_range_keeps_round_endpoints(self) -> None:
        ticks = generate_nice_ticks(-0.5, 10.5, 5)
        self.assertGreaterEqual(ticks.size, 4)
        self.assertIn(0.0, ticks.tolist())
        self.assertIn(10.0, ticks.tolist())

    def test_degenerate_range_returns_single_tick(self) -> None:
        self.assertEqual(generate_nice_ticks(3.25, 3.25, 5).tolist(), [3.25])

    def test_range_below_float_resolution_returns_single_tick(self) -> None:
        self.assertEqual(generate_nice_ticks(1.0, 1.0 + 4e-16, 6).tolist(), [1.0])
        narrow = generate_nice_ticks(1.0, 1.0 + 1e-12, 6)
        self.assertGreater(narrow.size, 1)
        self.assertEqual(np.unique(narrow).size, narrow.size)

    def test_ticks_are_deterministic(self) -> None:
        a = generate_nice_ticks(-3.7, 12.2, 6)
        b = generate_nice_ticks(-3.7, 12.2, 6)
        self.assertTrue(np.array_equal(a, b))

    def test_near_zero_tick_snaps_to_exact_zero(self) -> None:
        ticks = generate_nice_ticks(-0.3, 0.3, 6)
        self.assertIn(0.0, ticks.tolist())
        self.assertFalse(any(v != 0.0 and abs(v) < 1e-12 for v in ticks.tolist()))

    def test_invalid_inputs_raise(self) -> None:
        with self.assertRaises(ValueError):
            generate_nice_ticks(0.0, 1.0, 0)
        with self.assertRaises(ValueError):
            generate_nice_ticks(2.0, 1.0, 5)
        with self.assertRaises(ValueError):
            generate_nice_ticks(0.0, float("inf"), 5)


class FormattingTests(unittest.TestCase):
    def test_format_number_trims_trailing_zeros(self) -> None:
        self.assertEqual(format_number(2.5), "2.5")
        self.assertEqual(format_number(3.0), "3")
        self.assertEqual(format_number(1.234), "1.23")
        self.assertEqual(format_number(-0.001), "0")
        self.assertEqual(format_number(40.0), "40")

    def test_axis_labels_use_step_decimals(self) -> None:
        self.assertEqual(format_ticks_for_axis(np.asarray([1.5, 2.0, 2.5, 3.0])), ["1.5", "2", "2.5", "3"])
        self.assertEqual(format_ticks_for_axis(np.asarray([20.0, 30.0, 40.0])), ["20", "30", "40"])
        self.assertEqual(format_ticks_for_axis(np.asarray([], dtype=np.float64)), [])


class TransformTests(unittest.TestCase):
    def test_bounds_corners_map_to_margin_inset_canvas_corners(self) -> None:
        bounds = Bounds(-2.0, 8.0, 10.0, 30.0)
        t = DataTransform(bounds=bounds, margins=Margins(), width=800, height=600)
        self.assertEqual(t.apply(-2.0, 10.0), (80.0, 520.0))
        self.assertEqual(t.apply(8.0, 10.0), (650.0, 520.0))
        self.assertEqual(t.apply(-2.0, 30.0), (80.0, 60.0))
        self.assertEqual(t.apply(8.0, 30.0), (650.0, 60.0))
        self.assertEqual(t.plot_rect, (80.0, 60.0, 570.0, 460.0))

    def test_y_axis_is_inverted(self) -> None:
        bounds = Bounds(0.0, 1.0, 0.0, 1.0)
        _, low = transform_point(0.5, 0.1, bounds, Margins(), 800, 600)
        _, high = transform_point(0.5, 0.9, bounds, Margins(), 800, 600)
        self.assertGreater(low, high)

    def test_apply_many_matches_apply(self) -> None:
        t = DataTransform(bounds=Bounds(0.0, 4.0, -1.0, 1.0), margins=Margins(10, 10, 10, 10), width=220, height=120)
        xs = np.asarray([0.0, 1.0, 4.0])
        ys = np.asarray([-1.0, 0.0, 1.0])
        px, py = t.apply_many(xs, ys)
        for i in range(3):
            self.assertEqual((float(px[i]), float(py[i])), t.apply(float(xs[i]), float(ys[i])))

    def test_zero_range_bounds_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DataTransform(bounds=Bounds(1.0, 1.0, 0.0, 1.0), margins=Margins(), width=800, height=600)

    def test_pad_range_substitutes_unit_span(self) -> None:
        lo, hi = pad_range(3.0, 3.0, 0.05)
        self.assertAlmostEqual(lo, 2.95)
        self.assertAlmostEqual(hi, 3.05)
        self.assertEqual(pad_range(0.0, 10.0, 0.05), (-0.5, 10.5))


if __name__ == "__main__":
    unittest.main()
