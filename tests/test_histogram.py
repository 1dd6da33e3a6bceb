from __future__ import annotations

import unittest

import numpy as np

from gridplot.histogram import (
    bin_samples,
    calculate_bins,
    calculate_counts,
    calculate_cumulative,
    discrete_bar_extent,
    sturges_bin_count,
)


class HistogramBinnerTests(unittest.TestCase):
    def test_eight_samples_into_four_bins(self) -> None:
        samples = np.arange(1.0, 9.0)
        edges, counts = bin_samples(samples, 4)
        self.assertEqual(edges.size, 5)
        self.assertEqual(counts.tolist(), [2, 2, 2, 2])
        self.assertEqual(int(counts.sum()), 8)

    def test_counts_sum_to_sample_count_and_edges_increase(self) -> None:
        rng = np.random.default_rng(0)
        for n in (1, 2, 17, 500, 4096):
            with self.subTest(n=n):
                samples = rng.normal(3.0, 7.0, n)
                edges, counts = bin_samples(samples)
                self.assertTrue(np.all(np.diff(edges) > 0))
                self.assertEqual(int(counts.sum()), n)

    def test_maximum_sample_lands_in_last_bin(self) -> None:
        edges, counts = bin_samples(np.asarray([0.0, 0.5, 1.0]), 2)
        self.assertGreater(edges[-1], 1.0)
        self.assertEqual(counts.tolist(), [1, 2])

    def test_last_edge_moves_even_when_epsilon_is_absorbed(self) -> None:
        edges, counts = bin_samples(np.asarray([0.0, 1.0e12]), 3)
        self.assertGreater(edges[-1], 1.0e12)
        self.assertEqual(int(counts.sum()), 2)

    def test_identical_samples_bin_over_unit_range(self) -> None:
        edges = calculate_bins(np.asarray([3.0, 3.0, 3.0]))
        self.assertAlmostEqual(float(edges[0]), 2.5)
        self.assertAlmostEqual(float(edges[-1]), 3.5)
        counts = calculate_counts(np.asarray([3.0, 3.0, 3.0]), edges)
        self.assertEqual(counts.tolist(), [0, 3, 0])

    def test_sturges_rule_is_capped(self) -> None:
        self.assertEqual(sturges_bin_count(1), 1)
        self.assertEqual(sturges_bin_count(8), 4)
        self.assertEqual(sturges_bin_count(1000), 11)
        self.assertEqual(sturges_bin_count(10**7), 20)
        self.assertEqual(sturges_bin_count(10**7, cap=12), 12)

    def test_cumulative_is_non_decreasing_and_ends_at_total(self) -> None:
        _, counts = bin_samples(np.random.default_rng(1).uniform(0.0, 1.0, 300), 12)
        cumulative = calculate_cumulative(counts)
        self.assertTrue(np.all(np.diff(cumulative) >= 0))
        self.assertEqual(int(cumulative[-1]), 300)

    def test_empty_samples_produce_no_bins(self) -> None:
        edges, counts = bin_samples(np.asarray([], dtype=np.float64))
        self.assertEqual(edges.size, 0)
        self.assertEqual(counts.size, 0)

    def test_discrete_bars_do_not_touch(self) -> None:
        left, right = discrete_bar_extent(2)
        self.assertAlmostEqual(left, 1.6)
        self.assertAlmostEqual(right, 2.4)
        _, prev_right = discrete_bar_extent(1)
        self.assertLess(prev_right, left)


if __name__ == "__main__":
    unittest.main()
