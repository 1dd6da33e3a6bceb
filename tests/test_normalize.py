from __future__ import annotations

from decimal import Decimal
import importlib.util
import unittest

import numpy as np

from gridplot import Plot, PlotDataError
from gridplot.adapters import coerce_1d, normalize_counts, normalize_labels, normalize_samples, normalize_xy

HAS_PANDAS = importlib.util.find_spec("pandas") is not None
HAS_TORCH = importlib.util.find_spec("torch") is not None


class NormalizeTests(unittest.TestCase):
    def test_sequences_and_arrays(self) -> None:
        x, y = normalize_xy([1, 2, 3], np.asarray([4.0, 5.0, 6.0], dtype=np.float32))
        self.assertEqual(x.dtype, np.float64)
        self.assertEqual(y.tolist(), [4.0, 5.0, 6.0])

    def test_decimal_and_none(self) -> None:
        arr = coerce_1d([Decimal("1.25"), None, 3], label="v")
        self.assertEqual(arr[0], 1.25)
        self.assertTrue(np.isnan(arr[1]))
        self.assertEqual(arr[2], 3.0)

    def test_rejections(self) -> None:
        with self.assertRaises(PlotDataError):
            coerce_1d("abc", label="v")
        with self.assertRaises(PlotDataError):
            coerce_1d(np.zeros((2, 2)), label="v")
        with self.assertRaises(PlotDataError):
            coerce_1d([[1, 2], [3, 4]], label="v")
        with self.assertRaises(PlotDataError):
            coerce_1d(42, label="v")
        with self.assertRaises(PlotDataError):
            normalize_xy([1, 2], [1, 2], data={"x": [1, 2]})

    def test_samples_drop_non_finite(self) -> None:
        with self.assertLogs("gridplot.adapters.normalize", level="WARNING"):
            out = normalize_samples([1.0, float("nan"), 2.0, float("inf")])
        self.assertEqual(out.tolist(), [1.0, 2.0])

    def test_counts_and_labels(self) -> None:
        self.assertEqual(normalize_counts([0, 2.0, Decimal("3")]).tolist(), [0.0, 2.0, 3.0])
        with self.assertRaises(PlotDataError):
            normalize_counts([0, 2.5])
        with self.assertRaises(PlotDataError):
            normalize_counts([1, float("nan")])
        labels = normalize_labels([-1, 0, 3], size=3)
        self.assertEqual(labels.dtype, np.int64)
        self.assertEqual(labels.tolist(), [-1, 0, 3])


@unittest.skipUnless(HAS_PANDAS, "pandas not installed")
class PandasInputTests(unittest.TestCase):
    def test_series_and_dataframe_columns(self) -> None:
        import pandas as pd

        frame = pd.DataFrame({"t": [0.0, 1.0, 2.0], "v": [3, 4, 5], "tag": ["a", "b", "c"]})
        plot = Plot("line")
        plot.add_xy("v", "t", "v", data=frame)
        self.assertEqual(plot.series[0].y.tolist(), [3.0, 4.0, 5.0])
        x, _ = normalize_xy(frame["t"], frame["v"])
        self.assertEqual(x.tolist(), [0.0, 1.0, 2.0])
        with self.assertRaises(PlotDataError):
            normalize_xy("missing", "v", data=frame)

    def test_single_numeric_column_frame(self) -> None:
        import pandas as pd

        plot = Plot("histogram")
        plot.add_histogram(pd.DataFrame({"ms": [1.0, 2.0, 2.0], "host": ["a", "b", "c"]}).iloc[:, :1])
        self.assertEqual(plot.histograms[0].total, 3)


@unittest.skipUnless(HAS_TORCH, "torch not installed")
class TorchInputTests(unittest.TestCase):
    def test_tensor_input(self) -> None:
        import torch

        plot = Plot("scatter")
        plot.add_xy("t", torch.arange(3), torch.tensor([1.0, 2.0, 3.0]))
        self.assertEqual(plot.series[0].x.tolist(), [0.0, 1.0, 2.0])
        with self.assertRaises(PlotDataError):
            coerce_1d(torch.zeros(2, 2), label="v")


if __name__ == "__main__":
    unittest.main()
