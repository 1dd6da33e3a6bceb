from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from gridplot.scales import UNIT_BOUNDS, Bounds, pad_range
from gridplot.series import ClusterSeries, ContinuousHistogram, DiscreteHistogram, HistogramSeries, Series


def calculate_bounds(
    series: Sequence[Series] = (),
    clusters: Sequence[ClusterSeries] = (),
    histograms: Sequence[HistogramSeries] = (),
    *,
    point_pad_ratio: float = 0.05,
    histogram_x_pad_ratio: float = 0.02,
    histogram_y_pad_ratio: float = 0.05,
) -> Bounds:
    """Derive padded data bounds for everything attached to one plot.

    Point data wins over histogram data when both are present. With no data at
    all the unit box ``(0, 1, 0, 1)`` is returned unpadded.
    """
    xs = [s.x for s in series if len(s)] + [c.x for c in clusters if len(c)]
    ys = [s.y for s in series if len(s)] + [c.y for c in clusters if len(c)]
    if xs:
        x_all = np.concatenate(xs)
        y_all = np.concatenate(ys)
        min_x, max_x = pad_range(float(x_all.min()), float(x_all.max()), point_pad_ratio)
        min_y, max_y = pad_range(float(y_all.min()), float(y_all.max()), point_pad_ratio)
        return Bounds(min_x, max_x, min_y, max_y)

    extents = [_histogram_extent(h) for h in histograms]
    extents = [e for e in extents if e is not None]
    if not extents:
        return UNIT_BOUNDS

    lo_x = min(e[0] for e in extents)
    hi_x = max(e[1] for e in extents)
    hi_y = max(e[2] for e in extents)
    min_x, max_x = pad_range(lo_x, hi_x, histogram_x_pad_ratio)
    y_span = hi_y if hi_y > 0 else 1.0
    return Bounds(min_x, max_x, 0.0, hi_y + y_span * histogram_y_pad_ratio)


def _histogram_extent(hist: HistogramSeries) -> tuple[float, float, float] | None:
    heights = hist.heights
    if heights.size == 0:
        return None
    top = float(heights.max())
    if isinstance(hist, ContinuousHistogram):
        return (float(hist.edges[0]), float(hist.edges[-1]), top)
    if isinstance(hist, DiscreteHistogram):
        return (-0.5, heights.size - 0.5, top)
    raise TypeError(f"unsupported histogram type: {type(hist)!r}")
