from __future__ import annotations

import math

import numpy as np


DEFAULT_MAX_BINS = 20
EDGE_EPSILON = 1e-10


def sturges_bin_count(n: int, cap: int = DEFAULT_MAX_BINS) -> int:
    """Sturges' rule, ``ceil(log2(n) + 1)``, clamped to ``[1, cap]``."""
    if n <= 0:
        return 1
    return max(1, min(int(cap), int(math.ceil(math.log2(n) + 1))))


def calculate_bins(samples: np.ndarray, bin_count: int = 0, *, cap: int = DEFAULT_MAX_BINS) -> np.ndarray:
    """Return ``bin_count + 1`` strictly increasing edges spanning ``samples``.

    A non-positive ``bin_count`` picks one with Sturges' rule. The last edge sits
    just above the maximum so the half-open final bin still holds it. Samples
    that are all equal are binned over a unit range centred on their value.
    """
    values = np.asarray(samples, dtype=np.float64)
    if values.size == 0:
        return np.empty(0, dtype=np.float64)
    if bin_count <= 0:
        bin_count = sturges_bin_count(values.size, cap)

    lo = float(values.min())
    hi = float(values.max())
    if hi == lo:
        lo -= 0.5
        hi += 0.5

    width = (hi - lo) / bin_count
    edges = lo + np.arange(bin_count + 1, dtype=np.float64) * width
    last = hi + EDGE_EPSILON
    if last <= hi:
        last = float(np.nextafter(hi, np.inf))
    edges[-1] = last
    return edges


def calculate_counts(samples: np.ndarray, edges: np.ndarray) -> np.ndarray:
    """Count samples per half-open bin ``[edges[i], edges[i + 1])``."""
    if edges.size < 2:
        return np.empty(0, dtype=np.int64)
    values = np.asarray(samples, dtype=np.float64)
    n_bins = edges.size - 1
    idx = np.searchsorted(edges, values, side="right") - 1
    idx = idx[(idx >= 0) & (idx < n_bins)]
    return np.bincount(idx, minlength=n_bins).astype(np.int64)


def calculate_cumulative(counts: np.ndarray) -> np.ndarray:
    return np.cumsum(np.asarray(counts, dtype=np.int64), dtype=np.int64)


def bin_samples(
    samples: np.ndarray,
    bin_count: int = 0,
    *,
    cap: int = DEFAULT_MAX_BINS,
) -> tuple[np.ndarray, np.ndarray]:
    edges = calculate_bins(samples, bin_count, cap=cap)
    return edges, calculate_counts(samples, edges)


def discrete_bar_extent(index: int, width: float = 0.8) -> tuple[float, float]:
    half = width / 2.0
    return (index - half, index + half)
