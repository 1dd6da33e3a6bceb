from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
import logging
from typing import Any

import numpy as np

from gridplot.errors import PlotDataError


LOGGER = logging.getLogger(__name__)


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def normalize_xy(x: Any, y: Any, *, data: Any = None, label: str = "series") -> tuple[np.ndarray, np.ndarray]:
    """Coerce parallel x/y inputs to finite float64 arrays of equal length.

    ``x`` and ``y`` may be column names when ``data`` is a pandas DataFrame.
    Pairs where either coordinate is NaN or infinite are dropped with a warning.
    """
    x_arr = coerce_1d(_resolve_column(x, data=data), label="x")
    y_arr = coerce_1d(_resolve_column(y, data=data), label="y")
    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")

    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    dropped = int(mask.size - np.count_nonzero(mask))
    if dropped:
        LOGGER.warning("%s: dropped %d non-finite point(s)", label, dropped)
        return x_arr[mask], y_arr[mask]
    return x_arr, y_arr


def normalize_labels(labels: Any, *, size: int) -> np.ndarray:
    arr = coerce_1d(labels, label="labels")
    if arr.size != size:
        raise PlotDataError(f"labels length mismatch: {arr.size} != {size}")
    if not np.all(np.isfinite(arr)) or np.any(arr != np.round(arr)):
        raise PlotDataError("cluster labels must be integers")
    out = arr.astype(np.int64)
    if np.any(out < -1):
        raise PlotDataError("cluster labels must be >= -1 (-1 marks an outlier)")
    return out


def normalize_samples(samples: Any, *, label: str = "samples") -> np.ndarray:
    arr = coerce_1d(_resolve_column(samples, data=None), label=label)
    mask = np.isfinite(arr)
    dropped = int(mask.size - np.count_nonzero(mask))
    if dropped:
        LOGGER.warning("%s: dropped %d non-finite value(s)", label, dropped)
        return arr[mask]
    return arr


def normalize_counts(counts: Any) -> np.ndarray:
    arr = coerce_1d(counts, label="counts")
    if not np.all(np.isfinite(arr)):
        raise PlotDataError("counts must be finite")
    if np.any(arr != np.round(arr)):
        raise PlotDataError("counts must be whole numbers")
    if np.any(arr < 0):
        raise PlotDataError("counts must be >= 0")
    return arr


def _resolve_column(value: Any, *, data: Any) -> Any:
    if data is None:
        if pd is not None and isinstance(value, pd.DataFrame):
            numeric_cols = [c for c in value.columns if _is_numeric_dtype(value[c])]
            if len(numeric_cols) != 1:
                raise PlotDataError("1-D DataFrame input must contain exactly one numeric column")
            return value[numeric_cols[0]]
        return value
    if pd is None:
        raise PlotDataError("pandas is required when using `data=`")
    if not isinstance(data, pd.DataFrame):
        raise PlotDataError("`data` must be a pandas DataFrame")
    if isinstance(value, str):
        if value not in data.columns:
            raise PlotDataError(f"column not found: {value}")
        return data[value]
    return value


def _is_numeric_dtype(series: Any) -> bool:
    return pd is not None and bool(pd.api.types.is_numeric_dtype(series))


def coerce_1d(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        arr = np.asarray(value, dtype=object)
        if arr.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(arr, label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        if isinstance(raw, (str, bytes)):
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}")
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
