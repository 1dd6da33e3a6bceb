from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np

from gridplot.config import Margins


TICK_EPSILON_RATIO = 0.001


@dataclass(frozen=True)
class Bounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def x_range(self) -> float:
        return self.max_x - self.min_x

    @property
    def y_range(self) -> float:
        return self.max_y - self.min_y

    def contains_x(self, x: float) -> bool:
        return self.min_x <= x <= self.max_x

    def contains_y(self, y: float) -> bool:
        return self.min_y <= y <= self.max_y


UNIT_BOUNDS = Bounds(0.0, 1.0, 0.0, 1.0)


@dataclass(frozen=True)
class DataTransform:
    """Maps data space to pixel space for one canvas; y grows downward on screen."""

    bounds: Bounds
    margins: Margins
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.bounds.x_range == 0 or self.bounds.y_range == 0:
            raise ValueError("bounds must have a non-zero range on both axes")

    @property
    def plot_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def plot_height(self) -> float:
        return self.height - self.margins.top - self.margins.bottom

    @property
    def plot_rect(self) -> tuple[float, float, float, float]:
        return (self.margins.left, self.margins.top, self.plot_width, self.plot_height)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        b = self.bounds
        px = self.margins.left + (x - b.min_x) / (b.max_x - b.min_x) * self.plot_width
        py = self.height - self.margins.bottom - (y - b.min_y) / (b.max_y - b.min_y) * self.plot_height
        return (float(px), float(py))

    def apply_many(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        b = self.bounds
        xs = np.asarray(x, dtype=np.float64)
        ys = np.asarray(y, dtype=np.float64)
        px = self.margins.left + (xs - b.min_x) / (b.max_x - b.min_x) * self.plot_width
        py = self.height - self.margins.bottom - (ys - b.min_y) / (b.max_y - b.min_y) * self.plot_height
        return px, py


def transform_point(
    x: float,
    y: float,
    bounds: Bounds,
    margins: Margins,
    width: float,
    height: float,
) -> tuple[float, float]:
    return DataTransform(bounds=bounds, margins=margins, width=width, height=height).apply(x, y)


def pad_range(vmin: float, vmax: float, ratio: float) -> tuple[float, float]:
    span = vmax - vmin
    if span == 0:
        span = 1.0
    return (vmin - span * ratio, vmax + span * ratio)


def _nice_factor(raw_step: float) -> tuple[float, float]:
    magnitude = 10.0 ** math.floor(math.log10(raw_step))
    normalized = raw_step / magnitude
    if normalized <= 1.0:
        return (1.0, magnitude)
    if normalized <= 2.0:
        return (2.0, magnitude)
    if normalized <= 5.0:
        return (5.0, magnitude)
    return (10.0, magnitude)


def _next_smaller_factor(factor: float, magnitude: float) -> tuple[float, float]:
    if factor == 10.0:
        return (5.0, magnitude)
    if factor == 5.0:
        return (2.0, magnitude)
    if factor == 2.0:
        return (1.0, magnitude)
    return (5.0, magnitude / 10.0)


def _first_tick_and_count(vmin: float, vmax: float, step: float) -> tuple[float, int]:
    start = math.ceil(vmin / step) * step
    count = int(math.floor((vmax + step * TICK_EPSILON_RATIO - start) / step)) + 1
    return (start, max(0, count))


def nice_step(vmin: float, vmax: float, target: int) -> float:
    """Pick the 1/2/5/10 x 10^k step for ``target`` intervals over ``[vmin, vmax]``.

    Rounding the raw step up can leave as few as half the requested ticks
    (an 11-wide range at target 5 rounds 2.2 up to 5 and yields 3 ticks), so
    the step walks down the same 1/2/5 sequence until at least ``target - 1``
    ticks fit.
    """
    factor, magnitude = _nice_factor((vmax - vmin) / target)
    step = factor * magnitude
    while _first_tick_and_count(vmin, vmax, step)[1] < target - 1:
        factor, magnitude = _next_smaller_factor(factor, magnitude)
        step = factor * magnitude
    return step


def generate_nice_ticks(vmin: float, vmax: float, target: int = 5) -> np.ndarray:
    if target < 1:
        raise ValueError("target must be >= 1")
    if not (np.isfinite(vmin) and np.isfinite(vmax)):
        raise ValueError("tick range must be finite")
    if vmin > vmax:
        raise ValueError("vmin must be <= vmax")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    step = nice_step(vmin, vmax, target)
    # Below float resolution the ticks would collapse onto repeated values.
    if step < 4.0 * float(np.spacing(max(abs(vmin), abs(vmax)))):
        return np.asarray([vmin], dtype=np.float64)
    start, count = _first_tick_and_count(vmin, vmax, step)
    ticks = start + np.arange(count, dtype=np.float64) * step
    # Snap float drift like -4.4e-16 to an exact zero.
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def format_number(value: float, precision: int = 2) -> str:
    out = f"{value:.{precision}f}"
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.3g}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim fractional zeros; integer ticks like 30 keep theirs.
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(repr(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
