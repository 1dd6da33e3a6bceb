from __future__ import annotations

import math

import numpy as np

from gridplot.raster.canvas import RGBA, draw_pixel


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: int = 1,
    dash: tuple[float, float] | None = None,
) -> None:
    if xs.size < 2:
        return
    # The dash phase carries across vertices so patterns run continuously.
    phase = 0.0
    for i in range(xs.size - 1):
        x0, y0, x1, y1 = float(xs[i]), float(ys[i]), float(xs[i + 1]), float(ys[i + 1])
        if dash is None:
            _draw_line_segment(dst, round(x0), round(y0), round(x1), round(y1), color=color, width=width)
            continue
        phase = _draw_dashed_segment(dst, x0, y0, x1, y1, color=color, width=width, dash=dash, phase=phase)


def dash_spans(length: float, dash: tuple[float, float], phase: float = 0.0) -> tuple[list[tuple[float, float]], float]:
    """Split ``[0, length]`` into the "on" spans of an (on, off) dash pattern.

    Returns the spans and the pattern phase at the end of the run.
    """
    on, off = dash
    period = on + off
    if on <= 0 or period <= 0:
        return ([], phase)
    spans: list[tuple[float, float]] = []
    t = 0.0
    pos = phase % period
    while t < length:
        if pos < on:
            seg = min(on - pos, length - t)
            spans.append((t, t + seg))
        else:
            seg = min(period - pos, length - t)
        t += seg
        pos = (pos + seg) % period
    return (spans, pos)


def _draw_dashed_segment(
    dst: np.ndarray,
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    *,
    color: RGBA,
    width: int,
    dash: tuple[float, float],
    phase: float,
) -> float:
    length = math.hypot(x1 - x0, y1 - y0)
    if length == 0:
        return phase
    ux = (x1 - x0) / length
    uy = (y1 - y0) / length
    spans, phase = dash_spans(length, dash, phase)
    for a, b in spans:
        _draw_line_segment(
            dst,
            round(x0 + ux * a),
            round(y0 + uy * a),
            round(x0 + ux * b),
            round(y0 + uy * b),
            color=color,
            width=width,
        )
    return phase


def _draw_line_segment(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _draw_square_brush(dst, x0, y0, color=color, width=width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    if radius == 0:
        draw_pixel(dst, x, y, color)
        return
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)
