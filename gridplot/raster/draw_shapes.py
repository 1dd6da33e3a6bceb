from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw

from gridplot.raster.canvas import RGBA, blend_mask


def fill_circle(dst: np.ndarray, cx: float, cy: float, radius: float, color: RGBA) -> None:
    if radius <= 0:
        return
    x0 = int(math.floor(cx - radius - 1))
    y0 = int(math.floor(cy - radius - 1))
    x1 = int(math.ceil(cx + radius + 1))
    y1 = int(math.ceil(cy + radius + 1))
    yy, xx = np.mgrid[y0 : y1 + 1, x0 : x1 + 1]
    dist = np.hypot(xx + 0.5 - cx, yy + 0.5 - cy)
    # One pixel of linear falloff at the rim.
    cov = np.clip(radius + 0.5 - dist, 0.0, 1.0)
    blend_mask(dst, x0, y0, (cov * 255.0).astype(np.uint8), color)


def fill_polygon(dst: np.ndarray, points: Sequence[tuple[float, float]], color: RGBA) -> None:
    if len(points) < 3:
        return
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    x0 = int(math.floor(min(xs)))
    y0 = int(math.floor(min(ys)))
    w = int(math.ceil(max(xs))) - x0 + 1
    h = int(math.ceil(max(ys))) - y0 + 1
    image = Image.new("L", (max(1, w), max(1, h)), 0)
    ImageDraw.Draw(image).polygon([(px - x0, py - y0) for px, py in points], fill=255)
    blend_mask(dst, x0, y0, np.asarray(image, dtype=np.uint8), color)
