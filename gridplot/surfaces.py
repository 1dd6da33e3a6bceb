from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
import logging
import math
from pathlib import Path
from typing import Iterator, Sequence
import xml.etree.ElementTree as ET

import numpy as np
from PIL import Image

from gridplot.raster import (
    draw_polyline,
    draw_text,
    fill_circle,
    fill_polygon,
    fill_rect,
    new_canvas,
    text_size,
)
from gridplot.raster.draw_text import DEFAULT_FONT_FAMILY
from gridplot.style import RGBA


LOGGER = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"


@dataclass(frozen=True)
class Placement:
    """Offset plus uniform scale applied to everything drawn inside it."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (self.offset_x + x * self.scale, self.offset_y + y * self.scale)

    def then(self, inner: "Placement") -> "Placement":
        ox, oy = self.apply(inner.offset_x, inner.offset_y)
        return Placement(offset_x=ox, offset_y=oy, scale=self.scale * inner.scale)


IDENTITY = Placement()


class Surface(ABC):
    """Drawing target for plots.

    Callers draw in local coordinates; the active placement maps them to device
    pixels. Text is measured in local units so layout code never needs to know
    about the placement.
    """

    def __init__(self, width: int, height: int, *, font_family: str = DEFAULT_FONT_FAMILY) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("surface width and height must be > 0")
        self.width = int(width)
        self.height = int(height)
        self.font_family = font_family
        self._placements: list[Placement] = [IDENTITY]

    @property
    def placement(self) -> Placement:
        return self._placements[-1]

    @contextmanager
    def placed(self, placement: Placement) -> Iterator["Surface"]:
        self._placements.append(self.placement.then(placement))
        try:
            yield self
        finally:
            self._placements.pop()

    def _pt(self, x: float, y: float) -> tuple[float, float]:
        return self.placement.apply(x, y)

    def _len(self, value: float) -> float:
        return value * self.placement.scale

    def line(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        color: RGBA,
        width: float = 1.0,
        dash: tuple[float, float] | None = None,
    ) -> None:
        self.polyline([(x0, y0), (x1, y1)], color, width=width, dash=dash)

    def polyline(
        self,
        points: Sequence[tuple[float, float]],
        color: RGBA,
        width: float = 1.0,
        dash: tuple[float, float] | None = None,
    ) -> None:
        if len(points) < 2:
            return
        mapped = [self._pt(x, y) for x, y in points]
        scaled_dash = None if dash is None else (self._len(dash[0]), self._len(dash[1]))
        self._draw_polyline(mapped, color, self._len(width), scaled_dash)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: RGBA) -> None:
        x0, y0 = self._pt(x, y)
        self._fill_rect(x0, y0, self._len(w), self._len(h), color)

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: RGBA, width: float = 1.0) -> None:
        x0, y0 = self._pt(x, y)
        self._stroke_rect(x0, y0, self._len(w), self._len(h), color, self._len(width))

    def fill_circle(self, cx: float, cy: float, radius: float, color: RGBA) -> None:
        x, y = self._pt(cx, cy)
        self._fill_circle(x, y, self._len(radius), color)

    def polygon(self, points: Sequence[tuple[float, float]], color: RGBA) -> None:
        if len(points) < 3:
            return
        self._fill_polygon([self._pt(x, y) for x, y in points], color)

    def marker(self, x: float, y: float, kind: str, size: float, color: RGBA) -> None:
        if kind == "circle":
            self.fill_circle(x, y, size, color)
        elif kind == "cross":
            width = max(1.0, size * 0.4)
            self.line(x - size, y - size, x + size, y + size, color, width=width)
            self.line(x - size, y + size, x + size, y - size, color, width=width)
        elif kind == "square":
            self.fill_rect(x - size, y - size, 2 * size, 2 * size, color)
        elif kind == "triangle":
            self.polygon([(x, y - size), (x - size * 0.866, y + size * 0.5), (x + size * 0.866, y + size * 0.5)], color)
        else:
            raise ValueError(f"unsupported marker type: {kind}")

    def text(
        self,
        x: float,
        y: float,
        text: str,
        color: RGBA,
        size: float,
        *,
        bold: bool = False,
        rotate: int = 0,
    ) -> None:
        """Draw ``text`` with its baseline starting at ``(x, y)``; ``rotate`` is 0 or 90."""
        if not text:
            return
        if rotate not in (0, 90):
            raise ValueError("text rotation must be 0 or 90 degrees")
        px, py = self._pt(x, y)
        self._draw_text(px, py, text, color, self._len(size), bold, rotate)

    def text_size(self, text: str, size: float, *, bold: bool = False) -> tuple[float, float]:
        return text_size(text, font_family=self.font_family, font_size_px=size, bold=bold)

    @abstractmethod
    def _draw_polyline(
        self,
        points: list[tuple[float, float]],
        color: RGBA,
        width: float,
        dash: tuple[float, float] | None,
    ) -> None: ...

    @abstractmethod
    def _fill_rect(self, x: float, y: float, w: float, h: float, color: RGBA) -> None: ...

    @abstractmethod
    def _stroke_rect(self, x: float, y: float, w: float, h: float, color: RGBA, width: float) -> None: ...

    @abstractmethod
    def _fill_circle(self, cx: float, cy: float, radius: float, color: RGBA) -> None: ...

    @abstractmethod
    def _fill_polygon(self, points: list[tuple[float, float]], color: RGBA) -> None: ...

    @abstractmethod
    def _draw_text(
        self,
        x: float,
        y: float,
        text: str,
        color: RGBA,
        size: float,
        bold: bool,
        rotate: int,
    ) -> None: ...

    @abstractmethod
    def write(self, path: str | Path) -> None:
        """Write the surface to ``path``; raises ``OSError`` on failure."""


class RasterSurface(Surface):
    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: RGBA = (255, 255, 255, 255),
        font_family: str = DEFAULT_FONT_FAMILY,
    ) -> None:
        super().__init__(width, height, font_family=font_family)
        self.canvas = new_canvas(self.width, self.height, color=background)

    def _draw_polyline(
        self,
        points: list[tuple[float, float]],
        color: RGBA,
        width: float,
        dash: tuple[float, float] | None,
    ) -> None:
        xs = np.asarray([p[0] for p in points], dtype=np.float64)
        ys = np.asarray([p[1] for p in points], dtype=np.float64)
        draw_polyline(self.canvas, xs, ys, color, width=max(1, int(round(width))), dash=dash)

    def _fill_rect(self, x: float, y: float, w: float, h: float, color: RGBA) -> None:
        if w <= 0 or h <= 0:
            return
        x0, y0 = round(x), round(y)
        fill_rect(self.canvas, x0, y0, max(x0, round(x + w) - 1), max(y0, round(y + h) - 1), color)

    def _stroke_rect(self, x: float, y: float, w: float, h: float, color: RGBA, width: float) -> None:
        if w <= 0 or h <= 0:
            return
        t = max(1, int(round(width)))
        x0, y0 = round(x), round(y)
        x1, y1 = round(x + w) - 1, round(y + h) - 1
        fill_rect(self.canvas, x0, y0, x1, y0 + t - 1, color)
        fill_rect(self.canvas, x0, y1 - t + 1, x1, y1, color)
        fill_rect(self.canvas, x0, y0 + t, x0 + t - 1, y1 - t, color)
        fill_rect(self.canvas, x1 - t + 1, y0 + t, x1, y1 - t, color)

    def _fill_circle(self, cx: float, cy: float, radius: float, color: RGBA) -> None:
        fill_circle(self.canvas, cx, cy, radius, color)

    def _fill_polygon(self, points: list[tuple[float, float]], color: RGBA) -> None:
        fill_polygon(self.canvas, points, color)

    def _draw_text(
        self,
        x: float,
        y: float,
        text: str,
        color: RGBA,
        size: float,
        bold: bool,
        rotate: int,
    ) -> None:
        draw_text(
            self.canvas,
            round(x),
            round(y),
            text,
            color,
            font_family=self.font_family,
            font_size_px=size,
            bold=bold,
            rotate_deg=rotate,
        )

    def to_rgba(self) -> np.ndarray:
        return self.canvas.copy()

    def write(self, path: str | Path) -> None:
        Image.fromarray(self.canvas).save(Path(path), format="PNG")
        LOGGER.debug("wrote %dx%d PNG to %s", self.width, self.height, path)


class SvgSurface(Surface):
    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: RGBA = (255, 255, 255, 255),
        font_family: str = DEFAULT_FONT_FAMILY,
    ) -> None:
        super().__init__(width, height, font_family=font_family)
        ET.register_namespace("", SVG_NS)
        self.root = ET.Element(
            f"{{{SVG_NS}}}svg",
            {
                "width": str(self.width),
                "height": str(self.height),
                "viewBox": f"0 0 {self.width} {self.height}",
            },
        )
        self._add("rect", {"x": "0", "y": "0", "width": str(self.width), "height": str(self.height), **_fill(background)})

    def _add(self, tag: str, attrib: dict[str, str]) -> ET.Element:
        return ET.SubElement(self.root, f"{{{SVG_NS}}}{tag}", attrib)

    def _draw_polyline(
        self,
        points: list[tuple[float, float]],
        color: RGBA,
        width: float,
        dash: tuple[float, float] | None,
    ) -> None:
        attrib = {
            "points": " ".join(f"{_num(x)},{_num(y)}" for x, y in points),
            "fill": "none",
            "stroke-width": _num(width),
            "stroke-linejoin": "round",
            **_stroke(color),
        }
        if dash is not None:
            attrib["stroke-dasharray"] = f"{_num(dash[0])},{_num(dash[1])}"
        self._add("polyline", attrib)

    def _fill_rect(self, x: float, y: float, w: float, h: float, color: RGBA) -> None:
        self._add("rect", {"x": _num(x), "y": _num(y), "width": _num(w), "height": _num(h), **_fill(color)})

    def _stroke_rect(self, x: float, y: float, w: float, h: float, color: RGBA, width: float) -> None:
        self._add(
            "rect",
            {
                "x": _num(x),
                "y": _num(y),
                "width": _num(w),
                "height": _num(h),
                "fill": "none",
                "stroke-width": _num(width),
                **_stroke(color),
            },
        )

    def _fill_circle(self, cx: float, cy: float, radius: float, color: RGBA) -> None:
        self._add("circle", {"cx": _num(cx), "cy": _num(cy), "r": _num(radius), **_fill(color)})

    def _fill_polygon(self, points: list[tuple[float, float]], color: RGBA) -> None:
        self._add("polygon", {"points": " ".join(f"{_num(x)},{_num(y)}" for x, y in points), **_fill(color)})

    def _draw_text(
        self,
        x: float,
        y: float,
        text: str,
        color: RGBA,
        size: float,
        bold: bool,
        rotate: int,
    ) -> None:
        attrib = {
            "x": _num(x),
            "y": _num(y),
            "font-family": self.font_family,
            "font-size": _num(size),
            **_fill(color),
        }
        if bold:
            attrib["font-weight"] = "bold"
        if rotate:
            attrib["transform"] = f"rotate({-rotate} {_num(x)} {_num(y)})"
        elem = self._add("text", attrib)
        elem.text = text

    def to_markup(self) -> str:
        return ET.tostring(self.root, encoding="unicode")

    def write(self, path: str | Path) -> None:
        tree = ET.ElementTree(self.root)
        with Path(path).open("wb") as f:
            tree.write(f, encoding="utf-8", xml_declaration=True)
        LOGGER.debug("wrote %dx%d SVG to %s", self.width, self.height, path)


def _num(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"non-finite SVG coordinate: {value!r}")
    out = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if out == "-0" else out


def _rgb(color: RGBA) -> str:
    return f"rgb({int(color[0])},{int(color[1])},{int(color[2])})"


def _fill(color: RGBA) -> dict[str, str]:
    attrib = {"fill": _rgb(color)}
    if color[3] < 255:
        attrib["fill-opacity"] = f"{color[3] / 255.0:.3f}"
    return attrib


def _stroke(color: RGBA) -> dict[str, str]:
    attrib = {"stroke": _rgb(color)}
    if color[3] < 255:
        attrib["stroke-opacity"] = f"{color[3] / 255.0:.3f}"
    return attrib
