from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Collection, Literal

from gridplot.errors import PlotConfigError


RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]

MarkerType = Literal["circle", "cross", "square", "triangle"]
LineStyle = Literal["solid", "dashed", "dotted"]

MARKER_TYPES: tuple[str, ...] = ("circle", "cross", "square", "triangle")
LINE_DASHES: dict[str, tuple[float, float] | None] = {
    "solid": None,
    "dashed": (10.0, 5.0),
    "dotted": (2.0, 3.0),
}
REFERENCE_DASH = (4.0, 4.0)

NAMED_COLORS: dict[str, RGB] = {
    "red": (255, 0, 0),
    "blue": (0, 0, 255),
    "green": (0, 179, 0),
    "orange": (255, 128, 0),
    "purple": (153, 51, 204),
    "cyan": (0, 204, 204),
    "magenta": (204, 0, 204),
    "yellow": (204, 204, 0),
    "black": (0, 0, 0),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "darkred": (139, 0, 0),
    "darkblue": (0, 0, 139),
    "darkgreen": (0, 100, 0),
}

SERIES_COLORS: tuple[str, ...] = ("blue", "red", "green", "orange", "purple", "cyan", "magenta", "yellow")
REFERENCE_COLORS: tuple[str, ...] = ("black", "gray", "darkred", "darkblue", "darkgreen")

# Red is reserved for outliers and never appears here.
CLUSTER_COLORS: tuple[RGB, ...] = (
    (0, 102, 204),
    (0, 179, 77),
    (153, 51, 204),
    (255, 128, 0),
    (204, 204, 0),
    (0, 204, 204),
    (204, 0, 204),
    (128, 77, 26),
    (179, 179, 179),
    (0, 128, 128),
    (128, 0, 128),
    (0, 77, 153),
    (77, 128, 0),
    (153, 77, 0),
    (102, 0, 102),
)
OUTLIER_COLOR: RGB = (255, 0, 0)


def _clamp_alpha(alpha: float) -> float:
    return max(0.0, min(1.0, float(alpha)))


def to_rgba(color: RGB, alpha: float) -> RGBA:
    r, g, b = color
    return (int(r), int(g), int(b), int(round(_clamp_alpha(alpha) * 255)))


def darken(color: RGB, factor: float = 0.7) -> RGB:
    return (int(color[0] * factor), int(color[1] * factor), int(color[2] * factor))


@dataclass(frozen=True)
class Style:
    point_size: float = 3.0
    line_width: float = 2.0
    color: RGB = (0, 0, 255)
    alpha: float = 1.0

    def __post_init__(self) -> None:
        if len(self.color) != 3 or any(not 0 <= int(c) <= 255 for c in self.color):
            raise PlotConfigError(f"color must be an (r, g, b) triple in 0..255, got {self.color!r}")
        if self.point_size < 0 or self.line_width < 0:
            raise PlotConfigError("point_size and line_width must be >= 0")

    @property
    def rgba(self) -> RGBA:
        return to_rgba(self.color, self.alpha)

    def with_color(self, color: RGB) -> "Style":
        return replace(self, color=color)


DEFAULT_REFERENCE_STYLE = Style(point_size=3.0, line_width=1.5, color=(0, 0, 0), alpha=0.8)


def resolve_color(name: str) -> RGB:
    key = name.strip().lower()
    try:
        return NAMED_COLORS[key]
    except KeyError:
        known = ", ".join(sorted(NAMED_COLORS))
        raise PlotConfigError(f"unknown color name {name!r}; expected one of: {known}") from None


def color_to_style(color_name: str, point_size: float = 3.0, line_width: float = 2.0) -> Style:
    return Style(point_size=point_size, line_width=line_width, color=resolve_color(color_name), alpha=0.8)


@dataclass(frozen=True)
class Palette:
    """Immutable color policy owned by a plot or grid."""

    series: tuple[str, ...] = SERIES_COLORS
    reference: tuple[str, ...] = REFERENCE_COLORS
    clusters: tuple[RGB, ...] = CLUSTER_COLORS
    outlier: RGB = OUTLIER_COLOR

    def __post_init__(self) -> None:
        if not self.series or not self.reference or not self.clusters:
            raise PlotConfigError("palette color lists must not be empty")
        for name in self.series + self.reference:
            resolve_color(name)

    def series_color(self, index: int) -> str:
        return self.series[index % len(self.series)]

    def reference_color(self, used: Collection[str], line_count: int) -> str:
        for name in self.reference:
            if name not in used:
                return name
        return self.reference[line_count % len(self.reference)]


DEFAULT_PALETTE = Palette()
