from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from typing import Literal

from gridplot.clusters import OUTLIER_LABEL, ClusterColorizer
from gridplot.config import PlotConfig
from gridplot.series import ClusterSeries, ContinuousHistogram, HistogramSeries, ReferenceLine, Series
from gridplot.style import REFERENCE_DASH, RGBA, darken, to_rgba
from gridplot.surfaces import Surface


LegendGlyph = Literal["marker", "line", "dash", "bar"]

DEFAULT_SERIES_NAME = "Default"


@dataclass(frozen=True)
class LegendItem:
    name: str
    glyph: LegendGlyph
    color: RGBA
    size: float = 3.0
    marker: str = "circle"


@dataclass(frozen=True)
class LegendLayout:
    """Fixed-size legend panel anchored just right of the plot area."""

    items: tuple[LegendItem, ...]
    anchor_x: float
    anchor_y: float
    x: float
    y: float
    width: float
    height: float
    row_height: float

    @property
    def is_empty(self) -> bool:
        return not self.items

    def row_y(self, index: int) -> float:
        return self.anchor_y + index * self.row_height


def collect_legend_items(
    series: Sequence[Series] = (),
    clusters: Sequence[ClusterSeries] = (),
    histograms: Sequence[HistogramSeries] = (),
    reference_lines: Sequence[ReferenceLine] = (),
    *,
    hidden: Collection[str] = (),
    colorizer: ClusterColorizer | None = None,
    series_glyph: LegendGlyph = "marker",
    marker: str = "circle",
) -> list[LegendItem]:
    """Gather legend rows in drawing order, minus anything named in ``hidden``.

    Order: regular series, cluster groups (outliers first, then ascending
    label), histogram series or categories, reference lines. A lone series
    called "Default" is an implicit bucket and gets no row.
    """
    colorizer = colorizer or ClusterColorizer()
    items: list[LegendItem] = []

    if len(series) > 1 or (len(series) == 1 and series[0].name != DEFAULT_SERIES_NAME):
        for s in series:
            if not s.name:
                continue
            items.append(
                LegendItem(
                    name=s.name,
                    glyph=series_glyph,
                    color=s.style.rgba,
                    size=s.style.line_width if series_glyph == "line" else s.style.point_size + 1,
                    marker=marker,
                )
            )

    # Labels from every cluster series share one ordering; the first series
    # holding a label supplies its name and color.
    groups = sorted(
        ((label, order, c) for order, c in enumerate(clusters) for label in c.unique_labels()),
        key=lambda g: (g[0], g[1]),
    )
    seen: set[str] = set()
    for label, _, c in groups:
        name = colorizer.name(label, c.names)
        if name in seen:
            continue
        seen.add(name)
        items.append(
            LegendItem(
                name=name,
                glyph="marker",
                color=to_rgba(colorizer.color(label, c.colors), c.alpha),
                size=c.point_size + 1,
                marker="cross" if label == OUTLIER_LABEL else "circle",
            )
        )

    for h in histograms:
        if isinstance(h, ContinuousHistogram):
            if h.name:
                items.append(LegendItem(name=h.name, glyph="bar", color=h.style.rgba))
            continue
        for category, style in zip(h.categories, h.styles):
            items.append(LegendItem(name=category, glyph="bar", color=style.rgba))

    for line in reference_lines:
        if line.label:
            items.append(LegendItem(name=line.label, glyph="dash", color=line.style.rgba, size=line.style.line_width))

    hidden_names = set(hidden)
    return [item for item in items if item.name not in hidden_names]


def layout_legend(items: Sequence[LegendItem], config: PlotConfig) -> LegendLayout:
    legend = config.legend
    anchor_x = config.width - config.margins.right + legend.inset_x
    anchor_y = config.margins.top + legend.inset_y
    height = len(items) * legend.row_height + legend.padding if items else 0.0
    return LegendLayout(
        items=tuple(items),
        anchor_x=anchor_x,
        anchor_y=anchor_y,
        x=anchor_x - legend.padding / 2.0,
        y=anchor_y - (legend.row_height - legend.padding / 2.0),
        width=legend.width if items else 0.0,
        height=height,
        row_height=legend.row_height,
    )


def draw_legend(surface: Surface, layout: LegendLayout, config: PlotConfig) -> None:
    if layout.is_empty:
        return
    theme = config.theme
    surface.fill_rect(layout.x, layout.y, layout.width, layout.height, theme.legend_background)
    surface.stroke_rect(layout.x, layout.y, layout.width, layout.height, theme.legend_border, 1.0)

    glyph_x = layout.anchor_x + 8.0
    text_x = layout.anchor_x + 20.0
    for i, item in enumerate(layout.items):
        y = layout.row_y(i)
        _draw_glyph(surface, item, glyph_x, y, config)
        surface.text(text_x, y + 4.0, item.name, theme.text_color, config.fonts.legend)


def _draw_glyph(surface: Surface, item: LegendItem, x: float, y: float, config: PlotConfig) -> None:
    if item.glyph == "marker":
        surface.marker(x, y, item.marker, item.size, item.color)
    elif item.glyph == "line":
        surface.line(x - 6.0, y, x + 6.0, y, item.color, width=item.size)
    elif item.glyph == "dash":
        surface.line(x - 6.0, y, x + 6.0, y, item.color, width=item.size, dash=REFERENCE_DASH)
    elif item.glyph == "bar":
        half = config.legend.glyph_size
        surface.fill_rect(x - half, y - half, 2 * half, 2 * half, item.color)
        border = darken(item.color[:3])
        surface.stroke_rect(x - half, y - half, 2 * half, 2 * half, (*border, item.color[3]), 1.0)
    else:
        raise ValueError(f"unsupported legend glyph: {item.glyph}")
