from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import numpy as np

from gridplot.clusters import OUTLIER_LABEL
from gridplot.histogram import discrete_bar_extent
from gridplot.legend import LegendItem, collect_legend_items, draw_legend, layout_legend
from gridplot.scales import DataTransform, format_ticks_for_axis
from gridplot.series import ContinuousHistogram, DiscreteHistogram
from gridplot.style import LINE_DASHES, RGBA, Style, darken, to_rgba
from gridplot.surfaces import Surface

if TYPE_CHECKING:
    from gridplot.plot import Plot


AXIS_WIDTH = 1.5
GRID_WIDTH = 0.5
TICK_LENGTH = 5.0


def render_plot(plot: "Plot", surface: Surface) -> None:
    """Draw ``plot`` onto ``surface`` in its local (native-size) coordinates.

    Layers go back to front: grid, axes, ticks, axis labels, title, data,
    reference lines, legend. Bounds and the transform are resolved afresh on
    every call.
    """
    transform = DataTransform(
        bounds=plot.bounds(),
        margins=plot.config.margins,
        width=plot.config.width,
        height=plot.config.height,
    )
    x_ticks, y_ticks = plot.ticks()

    _draw_grid(plot, surface, transform, x_ticks, y_ticks)
    _draw_axes(plot, surface, transform)
    _draw_ticks(plot, surface, transform, x_ticks, y_ticks)
    _draw_axis_labels(plot, surface, transform)
    _draw_title(plot, surface)
    DATA_DRAWERS[plot.kind](plot, surface, transform)
    _draw_reference_lines(plot, surface, transform)
    if plot.legend_enabled:
        draw_legend(surface, layout_legend(legend_items(plot), plot.config), plot.config)


def legend_items(plot: "Plot") -> list[LegendItem]:
    return collect_legend_items(
        plot.series,
        plot.clusters,
        plot.histograms,
        plot.reference_lines,
        hidden=plot.hidden_legend_items,
        colorizer=plot.colorizer,
        series_glyph="line" if plot.kind == "line" else "marker",
        marker=plot.marker_type,
    )


def _draw_grid(plot: "Plot", surface: Surface, t: DataTransform, x_ticks: np.ndarray, y_ticks: np.ndarray) -> None:
    color = plot.config.theme.grid_color
    top = t.margins.top
    bottom = t.height - t.margins.bottom
    left = t.margins.left
    right = t.width - t.margins.right
    for tick in x_ticks.tolist():
        sx, _ = t.apply(tick, t.bounds.min_y)
        surface.line(sx, top, sx, bottom, color, width=GRID_WIDTH)
    for tick in y_ticks.tolist():
        _, sy = t.apply(t.bounds.min_x, tick)
        surface.line(left, sy, right, sy, color, width=GRID_WIDTH)


def _draw_axes(plot: "Plot", surface: Surface, t: DataTransform) -> None:
    color = plot.config.theme.axis_color
    bottom = t.height - t.margins.bottom
    surface.line(t.margins.left, bottom, t.width - t.margins.right, bottom, color, width=AXIS_WIDTH)
    surface.line(t.margins.left, t.margins.top, t.margins.left, bottom, color, width=AXIS_WIDTH)


def _draw_ticks(plot: "Plot", surface: Surface, t: DataTransform, x_ticks: np.ndarray, y_ticks: np.ndarray) -> None:
    cfg = plot.config
    color = cfg.theme.axis_color
    text_color = cfg.theme.text_color
    size = cfg.fonts.tick
    bottom = t.height - t.margins.bottom

    if plot.histogram_kind == "discrete":
        x_labels = list(plot.category_labels())
    else:
        x_labels = format_ticks_for_axis(x_ticks)
    for tick, label in zip(x_ticks.tolist(), x_labels):
        sx, _ = t.apply(tick, t.bounds.min_y)
        surface.line(sx, bottom, sx, bottom + TICK_LENGTH, color)
        w, _ = surface.text_size(label, size)
        surface.text(sx - w / 2.0, bottom + 20.0, label, text_color, size)

    for tick, label in zip(y_ticks.tolist(), format_ticks_for_axis(y_ticks)):
        _, sy = t.apply(t.bounds.min_x, tick)
        surface.line(t.margins.left, sy, t.margins.left - TICK_LENGTH, sy, color)
        w, h = surface.text_size(label, size)
        surface.text(t.margins.left - w - 10.0, sy + h / 2.0, label, text_color, size)


def _draw_axis_labels(plot: "Plot", surface: Surface, t: DataTransform) -> None:
    cfg = plot.config
    size = cfg.fonts.axis_label
    if plot.xlabel:
        w, _ = surface.text_size(plot.xlabel, size, bold=True)
        x = t.margins.left + t.plot_width / 2.0 - w / 2.0
        surface.text(x, t.height - 15.0, plot.xlabel, cfg.theme.text_color, size, bold=True)
    if plot.ylabel:
        w, _ = surface.text_size(plot.ylabel, size, bold=True)
        y = t.margins.top + t.plot_height / 2.0 + w / 2.0
        surface.text(15.0, y, plot.ylabel, cfg.theme.text_color, size, bold=True, rotate=90)


def _draw_title(plot: "Plot", surface: Surface) -> None:
    if not plot.title:
        return
    cfg = plot.config
    w, _ = surface.text_size(plot.title, cfg.fonts.title, bold=True)
    surface.text((cfg.width - w) / 2.0, 25.0, plot.title, cfg.theme.text_color, cfg.fonts.title, bold=True)


def _draw_scatter_data(plot: "Plot", surface: Surface, t: DataTransform) -> None:
    _draw_cluster_points(plot, surface, t, outliers=True)
    _draw_cluster_points(plot, surface, t, outliers=False)
    for s in plot.series:
        _draw_markers(surface, t, s.x, s.y, plot.marker_type, s.style.point_size, s.style.rgba)


def _draw_line_data(plot: "Plot", surface: Surface, t: DataTransform) -> None:
    dash = LINE_DASHES[plot.line_style]
    colorizer = plot.colorizer
    for c in plot.clusters:
        for label in c.unique_labels():
            if label == OUTLIER_LABEL:
                continue
            xs, ys = c.select(label)
            color = to_rgba(colorizer.color(label, c.colors), c.alpha)
            order = np.argsort(xs, kind="stable")
            _draw_path(surface, t, xs[order], ys[order], color, plot.line_width_for(None), dash)
            if plot.show_markers:
                _draw_markers(surface, t, xs, ys, "circle", c.point_size, color)
    _draw_cluster_points(plot, surface, t, outliers=True)

    for s in plot.series:
        _draw_path(surface, t, s.x, s.y, s.style.rgba, plot.line_width_for(s.style), dash)
    if plot.show_markers:
        for s in plot.series:
            _draw_markers(surface, t, s.x, s.y, plot.marker_type, s.style.point_size, s.style.rgba)


def _draw_histogram_data(plot: "Plot", surface: Surface, t: DataTransform) -> None:
    for h in plot.histograms:
        if isinstance(h, ContinuousHistogram):
            heights = h.heights.tolist()
            edges = h.edges.tolist()
            for i, height in enumerate(heights):
                _draw_bar(surface, t, edges[i], edges[i + 1], float(height), h.style)
        elif isinstance(h, DiscreteHistogram):
            for i, (height, style) in enumerate(zip(h.counts.tolist(), h.styles)):
                left, right = discrete_bar_extent(i, plot.config.bar_width)
                _draw_bar(surface, t, left, right, float(height), style)


def _draw_bar(surface: Surface, t: DataTransform, left: float, right: float, height: float, style: Style) -> None:
    if height <= 0:
        return
    x0, y0 = t.apply(left, 0.0)
    x1, y1 = t.apply(right, height)
    rect = (x0, y1, x1 - x0, y0 - y1)
    surface.fill_rect(*rect, style.rgba)
    surface.stroke_rect(*rect, to_rgba(darken(style.color), style.alpha), 1.0)


def _draw_cluster_points(plot: "Plot", surface: Surface, t: DataTransform, *, outliers: bool) -> None:
    colorizer = plot.colorizer
    for c in plot.clusters:
        for label in c.unique_labels():
            if (label == OUTLIER_LABEL) != outliers:
                continue
            xs, ys = c.select(label)
            color = to_rgba(colorizer.color(label, c.colors), c.alpha)
            _draw_markers(surface, t, xs, ys, "cross" if outliers else "circle", c.point_size, color)


def _draw_markers(
    surface: Surface,
    t: DataTransform,
    xs: np.ndarray,
    ys: np.ndarray,
    marker: str,
    size: float,
    color: RGBA,
) -> None:
    px, py = t.apply_many(xs, ys)
    for x, y in zip(px.tolist(), py.tolist()):
        surface.marker(x, y, marker, size, color)


def _draw_path(
    surface: Surface,
    t: DataTransform,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: float,
    dash: tuple[float, float] | None,
) -> None:
    if xs.size < 2:
        return
    px, py = t.apply_many(xs, ys)
    surface.polyline(list(zip(px.tolist(), py.tolist())), color, width=width, dash=dash)


def _draw_reference_lines(plot: "Plot", surface: Surface, t: DataTransform) -> None:
    left = t.margins.left
    right = t.width - t.margins.right
    top = t.margins.top
    bottom = t.height - t.margins.bottom
    for line in plot.reference_lines:
        color = line.style.rgba
        if line.is_vertical:
            sx, _ = t.apply(line.value, t.bounds.min_y)
            if left <= sx <= right:
                surface.line(sx, top, sx, bottom, color, width=line.style.line_width, dash=line.dash)
        else:
            _, sy = t.apply(t.bounds.min_x, line.value)
            if top <= sy <= bottom:
                surface.line(left, sy, right, sy, color, width=line.style.line_width, dash=line.dash)


DATA_DRAWERS: dict[str, Callable[["Plot", Surface, DataTransform], None]] = {
    "scatter": _draw_scatter_data,
    "line": _draw_line_data,
    "histogram": _draw_histogram_data,
}
