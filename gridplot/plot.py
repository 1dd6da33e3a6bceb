from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
import logging
from pathlib import Path
from typing import Any, Literal

import numpy as np

from gridplot.adapters import coerce_1d, normalize_counts, normalize_labels, normalize_samples, normalize_xy
from gridplot.bounds import calculate_bounds
from gridplot.clusters import ClusterColorizer, check_overrides
from gridplot.config import PlotConfig
from gridplot.errors import PlotConfigError, PlotDataError
from gridplot.histogram import bin_samples
from gridplot.legend import DEFAULT_SERIES_NAME, LegendItem
from gridplot.renderer import legend_items, render_plot
from gridplot.scales import Bounds, DataTransform, format_number, generate_nice_ticks
from gridplot.series import (
    ClusterSeries,
    ContinuousHistogram,
    DiscreteHistogram,
    HistogramKind,
    HistogramSeries,
    Point,
    ReferenceLine,
    Series,
)
from gridplot.style import (
    DEFAULT_PALETTE,
    DEFAULT_REFERENCE_STYLE,
    LINE_DASHES,
    MARKER_TYPES,
    RGB,
    LineStyle,
    MarkerType,
    Palette,
    Style,
    color_to_style,
    resolve_color,
)
from gridplot.surfaces import RasterSurface, Surface, SvgSurface


LOGGER = logging.getLogger(__name__)

ChartKind = Literal["scatter", "line", "histogram"]
CHART_KINDS: tuple[str, ...] = ("scatter", "line", "histogram")
HISTOGRAM_Y_LABEL = "Frequency"


class BoundsState(Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class Plot:
    """One chart: a kind tag plus the data collections that kind accepts.

    Scatter and line plots hold point series and cluster series; histogram
    plots hold either continuous or discrete histograms, never both. Every
    mutating call validates its input first and leaves the plot untouched when
    it raises.
    """

    def __init__(
        self,
        kind: ChartKind = "scatter",
        *,
        config: PlotConfig | None = None,
        palette: Palette | None = None,
    ) -> None:
        if kind not in CHART_KINDS:
            raise PlotConfigError(f"unknown chart kind {kind!r}; expected one of {CHART_KINDS}")
        self.kind: ChartKind = kind
        self.config = config or PlotConfig()
        self.palette = palette or DEFAULT_PALETTE
        self.colorizer = ClusterColorizer(self.palette)
        self.marker_type: MarkerType = "circle"
        self.line_style: LineStyle = "solid"
        self.show_markers = False
        self._line_width: float | None = None
        self._series: list[Series] = []
        self._clusters: list[ClusterSeries] = []
        self._histograms: list[HistogramSeries] = []
        self._reference_lines: list[ReferenceLine] = []
        self._manual_bounds: Bounds | None = None
        self._bounds: Bounds | None = None
        self._state = BoundsState.DIRTY
        self._reset_labels()

    def _reset_labels(self) -> None:
        self.title = ""
        self.xlabel = ""
        self.ylabel = HISTOGRAM_Y_LABEL if self.kind == "histogram" else ""
        self.legend_enabled = True
        self._hidden: set[str] = set()

    @property
    def series(self) -> tuple[Series, ...]:
        return tuple(self._series)

    @property
    def clusters(self) -> tuple[ClusterSeries, ...]:
        return tuple(self._clusters)

    @property
    def histograms(self) -> tuple[HistogramSeries, ...]:
        return tuple(self._histograms)

    @property
    def reference_lines(self) -> tuple[ReferenceLine, ...]:
        return tuple(self._reference_lines)

    @property
    def reference_line_count(self) -> int:
        return len(self._reference_lines)

    @property
    def hidden_legend_items(self) -> frozenset[str]:
        return frozenset(self._hidden)

    @property
    def histogram_kind(self) -> HistogramKind | None:
        if not self._histograms:
            return None
        return self._histograms[0].kind

    @property
    def bounds_state(self) -> BoundsState:
        return self._state

    @property
    def has_manual_bounds(self) -> bool:
        return self._manual_bounds is not None

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    def _mark_dirty(self) -> None:
        self._state = BoundsState.DIRTY

    def _resolve_bounds(self) -> Bounds:
        if self._manual_bounds is not None:
            return self._manual_bounds
        if self._state is BoundsState.DIRTY or self._bounds is None:
            cfg = self.config
            self._bounds = calculate_bounds(
                self._series,
                self._clusters,
                self._histograms,
                point_pad_ratio=cfg.point_pad_ratio,
                histogram_x_pad_ratio=cfg.histogram_x_pad_ratio,
                histogram_y_pad_ratio=cfg.histogram_y_pad_ratio,
            )
            self._state = BoundsState.CLEAN
            LOGGER.debug("%s plot bounds recomputed: %s", self.kind, self._bounds)
        return self._bounds

    def bounds(self) -> Bounds:
        return self._resolve_bounds()

    def set_bounds(self, min_x: float, max_x: float, min_y: float, max_y: float) -> "Plot":
        values = (float(min_x), float(max_x), float(min_y), float(max_y))
        if not all(np.isfinite(values)):
            raise PlotConfigError("manual bounds must be finite")
        if not (values[0] < values[1] and values[2] < values[3]):
            raise PlotConfigError(f"manual bounds need min < max on both axes, got {values}")
        self._manual_bounds = Bounds(*values)
        return self

    def reset_bounds(self) -> "Plot":
        self._manual_bounds = None
        self._mark_dirty()
        return self

    def transform(self, x: float, y: float) -> tuple[float, float]:
        cfg = self.config
        return DataTransform(self.bounds(), cfg.margins, cfg.width, cfg.height).apply(x, y)

    def ticks(self) -> tuple[np.ndarray, np.ndarray]:
        b = self.bounds()
        target = self.config.tick_target
        if self.histogram_kind == "discrete":
            n = max(h.counts.size for h in self._histograms)
            x_ticks = np.arange(n, dtype=np.float64)
            x_ticks = x_ticks[(x_ticks >= b.min_x) & (x_ticks <= b.max_x)]
        else:
            x_ticks = generate_nice_ticks(b.min_x, b.max_x, target)
        return x_ticks, generate_nice_ticks(b.min_y, b.max_y, target)

    def category_labels(self) -> list[str]:
        """Category names at the integer x positions shown as ticks."""
        if self.histogram_kind != "discrete":
            return []
        longest = max(self._histograms, key=lambda h: len(h.categories))
        b = self.bounds()
        return [name for i, name in enumerate(longest.categories) if b.min_x <= i <= b.max_x]

    def set_title(self, title: str) -> "Plot":
        self.title = title
        return self

    def set_xlabel(self, label: str) -> "Plot":
        self.xlabel = label
        return self

    def set_ylabel(self, label: str) -> "Plot":
        self.ylabel = label
        return self

    def set_labels(self, title: str, xlabel: str, ylabel: str) -> "Plot":
        self.title = title
        self.xlabel = xlabel
        self.ylabel = ylabel
        return self

    def set_legend_enabled(self, enabled: bool) -> "Plot":
        self.legend_enabled = bool(enabled)
        return self

    def hide_legend_item(self, name: str) -> "Plot":
        self._hidden.add(name)
        return self

    def show_legend_item(self, name: str) -> "Plot":
        self._hidden.discard(name)
        return self

    def show_all_legend_items(self) -> "Plot":
        self._hidden.clear()
        return self

    def legend_items(self) -> list[LegendItem]:
        return legend_items(self)

    def set_marker_type(self, marker: MarkerType) -> "Plot":
        self._require_kind("scatter", "line", what="markers")
        if marker not in MARKER_TYPES:
            raise PlotConfigError(f"unknown marker type {marker!r}; expected one of {MARKER_TYPES}")
        self.marker_type = marker
        return self

    def set_line_style(self, style: LineStyle) -> "Plot":
        self._require_kind("line", what="line styles")
        if style not in LINE_DASHES:
            raise PlotConfigError(f"unknown line style {style!r}; expected one of {tuple(LINE_DASHES)}")
        self.line_style = style
        return self

    def set_line_width(self, width: float) -> "Plot":
        self._require_kind("line", what="line widths")
        if width <= 0:
            raise PlotConfigError("line width must be > 0")
        self._line_width = float(width)
        return self

    def set_show_markers(self, enabled: bool) -> "Plot":
        self._require_kind("line", what="line markers")
        self.show_markers = bool(enabled)
        return self

    def line_width_for(self, style: Style | None) -> float:
        if self._line_width is not None:
            return self._line_width
        return style.line_width if style is not None else Style().line_width

    def add_series(
        self,
        name: str,
        points: Sequence[Point] | Sequence[tuple[float, float]],
        style: Style | None = None,
        *,
        color: str | None = None,
    ) -> "Plot":
        pairs = [(p.x, p.y) if isinstance(p, Point) else tuple(p) for p in points]
        if any(len(p) != 2 for p in pairs):
            raise PlotDataError("points must be (x, y) pairs")
        return self.add_xy(name, [p[0] for p in pairs], [p[1] for p in pairs], style, color=color)

    def add_xy(
        self,
        name: str,
        x: Any,
        y: Any,
        style: Style | None = None,
        *,
        color: str | None = None,
        data: Any = None,
    ) -> "Plot":
        self._require_kind("scatter", "line", what="point series")
        xs, ys = normalize_xy(x, y, data=data, label=f"series {name!r}")
        resolved = self._series_style(style, color)
        if xs.size == 0:
            LOGGER.warning("series %r has no points; skipping", name)
            return self
        self._series.append(Series(name=name, style=resolved, x=xs, y=ys))
        self._mark_dirty()
        return self

    def add_series_point(self, name: str, x: float, y: float) -> "Plot":
        self._require_kind("scatter", "line", what="point series")
        xs, ys = normalize_xy([x], [y], label=f"series {name!r}")
        if xs.size == 0:
            return self
        existing = self._find_series(name)
        if existing is None:
            self._series.append(Series(name=name, style=self._series_style(None, None), x=xs, y=ys))
        else:
            existing.extend(xs, ys)
        self._mark_dirty()
        return self

    def add_point(self, x: float, y: float, style: Style | None = None) -> "Plot":
        return self.add_points([(x, y)], style)

    def add_points(self, points: Sequence[Point] | Sequence[tuple[float, float]], style: Style | None = None) -> "Plot":
        self._require_kind("scatter", "line", what="point series")
        pairs = [(p.x, p.y) if isinstance(p, Point) else tuple(p) for p in points]
        xs, ys = normalize_xy([p[0] for p in pairs], [p[1] for p in pairs], label="default series")
        if xs.size == 0:
            LOGGER.warning("no points to add to the default series; skipping")
            return self
        existing = self._find_series(DEFAULT_SERIES_NAME)
        if existing is None:
            self._series.append(Series(name=DEFAULT_SERIES_NAME, style=style or Style(), x=xs, y=ys))
        else:
            existing.extend(xs, ys)
        self._mark_dirty()
        return self

    def _find_series(self, name: str) -> Series | None:
        for s in self._series:
            if s.name == name:
                return s
        return None

    def _series_style(self, style: Style | None, color: str | None) -> Style:
        if style is not None:
            return style
        if color is not None:
            return color_to_style(color)
        return color_to_style(self.palette.series_color(len(self._series) + len(self._histograms)))

    def add_clusters(
        self,
        name: str,
        x: Any,
        y: Any,
        labels: Any,
        *,
        point_size: float = 3.0,
        alpha: float = 0.8,
        names: Mapping[int, str] | None = None,
        colors: Mapping[int, str | RGB] | None = None,
    ) -> "Plot":
        self._require_kind("scatter", "line", what="cluster series")
        xs = coerce_1d(x, label="x")
        ys = coerce_1d(y, label="y")
        if xs.size != ys.size:
            raise PlotDataError(f"x and y length mismatch: {xs.size} != {ys.size}")
        label_arr = normalize_labels(labels, size=xs.size)
        finite = np.isfinite(xs) & np.isfinite(ys)
        if not np.all(finite):
            dropped = int(finite.size - np.count_nonzero(finite))
            LOGGER.warning("cluster series %r: dropped %d non-finite point(s)", name, dropped)
            xs, ys, label_arr = xs[finite], ys[finite], label_arr[finite]
        name_map = None if names is None else {int(k): str(v) for k, v in names.items()}
        color_map = None if colors is None else {int(k): _coerce_color(v) for k, v in colors.items()}
        present = label_arr.tolist()
        check_overrides(name_map, present, what="name")
        check_overrides(color_map, present, what="color")
        if xs.size == 0:
            LOGGER.warning("cluster series %r has no points; skipping", name)
            return self
        self._clusters.append(
            ClusterSeries(
                name=name,
                x=xs,
                y=ys,
                labels=label_arr,
                point_size=float(point_size),
                alpha=float(alpha),
                names=name_map,
                colors=color_map,
            )
        )
        self._mark_dirty()
        return self

    def add_cluster_point(self, name: str, x: float, y: float, label: int) -> "Plot":
        self._require_kind("scatter", "line", what="cluster series")
        label_arr = normalize_labels([label], size=1)
        xs, ys = normalize_xy([x], [y], label=f"cluster series {name!r}")
        if xs.size == 0:
            return self
        existing = next((c for c in self._clusters if c.name == name), None)
        if existing is None:
            self._clusters.append(ClusterSeries(name=name, x=xs, y=ys, labels=label_arr))
        else:
            check_overrides(existing.names, label_arr.tolist(), what="name")
            check_overrides(existing.colors, label_arr.tolist(), what="color")
            existing.extend(xs, ys, label_arr)
        self._mark_dirty()
        return self

    def add_histogram(
        self,
        samples: Any,
        name: str | None = None,
        *,
        color: str | None = None,
        style: Style | None = None,
        bin_count: int = 0,
        cumulative: bool = False,
    ) -> "Plot":
        self._require_kind("histogram", what="histograms")
        self._require_histogram_kind("continuous")
        values = normalize_samples(samples)
        resolved = self._series_style(style, color)
        if values.size == 0:
            LOGGER.warning("histogram %r has no samples; skipping", name)
            return self
        edges, counts = bin_samples(values, int(bin_count), cap=self.config.max_auto_bins)
        self._histograms.append(
            ContinuousHistogram(
                name=name if name is not None else f"Histogram {len(self._histograms) + 1}",
                samples=values,
                edges=edges,
                counts=counts,
                style=resolved,
                cumulative=bool(cumulative),
            )
        )
        self._mark_dirty()
        return self

    def add_discrete_histogram(
        self,
        counts: Any,
        names: Sequence[str] | None = None,
        colors: Sequence[str | Style] | None = None,
        *,
        name: str = "Categories",
    ) -> "Plot":
        self._require_kind("histogram", what="histograms")
        self._require_histogram_kind("discrete")
        if any(line.is_vertical for line in self._reference_lines):
            raise PlotConfigError("discrete histograms cannot share a plot with vertical reference lines")
        values = normalize_counts(counts)
        if names is not None and len(names) != values.size:
            raise PlotDataError(f"category names length mismatch: {len(names)} != {values.size}")
        if colors is not None and len(colors) != values.size:
            raise PlotDataError(f"category colors length mismatch: {len(colors)} != {values.size}")
        if values.size == 0:
            LOGGER.warning("discrete histogram %r has no categories; skipping", name)
            return self
        categories = tuple(names) if names is not None else tuple(f"idx {i + 1}" for i in range(values.size))
        if colors is None:
            styles = tuple(color_to_style(self.palette.series_color(i)) for i in range(values.size))
        else:
            styles = tuple(c if isinstance(c, Style) else color_to_style(c) for c in colors)
        self._histograms.append(DiscreteHistogram(name=name, counts=values, categories=categories, styles=styles))
        self._mark_dirty()
        return self

    def _require_histogram_kind(self, wanted: HistogramKind) -> None:
        current = self.histogram_kind
        if current is not None and current != wanted:
            raise PlotConfigError(
                f"cannot add a {wanted} histogram to a plot holding {current} histograms; "
                "continuous and discrete histograms cannot be mixed"
            )

    def add_vertical_line(self, x: float, label: str | None = None, color: str | None = None) -> "Plot":
        return self.add_reference_line(True, x, label, self._reference_style(color))

    def add_horizontal_line(self, y: float, label: str | None = None, color: str | None = None) -> "Plot":
        return self.add_reference_line(False, y, label, self._reference_style(color))

    def add_reference_line(
        self,
        is_vertical: bool,
        value: float,
        label: str | None = None,
        style: Style | None = None,
    ) -> "Plot":
        value = float(value)
        if not np.isfinite(value):
            raise PlotDataError("reference line value must be finite")
        if is_vertical and self.histogram_kind == "discrete":
            raise PlotConfigError("vertical reference lines are not supported on discrete histograms")
        if label is None:
            label = f"{'X' if is_vertical else 'Y'} = {format_number(value)}"
        self._reference_lines.append(
            ReferenceLine(
                is_vertical=bool(is_vertical),
                value=value,
                style=style or self._reference_style(None),
                label=label,
            )
        )
        return self

    def clear_reference_lines(self) -> "Plot":
        self._reference_lines.clear()
        return self

    def _reference_style(self, color: str | None) -> Style:
        if color is not None:
            return DEFAULT_REFERENCE_STYLE.with_color(resolve_color(color))
        data_colors = {s.style.color for s in self._series}
        for h in self._histograms:
            if isinstance(h, ContinuousHistogram):
                data_colors.add(h.style.color)
            else:
                data_colors.update(st.color for st in h.styles)
        used = [n for n in self.palette.reference if resolve_color(n) in data_colors]
        picked = self.palette.reference_color(used, len(self._reference_lines))
        return DEFAULT_REFERENCE_STYLE.with_color(resolve_color(picked))

    def clear(self) -> "Plot":
        self._series.clear()
        self._clusters.clear()
        self._histograms.clear()
        self._reference_lines.clear()
        self._manual_bounds = None
        self._reset_labels()
        self._mark_dirty()
        return self

    def render(self, surface: Surface) -> None:
        render_plot(self, surface)

    def new_surface(self, fmt: Literal["png", "svg"] = "png") -> Surface:
        cls = SvgSurface if fmt == "svg" else RasterSurface
        theme = self.config.theme
        return cls(self.config.width, self.config.height, background=theme.background, font_family=theme.font_family)

    def to_rgba(self) -> np.ndarray:
        theme = self.config.theme
        surface = RasterSurface(
            self.config.width,
            self.config.height,
            background=theme.background,
            font_family=theme.font_family,
        )
        self.render(surface)
        return surface.canvas

    def save_png(self, path: str | Path) -> bool:
        return self._save("png", path)

    def save_svg(self, path: str | Path) -> bool:
        return self._save("svg", path)

    def _save(self, fmt: Literal["png", "svg"], path: str | Path) -> bool:
        surface = self.new_surface(fmt)
        self.render(surface)
        try:
            surface.write(path)
        except OSError:
            LOGGER.error("failed to write %s plot to %s", fmt.upper(), path, exc_info=True)
            return False
        return True

    def _require_kind(self, *kinds: str, what: str) -> None:
        if self.kind not in kinds:
            raise PlotConfigError(f"{what} are not supported on {self.kind} plots")


def _coerce_color(value: str | RGB) -> RGB:
    if isinstance(value, str):
        return resolve_color(value)
    rgb = tuple(int(c) for c in value)
    if len(rgb) != 3 or any(not 0 <= c <= 255 for c in rgb):
        raise PlotConfigError(f"cluster colors must be names or (r, g, b) triples, got {value!r}")
    return (rgb[0], rgb[1], rgb[2])
