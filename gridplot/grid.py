from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
import logging
from pathlib import Path
from typing import Literal

import numpy as np

from gridplot.config import DEFAULT_CONFIG, RenderConfig
from gridplot.errors import GridIndexError, PlotConfigError
from gridplot.plot import CHART_KINDS, ChartKind, Plot
from gridplot.raster import text_size
from gridplot.surfaces import Placement, RasterSurface, Surface, SvgSurface


LOGGER = logging.getLogger(__name__)

NATIVE_SIZE = (800.0, 600.0)


@dataclass(frozen=True)
class CellPlacement:
    row: int
    col: int
    x: float
    y: float
    width: float
    height: float
    scale: float
    offset_x: float
    offset_y: float

    @property
    def placement(self) -> Placement:
        return Placement(offset_x=self.offset_x, offset_y=self.offset_y, scale=self.scale)


@dataclass(frozen=True)
class GridLayout:
    rows: int
    cols: int
    cell_width: float
    cell_height: float
    h_spacing: float
    v_spacing: float
    title_height: float
    origin_x: float
    origin_y: float
    title_baseline: float
    cells: tuple[CellPlacement, ...]

    def cell(self, row: int, col: int) -> CellPlacement:
        return self.cells[row * self.cols + col]


def compute_grid_layout(
    rows: int,
    cols: int,
    width: float,
    height: float,
    spacing: float = 0.05,
    *,
    title_height: float = 0.0,
    title_pad: float = 10.0,
    native_sizes: Mapping[tuple[int, int], tuple[float, float]] | None = None,
) -> GridLayout:
    """Place ``rows x cols`` native-size plots on a ``width x height`` canvas.

    Spacing is a fraction of the canvas on each axis and appears ``n + 1``
    times per axis. The title block and the grid are centered together on the
    canvas, then each plot is scaled uniformly to fit its cell and centered in
    it. ``native_sizes`` overrides the 800x600 native size per cell.
    """
    if rows < 1 or cols < 1:
        raise PlotConfigError("rows and cols must be >= 1")
    if spacing < 0:
        raise PlotConfigError("spacing must be >= 0")
    h_spacing = spacing * width
    v_spacing = spacing * height
    available_w = width - h_spacing * (cols + 1)
    available_h = height - v_spacing * (rows + 1) - title_height
    if available_w <= 0 or available_h <= 0:
        raise PlotConfigError(
            f"no room for a {rows}x{cols} grid on a {width}x{height} canvas with spacing {spacing}"
        )
    cell_w = available_w / cols
    cell_h = available_h / rows

    grid_w = cols * cell_w + (cols - 1) * h_spacing
    grid_h = rows * cell_h + (rows - 1) * v_spacing
    origin_x = (width - grid_w) / 2.0
    block_top = (height - (title_height + grid_h)) / 2.0
    origin_y = block_top + title_height
    title_baseline = block_top + title_height - title_pad / 2.0 if title_height > 0 else block_top

    sizes = native_sizes or {}
    cells: list[CellPlacement] = []
    for r in range(rows):
        for c in range(cols):
            native_w, native_h = sizes.get((r, c), NATIVE_SIZE)
            scale = min(cell_w / native_w, cell_h / native_h)
            x = origin_x + c * (cell_w + h_spacing)
            y = origin_y + r * (cell_h + v_spacing)
            cells.append(
                CellPlacement(
                    row=r,
                    col=c,
                    x=x,
                    y=y,
                    width=cell_w,
                    height=cell_h,
                    scale=scale,
                    offset_x=x + (cell_w - native_w * scale) / 2.0,
                    offset_y=y + (cell_h - native_h * scale) / 2.0,
                )
            )
    return GridLayout(
        rows=rows,
        cols=cols,
        cell_width=cell_w,
        cell_height=cell_h,
        h_spacing=h_spacing,
        v_spacing=v_spacing,
        title_height=title_height,
        origin_x=origin_x,
        origin_y=origin_y,
        title_baseline=title_baseline,
        cells=tuple(cells),
    )


class SubplotGrid:
    """A rows x cols matrix of independently styled plots on one canvas.

    Cells are created on first access and owned by the grid.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        width: int | None = None,
        height: int | None = None,
        spacing: float | None = None,
        *,
        config: RenderConfig | None = None,
    ) -> None:
        if rows < 1 or cols < 1:
            raise PlotConfigError("rows and cols must be >= 1")
        config = config or DEFAULT_CONFIG
        overrides = {
            k: v for k, v in (("width", width), ("height", height), ("spacing", spacing)) if v is not None
        }
        self.config = replace(config, grid=replace(config.grid, **overrides)) if overrides else config
        self.rows = int(rows)
        self.cols = int(cols)
        self.main_title = ""
        self._cells: dict[tuple[int, int], Plot] = {}

    @property
    def width(self) -> int:
        return self.config.grid.width

    @property
    def height(self) -> int:
        return self.config.grid.height

    @property
    def spacing(self) -> float:
        return self.config.grid.spacing

    def _check_index(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise GridIndexError(f"subplot ({row}, {col}) is outside the {self.rows}x{self.cols} grid")

    def subplot(self, row: int, col: int, kind: ChartKind = "scatter") -> Plot:
        self._check_index(row, col)
        if kind not in CHART_KINDS:
            raise PlotConfigError(f"unknown chart kind {kind!r}; expected one of {CHART_KINDS}")
        plot = self._cells.get((row, col))
        if plot is None:
            plot = Plot(kind, config=self.config.plot, palette=self.config.palette)
            self._cells[(row, col)] = plot
        elif plot.kind != kind:
            raise PlotConfigError(f"subplot ({row}, {col}) already holds a {plot.kind} plot, not {kind}")
        return plot

    def set_subplot(self, row: int, col: int, plot: Plot) -> Plot:
        self._check_index(row, col)
        self._cells[(row, col)] = plot
        return plot

    def has_subplot(self, row: int, col: int) -> bool:
        self._check_index(row, col)
        return (row, col) in self._cells

    def set_main_title(self, title: str) -> "SubplotGrid":
        self.main_title = title
        return self

    def clear(self) -> "SubplotGrid":
        self._cells.clear()
        self.main_title = ""
        return self

    def _title_extent(self) -> tuple[float, float]:
        if not self.main_title:
            return (0.0, 0.0)
        cfg = self.config.plot
        w, h = text_size(
            self.main_title,
            font_family=cfg.theme.font_family,
            font_size_px=cfg.fonts.grid_title,
            bold=True,
        )
        return (float(w), float(h) + self.config.grid.title_pad)

    def layout(self) -> GridLayout:
        _, title_height = self._title_extent()
        grid = self.config.grid
        plot_cfg = self.config.plot
        native_sizes = {(r, c): (plot_cfg.width, plot_cfg.height) for r in range(self.rows) for c in range(self.cols)}
        native_sizes.update({key: (plot.width, plot.height) for key, plot in self._cells.items()})
        layout = compute_grid_layout(
            self.rows,
            self.cols,
            grid.width,
            grid.height,
            grid.spacing,
            title_height=title_height,
            title_pad=grid.title_pad,
            native_sizes=native_sizes,
        )
        LOGGER.debug(
            "grid %dx%d layout: cell %.1fx%.1f origin (%.1f, %.1f)",
            self.rows,
            self.cols,
            layout.cell_width,
            layout.cell_height,
            layout.origin_x,
            layout.origin_y,
        )
        return layout

    def render(self, surface: Surface) -> None:
        layout = self.layout()
        if self.main_title:
            cfg = self.config.plot
            title_w, _ = self._title_extent()
            surface.text(
                (self.width - title_w) / 2.0,
                layout.title_baseline,
                self.main_title,
                cfg.theme.text_color,
                cfg.fonts.grid_title,
                bold=True,
            )
        for cell in layout.cells:
            plot = self._cells.get((cell.row, cell.col))
            if plot is None:
                continue
            with surface.placed(cell.placement):
                plot.render(surface)

    def new_surface(self, fmt: Literal["png", "svg"] = "png") -> Surface:
        cls = SvgSurface if fmt == "svg" else RasterSurface
        theme = self.config.plot.theme
        return cls(self.width, self.height, background=theme.background, font_family=theme.font_family)

    def to_rgba(self) -> np.ndarray:
        theme = self.config.plot.theme
        surface = RasterSurface(self.width, self.height, background=theme.background, font_family=theme.font_family)
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
            LOGGER.error("failed to write %s grid to %s", fmt.upper(), path, exc_info=True)
            return False
        return True
