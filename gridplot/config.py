from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib
from typing import Any

from gridplot.errors import PlotConfigError
from gridplot.style import RGB, RGBA, Palette, resolve_color


@dataclass(frozen=True)
class Margins:
    left: float = 80.0
    right: float = 150.0
    top: float = 60.0
    bottom: float = 80.0


@dataclass(frozen=True)
class Theme:
    background: RGBA = (255, 255, 255, 255)
    axis_color: RGBA = (0, 0, 0, 255)
    grid_color: RGBA = (230, 230, 230, 204)
    text_color: RGBA = (0, 0, 0, 255)
    legend_background: RGBA = (255, 255, 255, 230)
    legend_border: RGBA = (0, 0, 0, 77)
    font_family: str = "DejaVu Sans"


@dataclass(frozen=True)
class FontSizes:
    title: float = 16.0
    axis_label: float = 12.0
    tick: float = 10.0
    legend: float = 10.0
    grid_title: float = 20.0


@dataclass(frozen=True)
class LegendConfig:
    row_height: float = 20.0
    width: float = 120.0
    padding: float = 10.0
    inset_x: float = 10.0
    inset_y: float = 20.0
    glyph_size: float = 4.0


@dataclass(frozen=True)
class PlotConfig:
    width: int = 800
    height: int = 600
    margins: Margins = field(default_factory=Margins)
    tick_target: int = 6
    point_pad_ratio: float = 0.05
    histogram_x_pad_ratio: float = 0.02
    histogram_y_pad_ratio: float = 0.05
    max_auto_bins: int = 20
    bar_width: float = 0.8
    theme: Theme = field(default_factory=Theme)
    fonts: FontSizes = field(default_factory=FontSizes)
    legend: LegendConfig = field(default_factory=LegendConfig)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PlotConfigError("plot width and height must be > 0")
        if self.tick_target < 1:
            raise PlotConfigError("tick_target must be >= 1")
        if self.max_auto_bins < 1:
            raise PlotConfigError("max_auto_bins must be >= 1")
        if not 0.0 < self.bar_width < 1.0:
            raise PlotConfigError("bar_width must be in (0, 1)")


@dataclass(frozen=True)
class GridConfig:
    width: int = 1200
    height: int = 900
    spacing: float = 0.05
    title_pad: float = 10.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise PlotConfigError("grid width and height must be > 0")
        if self.spacing < 0:
            raise PlotConfigError("spacing must be >= 0")


@dataclass(frozen=True)
class RenderConfig:
    plot: PlotConfig = field(default_factory=PlotConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    palette: Palette = field(default_factory=Palette)


DEFAULT_CONFIG = RenderConfig()


def load_render_config(path: str | Path) -> RenderConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"render config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise PlotConfigError(f"invalid TOML in {config_path}: {exc}") from exc
    return render_config_from_dict(raw)


def render_config_from_dict(raw: dict[str, Any]) -> RenderConfig:
    unknown = set(raw) - {"plot", "grid", "palette"}
    if unknown:
        raise PlotConfigError(f"unknown config tables: {sorted(unknown)}")

    plot_raw = dict(_coerce_table(raw.get("plot", {}), "plot"))
    nested: dict[str, Any] = {}
    for key, cls in (("margins", Margins), ("theme", Theme), ("fonts", FontSizes), ("legend", LegendConfig)):
        if key in plot_raw:
            nested[key] = _build(cls, _coerce_table(plot_raw.pop(key), f"plot.{key}"), f"plot.{key}")
    plot = replace(_build(PlotConfig, plot_raw, "plot"), **nested)
    grid = _build(GridConfig, _coerce_table(raw.get("grid", {}), "grid"), "grid")
    palette = _build_palette(_coerce_table(raw.get("palette", {}), "palette"))
    return RenderConfig(plot=plot, grid=grid, palette=palette)


def _coerce_table(value: Any, name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise PlotConfigError(f"`{name}` must be a table")
    return value


def _build(cls: type, values: dict[str, Any], name: str) -> Any:
    allowed = {f.name: f for f in fields(cls)}
    out: dict[str, Any] = {}
    for key, value in values.items():
        if key not in allowed:
            raise PlotConfigError(f"unknown key `{name}.{key}`")
        default = getattr(cls(), key)
        out[key] = _coerce_value(value, default, f"{name}.{key}")
    return cls(**out)


def _coerce_value(value: Any, default: Any, name: str) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise PlotConfigError(f"`{name}` must be a boolean")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise PlotConfigError(f"`{name}` must be an integer")
        return value
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PlotConfigError(f"`{name}` must be a number")
        return float(value)
    if isinstance(default, str):
        if not isinstance(value, str):
            raise PlotConfigError(f"`{name}` must be a string")
        return value
    if isinstance(default, tuple):
        if not isinstance(value, list) or len(value) != len(default):
            raise PlotConfigError(f"`{name}` must be a list of {len(default)} integers")
        if any(isinstance(v, bool) or not isinstance(v, int) for v in value):
            raise PlotConfigError(f"`{name}` must contain integers")
        return tuple(value)
    raise PlotConfigError(f"`{name}` cannot be configured")


def _build_palette(values: dict[str, Any]) -> Palette:
    allowed = {"series", "reference", "clusters", "outlier"}
    unknown = set(values) - allowed
    if unknown:
        raise PlotConfigError(f"unknown palette keys: {sorted(unknown)}")
    out: dict[str, Any] = {}
    for key in ("series", "reference"):
        if key in values:
            names = values[key]
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                raise PlotConfigError(f"`palette.{key}` must be a list of color names")
            out[key] = tuple(n.strip().lower() for n in names)
    if "clusters" in values:
        clusters = values["clusters"]
        if not isinstance(clusters, list):
            raise PlotConfigError("`palette.clusters` must be a list")
        out["clusters"] = tuple(_coerce_rgb(c, "palette.clusters") for c in clusters)
    if "outlier" in values:
        out["outlier"] = _coerce_rgb(values["outlier"], "palette.outlier")
    return Palette(**out)


def _coerce_rgb(value: Any, name: str) -> RGB:
    if isinstance(value, str):
        return resolve_color(value)
    if (
        isinstance(value, list)
        and len(value) == 3
        and all(isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= 255 for v in value)
    ):
        return (value[0], value[1], value[2])
    raise PlotConfigError(f"`{name}` entries must be color names or [r, g, b] lists")
