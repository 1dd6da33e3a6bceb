from gridplot.config import DEFAULT_CONFIG, GridConfig, PlotConfig, RenderConfig, load_render_config
from gridplot.errors import GridIndexError, PlotConfigError, PlotDataError, PlotError
from gridplot.grid import GridLayout, SubplotGrid, compute_grid_layout
from gridplot.plot import BoundsState, Plot
from gridplot.scales import Bounds, generate_nice_ticks
from gridplot.series import Point
from gridplot.style import Palette, Style
from gridplot.surfaces import RasterSurface, SvgSurface

__all__ = [
    "Bounds",
    "BoundsState",
    "DEFAULT_CONFIG",
    "GridConfig",
    "GridIndexError",
    "GridLayout",
    "Palette",
    "Plot",
    "PlotConfig",
    "PlotConfigError",
    "PlotDataError",
    "PlotError",
    "Point",
    "RasterSurface",
    "RenderConfig",
    "Style",
    "SubplotGrid",
    "SvgSurface",
    "compute_grid_layout",
    "generate_nice_ticks",
    "load_render_config",
]
