from __future__ import annotations


class PlotError(Exception):
    """Base class for every error raised by gridplot."""


class PlotDataError(PlotError, ValueError):
    """Input data is malformed (length mismatch, non-numeric values, bad labels)."""


class PlotConfigError(PlotError, ValueError):
    """A call would leave a plot or grid in an invalid configuration."""


class GridIndexError(PlotError, IndexError):
    """A subplot grid cell was addressed outside the grid."""
