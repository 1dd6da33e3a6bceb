from __future__ import annotations

from collections.abc import Iterable, Mapping

from gridplot.errors import PlotConfigError
from gridplot.style import DEFAULT_PALETTE, RGB, Palette


OUTLIER_LABEL = -1
OUTLIER_NAME = "Outliers"


def cluster_display_name(label: int) -> str:
    if label == OUTLIER_LABEL:
        return OUTLIER_NAME
    return f"Cluster {label + 1}"


def ordered_labels(labels: Iterable[int]) -> list[int]:
    """Distinct labels, outliers first, then clusters by ascending id."""
    return sorted({int(v) for v in labels})


def check_overrides(overrides: Mapping[int, object] | None, labels: Iterable[int], *, what: str) -> None:
    if overrides is None:
        return
    missing = [label for label in ordered_labels(labels) if label not in overrides]
    if missing:
        raise PlotConfigError(f"cluster {what} override is missing label(s) {missing}; supply all labels or none")


class ClusterColorizer:
    def __init__(self, palette: Palette = DEFAULT_PALETTE) -> None:
        self._palette = palette

    @property
    def palette(self) -> Palette:
        return self._palette

    def color(self, label: int, overrides: Mapping[int, RGB] | None = None) -> RGB:
        if overrides is not None:
            try:
                return overrides[label]
            except KeyError:
                raise PlotConfigError(f"no color override for cluster label {label}") from None
        if label == OUTLIER_LABEL:
            return self._palette.outlier
        clusters = self._palette.clusters
        return clusters[label % len(clusters)]

    def name(self, label: int, overrides: Mapping[int, str] | None = None) -> str:
        if overrides is not None:
            try:
                return overrides[label]
            except KeyError:
                raise PlotConfigError(f"no name override for cluster label {label}") from None
        return cluster_display_name(label)
