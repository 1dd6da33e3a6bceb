from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

import numpy as np

from gridplot.clusters import OUTLIER_LABEL, ordered_labels
from gridplot.histogram import calculate_cumulative
from gridplot.style import REFERENCE_DASH, RGB, Style


HistogramKind = Literal["continuous", "discrete"]


def _empty() -> np.ndarray:
    return np.empty(0, dtype=np.float64)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(eq=False)
class Series:
    name: str
    style: Style
    x: np.ndarray = field(default_factory=_empty)
    y: np.ndarray = field(default_factory=_empty)

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def points(self) -> tuple[Point, ...]:
        return tuple(Point(float(a), float(b)) for a, b in zip(self.x.tolist(), self.y.tolist()))

    def extend(self, x: np.ndarray, y: np.ndarray) -> None:
        self.x = np.concatenate([self.x, np.asarray(x, dtype=np.float64)])
        self.y = np.concatenate([self.y, np.asarray(y, dtype=np.float64)])


@dataclass(eq=False)
class ClusterSeries:
    """Points tagged with integer cluster labels; ``-1`` marks an outlier.

    ``names`` and ``colors`` are all-or-nothing: when present they map every
    label in the series.
    """

    name: str
    x: np.ndarray = field(default_factory=_empty)
    y: np.ndarray = field(default_factory=_empty)
    labels: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.int64))
    point_size: float = 3.0
    alpha: float = 0.8
    names: Mapping[int, str] | None = None
    colors: Mapping[int, RGB] | None = None

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def points(self) -> tuple[tuple[Point, int], ...]:
        return tuple(
            (Point(float(a), float(b)), int(c))
            for a, b, c in zip(self.x.tolist(), self.y.tolist(), self.labels.tolist())
        )

    def unique_labels(self) -> list[int]:
        return ordered_labels(self.labels.tolist())

    def has_outliers(self) -> bool:
        return bool(np.any(self.labels == OUTLIER_LABEL))

    def select(self, label: int) -> tuple[np.ndarray, np.ndarray]:
        mask = self.labels == label
        return self.x[mask], self.y[mask]

    def extend(self, x: np.ndarray, y: np.ndarray, labels: np.ndarray) -> None:
        self.x = np.concatenate([self.x, np.asarray(x, dtype=np.float64)])
        self.y = np.concatenate([self.y, np.asarray(y, dtype=np.float64)])
        self.labels = np.concatenate([self.labels, np.asarray(labels, dtype=np.int64)])


@dataclass(frozen=True)
class ReferenceLine:
    is_vertical: bool
    value: float
    style: Style
    label: str
    dash: tuple[float, float] | None = REFERENCE_DASH


@dataclass(frozen=True, eq=False)
class ContinuousHistogram:
    name: str
    samples: np.ndarray
    edges: np.ndarray
    counts: np.ndarray
    style: Style
    cumulative: bool = False

    kind: HistogramKind = field(default="continuous", init=False)

    @property
    def heights(self) -> np.ndarray:
        if self.cumulative:
            return calculate_cumulative(self.counts)
        return self.counts

    @property
    def total(self) -> int:
        return int(self.counts.sum())


@dataclass(frozen=True, eq=False)
class DiscreteHistogram:
    name: str
    counts: np.ndarray
    categories: tuple[str, ...]
    styles: tuple[Style, ...]

    kind: HistogramKind = field(default="discrete", init=False)

    @property
    def heights(self) -> np.ndarray:
        return self.counts

    @property
    def total(self) -> float:
        return float(self.counts.sum())


HistogramSeries = ContinuousHistogram | DiscreteHistogram
