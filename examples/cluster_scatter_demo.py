from __future__ import annotations

from pathlib import Path

import numpy as np

from gridplot import Plot


def build_plot(seed: int = 3) -> Plot:
    rng = np.random.default_rng(seed)
    centers = [(1.0, 1.0), (4.0, 1.5), (2.5, 4.0), (5.5, 4.5)]
    x_parts, y_parts, label_parts = [], [], []
    for label, (cx, cy) in enumerate(centers):
        x_parts.append(rng.normal(cx, 0.45, 60))
        y_parts.append(rng.normal(cy, 0.45, 60))
        label_parts.append(np.full(60, label))
    # Sparse noise the clusterer could not assign.
    x_parts.append(rng.uniform(-1.0, 7.0, 12))
    y_parts.append(rng.uniform(-1.0, 6.0, 12))
    label_parts.append(np.full(12, -1))

    plot = Plot("scatter")
    plot.set_labels("DBSCAN output", "feature 1", "feature 2")
    plot.add_clusters(
        "dbscan",
        np.concatenate(x_parts),
        np.concatenate(y_parts),
        np.concatenate(label_parts),
        point_size=3.5,
        names={-1: "Noise", 0: "North-west", 1: "South", 2: "Centre", 3: "East"},
        colors={-1: "gray", 0: "blue", 1: "green", 2: "orange", 3: "purple"},
    )
    plot.add_series("centroids", [(cx, cy) for cx, cy in centers], color="black")
    plot.set_marker_type("cross")
    plot.hide_legend_item("Noise")
    return plot


def main() -> None:
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)
    plot = build_plot()
    for path, ok in (
        (out_dir / "cluster_scatter.png", plot.save_png(out_dir / "cluster_scatter.png")),
        (out_dir / "cluster_scatter.svg", plot.save_svg(out_dir / "cluster_scatter.svg")),
    ):
        print(f"{'wrote' if ok else 'failed'} {path}")


if __name__ == "__main__":
    main()
