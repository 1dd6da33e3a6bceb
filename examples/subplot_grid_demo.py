from __future__ import annotations

from pathlib import Path

import numpy as np

from gridplot import SubplotGrid


def build_grid(seed: int = 5) -> SubplotGrid:
    rng = np.random.default_rng(seed)
    grid = SubplotGrid(2, 3, width=1500, height=800, spacing=0.04)
    grid.set_main_title("Training run 42")

    steps = np.arange(0, 200, dtype=np.float64)
    loss = grid.subplot(0, 0, "line")
    loss.set_labels("Loss", "step", "loss")
    loss.add_xy("train", steps, 2.0 * np.exp(-steps / 60.0) + rng.normal(0.0, 0.03, steps.size))
    loss.add_xy("eval", steps[::10], 2.1 * np.exp(-steps[::10] / 55.0))
    loss.set_line_style("dashed")

    acc = grid.subplot(0, 1, "line")
    acc.set_labels("Accuracy", "step", "acc")
    acc.add_xy("eval", steps[::10], 1.0 - 0.9 * np.exp(-steps[::10] / 40.0))
    acc.set_show_markers(True).set_marker_type("square")
    acc.add_horizontal_line(0.9, label="target")

    emb = grid.subplot(0, 2, "scatter")
    emb.set_labels("Embeddings", "pc1", "pc2")
    labels = rng.integers(-1, 3, 150)
    emb.add_clusters("tsne", rng.normal(labels * 2.0, 0.6), rng.normal(labels * -1.5, 0.6), labels)

    grads = grid.subplot(1, 0, "histogram")
    grads.set_title("Gradient norms").set_xlabel("norm")
    grads.add_histogram(np.abs(rng.normal(0.0, 1.0, 1000)), name="grad")

    classes = grid.subplot(1, 1, "histogram")
    classes.set_title("Class balance")
    classes.add_discrete_histogram([310, 290, 150, 250], names=["cat", "dog", "bird", "fish"])
    classes.set_legend_enabled(False)

    lr = grid.subplot(1, 2, "line")
    lr.set_labels("LR schedule", "step", "lr")
    lr.add_xy("lr", steps, 1e-3 * np.minimum(1.0, steps / 20.0) * np.cos(steps / 200.0 * np.pi / 2.0))
    lr.set_line_width(1.0)
    return grid


def main() -> None:
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)
    grid = build_grid()
    for path, ok in (
        (out_dir / "training_grid.png", grid.save_png(out_dir / "training_grid.png")),
        (out_dir / "training_grid.svg", grid.save_svg(out_dir / "training_grid.svg")),
    ):
        print(f"{'wrote' if ok else 'failed'} {path}")


if __name__ == "__main__":
    main()
