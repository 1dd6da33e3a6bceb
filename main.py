from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from gridplot import DEFAULT_CONFIG, Plot, RenderConfig, SubplotGrid, load_render_config
from gridplot.errors import PlotError


LOGGER = logging.getLogger("gridplot.cli")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="gridplot")
    parser.add_argument("--config", type=Path, default=None, help="TOML render config ([plot], [grid], [palette]).")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root logger level.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gallery = sub.add_parser("gallery", help="Render the demo chart set into a directory.")
    gallery.add_argument("out_dir", type=Path)
    gallery.add_argument("--format", choices=["png", "svg"], default="png")
    gallery.add_argument("--seed", type=int, default=7)

    hist = sub.add_parser("histogram", help="Bin a whitespace-separated numbers file into a histogram chart.")
    hist.add_argument("input", type=Path)
    hist.add_argument("output", type=Path)
    hist.add_argument("--bins", type=int, default=0, help="Bin count; 0 picks one with Sturges' rule.")
    hist.add_argument("--cumulative", action="store_true")
    hist.add_argument("--title", default="")
    hist.add_argument("--xlabel", default="Value")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_render_config(args.config) if args.config is not None else DEFAULT_CONFIG
        if args.command == "gallery":
            written = render_gallery(args.out_dir, fmt=args.format, seed=args.seed, config=config)
            for path in written:
                print(path)
            return 0
        if args.command == "histogram":
            ok = render_histogram_file(
                args.input,
                args.output,
                bins=args.bins,
                cumulative=args.cumulative,
                title=args.title,
                xlabel=args.xlabel,
                config=config,
            )
            if ok:
                print(args.output)
            return 0 if ok else 1
    except (PlotError, OSError) as exc:
        LOGGER.error("%s", exc)
        return 2
    raise RuntimeError(f"unsupported command: {args.command}")


def render_gallery(out_dir: Path, *, fmt: str = "png", seed: int = 7, config: RenderConfig = DEFAULT_CONFIG) -> list[Path]:
    """Render one chart per kind plus a 2x2 grid of all of them."""
    out_dir.mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(seed)
    charts = {
        "scatter_clusters": _cluster_chart(Plot("scatter", config=config.plot, palette=config.palette), rng),
        "line_series": _line_chart(Plot("line", config=config.plot, palette=config.palette)),
        "histogram_continuous": _continuous_chart(Plot("histogram", config=config.plot, palette=config.palette), rng),
        "histogram_discrete": _discrete_chart(Plot("histogram", config=config.plot, palette=config.palette)),
    }

    grid = SubplotGrid(2, 2, config=config)
    grid.set_main_title("gridplot gallery")
    _cluster_chart(grid.subplot(0, 0, "scatter"), np.random.default_rng(seed))
    _line_chart(grid.subplot(0, 1, "line"))
    _continuous_chart(grid.subplot(1, 0, "histogram"), np.random.default_rng(seed))
    _discrete_chart(grid.subplot(1, 1, "histogram"))

    written: list[Path] = []
    for name, plot in charts.items():
        path = out_dir / f"{name}.{fmt}"
        if _save(plot, path, fmt):
            written.append(path)
    path = out_dir / f"grid.{fmt}"
    if _save(grid, path, fmt):
        written.append(path)
    LOGGER.info("gallery wrote %d file(s) to %s", len(written), out_dir)
    return written


def render_histogram_file(
    input_path: Path,
    output_path: Path,
    *,
    bins: int = 0,
    cumulative: bool = False,
    title: str = "",
    xlabel: str = "Value",
    config: RenderConfig = DEFAULT_CONFIG,
) -> bool:
    samples = read_samples(input_path)
    plot = Plot("histogram", config=config.plot, palette=config.palette)
    plot.set_title(title or input_path.name).set_xlabel(xlabel)
    plot.add_histogram(samples, name=input_path.stem, bin_count=bins, cumulative=cumulative)
    if samples.size:
        plot.add_vertical_line(float(np.mean(samples)), label=f"Mean = {np.mean(samples):.2f}")
    fmt = "svg" if output_path.suffix.lower() == ".svg" else "png"
    return _save(plot, output_path, fmt)


def read_samples(path: Path) -> np.ndarray:
    text = path.read_text(encoding="utf-8")
    values: list[float] = []
    for token in text.split():
        try:
            values.append(float(token))
        except ValueError:
            LOGGER.warning("skipping non-numeric token %r in %s", token, path)
    return np.asarray(values, dtype=np.float64)


def _save(target: Plot | SubplotGrid, path: Path, fmt: str) -> bool:
    return target.save_svg(path) if fmt == "svg" else target.save_png(path)


def _cluster_chart(plot: Plot, rng: np.random.Generator) -> Plot:
    centers = np.asarray([[2.0, 2.0], [7.0, 3.0], [4.5, 7.5]])
    xs, ys, labels = [], [], []
    for label, (cx, cy) in enumerate(centers):
        xs.append(rng.normal(cx, 0.6, 40))
        ys.append(rng.normal(cy, 0.6, 40))
        labels.append(np.full(40, label))
    xs.append(rng.uniform(0.0, 9.0, 8))
    ys.append(rng.uniform(0.0, 9.0, 8))
    labels.append(np.full(8, -1))
    plot.set_labels("Clustered points", "x", "y")
    plot.add_clusters("blobs", np.concatenate(xs), np.concatenate(ys), np.concatenate(labels))
    plot.add_horizontal_line(5.0)
    return plot


def _line_chart(plot: Plot) -> Plot:
    x = np.linspace(0.0, 4.0 * np.pi, 60)
    plot.set_labels("Waves", "t", "amplitude")
    plot.add_xy("sin", x, np.sin(x))
    plot.add_xy("cos", x, np.cos(x))
    plot.set_show_markers(True)
    plot.add_vertical_line(2.0 * np.pi, label="2 pi")
    return plot


def _continuous_chart(plot: Plot, rng: np.random.Generator) -> Plot:
    samples = rng.normal(10.0, 2.5, 400)
    plot.set_title("Normal samples").set_xlabel("value")
    plot.add_histogram(samples, name="N(10, 2.5)")
    plot.add_vertical_line(10.0, label="Mean")
    return plot


def _discrete_chart(plot: Plot) -> Plot:
    plot.set_title("Requests by method").set_xlabel("method")
    plot.add_discrete_histogram([120, 45, 30, 8], names=["GET", "POST", "PUT", "DELETE"])
    plot.add_horizontal_line(50.0, label="Budget")
    return plot


if __name__ == "__main__":
    raise SystemExit(main())
