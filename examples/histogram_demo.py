from __future__ import annotations

from pathlib import Path

import numpy as np

from gridplot import Plot


def build_continuous(seed: int = 11) -> Plot:
    rng = np.random.default_rng(seed)
    latencies = rng.gamma(shape=2.0, scale=12.0, size=500)
    plot = Plot("histogram")
    plot.set_title("Request latency").set_xlabel("ms")
    plot.add_histogram(latencies, name="latency", color="cyan")
    plot.add_vertical_line(float(np.percentile(latencies, 50)), label="p50")
    plot.add_vertical_line(float(np.percentile(latencies, 95)), label="p95", color="darkred")
    return plot


def build_cumulative(seed: int = 11) -> Plot:
    rng = np.random.default_rng(seed)
    plot = Plot("histogram")
    plot.set_title("Cumulative latency").set_xlabel("ms").set_ylabel("Requests")
    plot.add_histogram(rng.gamma(shape=2.0, scale=12.0, size=500), name="latency", bin_count=30, cumulative=True)
    plot.add_horizontal_line(250.0, label="Half")
    return plot


def build_discrete() -> Plot:
    plot = Plot("histogram")
    plot.set_title("HTTP status codes").set_xlabel("status")
    plot.add_discrete_histogram(
        [912, 64, 17, 5],
        names=["2xx", "3xx", "4xx", "5xx"],
        colors=["green", "blue", "orange", "red"],
    )
    return plot


def main() -> None:
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, plot in (
        ("latency", build_continuous()),
        ("latency_cumulative", build_cumulative()),
        ("status_codes", build_discrete()),
    ):
        path = out_dir / f"{name}.png"
        print(f"{'wrote' if plot.save_png(path) else 'failed'} {path}")


if __name__ == "__main__":
    main()
