"""Plot utilities for persisted generation metrics."""

from __future__ import annotations

import math
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from genesim.data.logger import SimulationLogger  # noqa: E402


def _column(rows: list[dict], name: str) -> list[float]:
    # NULL metrics (non-numeric fitness) leave a gap in the curve.
    return [math.nan if row[name] is None else float(row[name]) for row in rows]


def plot_experiment(db_path: str | Path, experiment_id: str, output_path: str | Path) -> Path:
    """Render best/average fitness and step-time curves for one experiment."""
    with SimulationLogger(db_path) as logger:
        rows = logger.fetch_metrics(experiment_id)
    if not rows:
        raise ValueError(f"No metrics recorded for experiment '{experiment_id}'")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    generations = [int(row["generation_index"]) for row in rows]
    best_fitness = _column(rows, "best_fitness")
    average_fitness = _column(rows, "average_fitness")
    step_time = [value * 1000.0 for value in _column(rows, "step_time")]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(8, 6), sharex=True)
    ax1.plot(generations, best_fitness, label="best_fitness")
    ax1.plot(generations, average_fitness, label="average_fitness")
    ax1.set_ylabel("fitness")
    ax1.legend()

    ax2.plot(generations, step_time, label="step_time", color="tab:green")
    ax2.set_ylabel("step time (ms)")
    ax2.set_xlabel("generation")
    ax2.legend()

    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    return output
