"""End-to-end checks for the command line and plotting helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from genesim.cli.main import run_cli
from genesim.data.logger import SimulationLogger
from genesim.visualization.plotting import plot_experiment


CONFIG = """\
population_size: 10
generations: 5
mutation_rate: 0.1
genotype: boolean
genome_length: 6
seed: 3
"""


def test_cli_run_and_plot_latest_experiment(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "exp.yaml"
    config.write_text(CONFIG, encoding="utf-8")
    db_path = tmp_path / "metrics.db"
    out_path = tmp_path / "plots" / "curves.png"

    assert run_cli(["run", "--config", str(config), "--db", str(db_path)]) == 0
    experiment_id = capsys.readouterr().out.strip()

    with SimulationLogger(db_path) as logger:
        rows = logger.fetch_metrics(experiment_id)
    assert 1 <= len(rows) <= 5

    assert run_cli(["plot", "--db", str(db_path), "--out", str(out_path)]) == 0
    assert capsys.readouterr().out.strip() == str(out_path)
    assert out_path.exists()
    assert out_path.stat().st_size > 0


def test_cli_batch_runs_every_experiment(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "batch.yaml"
    config.write_text(
        "experiments:\n"
        "  - {population_size: 8, generations: 3, mutation_rate: 0.1, genotype: boolean, seed: 1}\n"
        "  - {population_size: 8, generations: 3, mutation_rate: 0.1, genotype: permutation,"
        " genome_length: 5, seed: 2, mutation: inversion}\n",
        encoding="utf-8",
    )

    assert run_cli(["batch", "--config", str(config), "--db", str(tmp_path / "metrics.db")]) == 0

    experiment_ids = capsys.readouterr().out.split()
    assert len(experiment_ids) == 2
    assert len(set(experiment_ids)) == 2


def test_plot_without_metrics_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No metrics"):
        plot_experiment(tmp_path / "metrics.db", "missing", tmp_path / "out.png")


def test_plot_on_empty_database_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        run_cli(["plot", "--db", str(tmp_path / "metrics.db"), "--out", str(tmp_path / "out.png")])
