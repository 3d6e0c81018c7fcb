"""Command-line entry points for running, batching, and plotting simulations."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from genesim.configs.loader import ConfigLoader, ExperimentConfig
from genesim.data.logger import SimulationLogger
from genesim.main import build_components
from genesim.visualization.plotting import plot_experiment


LOGGER = logging.getLogger(__name__)


def _run_single(config: ExperimentConfig, db_path: Path) -> str:
    with SimulationLogger(db_path) as logger:
        simulator = build_components(config=config, logger=logger)
        result = simulator.run()
        experiment_id = simulator.experiment_id
    if experiment_id is None:
        raise RuntimeError("Expected experiment id when logger is configured.")
    LOGGER.info(
        "Experiment %s finished at generation %d: best=%s (%s), processing_time=%.3fs",
        experiment_id,
        result.generation,
        result.best_fitness,
        result.stop_reason,
        result.processing_time,
    )
    return experiment_id


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="genesim")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="run one experiment until termination")
    run_cmd.add_argument("--config", default="configs/onemax.yaml")
    run_cmd.add_argument("--db", default="simulation_metrics.db")

    batch_cmd = sub.add_parser("batch", help="run every experiment of a batch file")
    batch_cmd.add_argument("--config", default="configs/batch.yaml")
    batch_cmd.add_argument("--db", default="simulation_metrics.db")

    plot_cmd = sub.add_parser("plot", help="plot fitness curves of a logged experiment")
    plot_cmd.add_argument("--experiment")
    plot_cmd.add_argument("--db", default="simulation_metrics.db")
    plot_cmd.add_argument("--out", default="artifacts/metrics.png")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "run":
        config = ConfigLoader.load(args.config)
        print(_run_single(config, Path(args.db)))
        return 0

    if args.command == "batch":
        for config in ConfigLoader.load_many(args.config):
            print(_run_single(config, Path(args.db)))
        return 0

    if args.command == "plot":
        experiment_id = args.experiment
        if experiment_id is None:
            with SimulationLogger(args.db) as logger:
                experiment_id = logger.latest_experiment_id()
            if experiment_id is None:
                parser.error(f"no experiments logged in {args.db}")
        print(plot_experiment(args.db, experiment_id, args.out))
        return 0

    return 1


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
