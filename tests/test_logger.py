"""SQLite metrics logging tests."""

from __future__ import annotations

from pathlib import Path

from genesim.configs.loader import validate_config
from genesim.data.logger import SimulationLogger
from genesim.engine.builder import SimulationBuilder
from genesim.engine.termination import GenerationLimit
from genesim.genetic.genotype import BooleanDomain, VectorGenotypeFactory
from genesim.main import build_components
from genesim.operators.crossover import SinglePointCrossBreeder
from genesim.operators.mutation import RandomValueMutator
from genesim.operators.selection import RouletteWheelSelector
from genesim.problems import count_true


def test_metrics_round_trip_in_generation_order(tmp_path: Path) -> None:
    with SimulationLogger(tmp_path / "metrics.db") as logger:
        experiment_id = logger.start_experiment(config={"genotype": "boolean"}, seed=3)
        logger.log_metrics(experiment_id, 2, {"best_fitness": 4.0, "average_fitness": 2.5, "step_time": 0.01, "processing_time": 0.03})
        logger.log_metrics(experiment_id, 1, {"best_fitness": 3.0, "average_fitness": 2.0, "step_time": 0.02, "processing_time": 0.02})

        rows = logger.fetch_metrics(experiment_id)

    assert [row["generation_index"] for row in rows] == [1, 2]
    assert rows[1]["best_fitness"] == 4.0
    assert rows[0]["processing_time"] == 0.02


def test_experiment_metadata_records_seed_and_config(tmp_path: Path) -> None:
    with SimulationLogger(tmp_path / "metrics.db") as logger:
        first = logger.start_experiment(config={"population_size": 5}, seed=1)
        second = logger.start_experiment(config={"population_size": 5}, seed=2, metadata={"note": "rerun"})
        record = logger.fetch_experiment(second)

        assert first != second
        assert logger.latest_experiment_id() == second
        assert logger.fetch_experiment("unknown") is None

    assert record is not None
    assert record["seed"] == 2
    assert record["config"] == {"population_size": 5}
    assert record["runtime"]["note"] == "rerun"


def test_empty_database_has_no_latest_experiment(tmp_path: Path) -> None:
    with SimulationLogger(tmp_path / "metrics.db") as logger:
        assert logger.latest_experiment_id() is None
        assert logger.fetch_metrics("unknown") == []


def test_simulator_logs_one_row_per_generation(tmp_path: Path) -> None:
    domain = BooleanDomain()
    with SimulationLogger(tmp_path / "metrics.db") as logger:
        sim = (
            SimulationBuilder()
            .with_genotype(VectorGenotypeFactory(domain, 8))
            .with_population_size(10)
            .with_selection(RouletteWheelSelector())
            .with_crossover(SinglePointCrossBreeder())
            .with_mutation(RandomValueMutator(domain, 0.1))
            .with_fitness(count_true)
            .until(GenerationLimit(6))
            .with_seed(21)
            .with_logger(logger, {"genotype": "boolean"})
            .build()
        )
        sim.run()
        rows = logger.fetch_metrics(sim.experiment_id)

    assert [row["generation_index"] for row in rows] == [1, 2, 3, 4, 5, 6]
    assert [row["best_fitness"] for row in rows] == [float(step.best_fitness) for step in sim.history]
    assert rows[-1]["processing_time"] == sim.processing_time


def test_derived_seed_is_stored_with_experiment_config(tmp_path: Path) -> None:
    config = validate_config({"population_size": 6, "generations": 2, "mutation_rate": 0.1, "genotype": "boolean"})

    with SimulationLogger(tmp_path / "metrics.db") as logger:
        sim = build_components(config, logger)
        record = logger.fetch_experiment(sim.experiment_id)

    assert config.seed is None
    assert sim.config["seed"] == sim.seed
    assert record is not None
    assert record["seed"] == sim.seed
    assert record["config"]["seed"] == sim.seed


def test_non_numeric_fitness_statistics_are_stored_as_null(tmp_path: Path) -> None:
    with SimulationLogger(tmp_path / "metrics.db") as logger:
        experiment_id = logger.start_experiment(config={}, seed=1)
        logger.log_metrics(experiment_id, 1, {"step_time": 0.5, "processing_time": 0.5, "elapsed": 0.75})
        rows = logger.fetch_metrics(experiment_id)

    assert rows == [
        {
            "generation_index": 1,
            "best_fitness": None,
            "average_fitness": None,
            "step_time": 0.5,
            "processing_time": 0.5,
            "elapsed": 0.75,
        }
    ]
