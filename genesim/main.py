"""Assemble and run a simulation described by an experiment config."""

from __future__ import annotations

from pathlib import Path

from genesim import problems
from genesim.configs.loader import ConfigLoader, ExperimentConfig
from genesim.data.logger import SimulationLogger
from genesim.engine.builder import SimulationBuilder
from genesim.engine.component_registry import (
    create_crossover,
    create_genotype_factory,
    create_mutation,
    create_selection,
    get_fitness_function,
)
from genesim.engine.simulator import Simulator
from genesim.engine.termination import AnyOf, FitnessLimit, GenerationLimit, Termination


def _termination(config: ExperimentConfig, fitness_name: str, genome_length: int) -> Termination:
    """Generation limit, optionally combined with a fitness target."""
    limit = GenerationLimit(config.generations)
    target = config.get("fitness_target")
    if target is None:
        return limit
    if target == "max":
        target = problems.max_fitness(fitness_name, genome_length)
    return AnyOf(limit, FitnessLimit(float(target)))


def build_components(config: ExperimentConfig, logger: SimulationLogger | None = None) -> Simulator:
    """Build a simulator from experiment configuration."""
    genotype_factory = create_genotype_factory(config.genotype, config)
    permutation = genotype_factory.is_permutation

    fitness_name = str(config.get("fitness", "ordered_pairs" if permutation else "count_true"))
    crossover_name = str(config.get("crossover", "order_one" if permutation else "uniform"))
    mutation_name = str(config.get("mutation", "swap" if permutation else "random_value"))
    selection_name = str(config.get("selection", "tournament"))

    return (
        SimulationBuilder()
        .with_genotype(genotype_factory)
        .with_population_size(config.population_size)
        .with_selection(create_selection(selection_name, config))
        .with_crossover(create_crossover(crossover_name, config))
        .with_mutation(create_mutation(mutation_name, config, genotype_factory))
        .with_fitness(get_fitness_function(fitness_name))
        .until(_termination(config, fitness_name, genotype_factory.length))
        .with_elitism(int(config.get("elitism", 0)))
        .with_seed(config.seed)
        .with_logger(logger, config.to_dict())
        .build()
    )


def main(config_path: str = "configs/onemax.yaml") -> None:
    """Load config, build components, and run the simulator to termination."""
    config = ConfigLoader.load(config_path)
    with SimulationLogger(Path("simulation_metrics.db")) as logger:
        simulator = build_components(config=config, logger=logger)
        simulator.run()


if __name__ == "__main__":
    main()
