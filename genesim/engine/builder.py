"""Fluent assembly of a reproducible simulation run."""

from __future__ import annotations

import logging
import random
from concurrent.futures import Executor
from typing import Any, Mapping

from genesim.core.deterministic_rng import DeterministicRNG
from genesim.core.errors import ConfigurationError
from genesim.core.random_source import RandomSourceFactory, random_seed
from genesim.data.logger import SimulationLogger
from genesim.engine.simulator import Simulator
from genesim.engine.termination import Termination
from genesim.genetic.genotype import GenotypeFactory
from genesim.genetic.population import FitnessFunction, generate_initial
from genesim.operators.crossover import CrossoverOperator
from genesim.operators.mutation import MutationOperator
from genesim.operators.selection import SelectionOperator


LOGGER = logging.getLogger(__name__)


class SimulationBuilder:
    """Collects run parts and produces an ``INITIALIZED`` simulator.

    Every ``with_*`` method returns the builder so calls can be chained::

        simulator = (
            SimulationBuilder()
            .with_genotype(VectorGenotypeFactory(BooleanDomain(), 10))
            .with_population_size(20)
            .with_selection(TournamentSelector(3))
            .with_crossover(UniformCrossBreeder())
            .with_mutation(RandomValueMutator(BooleanDomain(), 0.05))
            .with_fitness(count_true)
            .until(AnyOf(GenerationLimit(100), FitnessLimit(10)))
            .with_seed(42)
            .build()
        )
    """

    def __init__(self) -> None:
        self.genotype_factory: GenotypeFactory | None = None
        self.population_size: int | None = None
        self.selection: SelectionOperator | None = None
        self.crossover: CrossoverOperator | None = None
        self.mutation: MutationOperator | None = None
        self.fitness_fn: FitnessFunction | None = None
        self.termination: Termination | None = None
        self.seed: int | None = None
        self.random_source_factory: RandomSourceFactory = random.Random
        self.elitism = 0
        self.executor: Executor | None = None
        self.logger: SimulationLogger | None = None
        self.config: dict[str, Any] = {}

    def with_genotype(self, factory: GenotypeFactory) -> "SimulationBuilder":
        self.genotype_factory = factory
        return self

    def with_population_size(self, size: int) -> "SimulationBuilder":
        self.population_size = int(size)
        return self

    def with_selection(self, selection: SelectionOperator) -> "SimulationBuilder":
        self.selection = selection
        return self

    def with_crossover(self, crossover: CrossoverOperator) -> "SimulationBuilder":
        self.crossover = crossover
        return self

    def with_mutation(self, mutation: MutationOperator) -> "SimulationBuilder":
        self.mutation = mutation
        return self

    def with_fitness(self, fitness_fn: FitnessFunction) -> "SimulationBuilder":
        self.fitness_fn = fitness_fn
        return self

    def until(self, termination: Termination) -> "SimulationBuilder":
        self.termination = termination
        return self

    def with_seed(self, seed: int | None) -> "SimulationBuilder":
        """Pin the seed; ``None`` asks for a process-derived one at build time."""
        self.seed = None if seed is None else int(seed)
        return self

    def with_random_source(self, factory: RandomSourceFactory) -> "SimulationBuilder":
        """Use ``factory(seed)`` to create each random stream."""
        self.random_source_factory = factory
        return self

    def with_elitism(self, count: int) -> "SimulationBuilder":
        self.elitism = int(count)
        return self

    def with_executor(self, executor: Executor | None) -> "SimulationBuilder":
        self.executor = executor
        return self

    def with_logger(self, logger: SimulationLogger | None, config: Mapping[str, Any] | None = None) -> "SimulationBuilder":
        self.logger = logger
        self.config = dict(config or {})
        return self

    def validate(self) -> None:
        """Raise ``ConfigurationError`` when the collected parts cannot run."""
        missing = [
            name
            for name, value in (
                ("genotype", self.genotype_factory),
                ("population_size", self.population_size),
                ("selection", self.selection),
                ("crossover", self.crossover),
                ("mutation", self.mutation),
                ("fitness", self.fitness_fn),
                ("termination", self.termination),
            )
            if value is None
        ]
        if missing:
            raise ConfigurationError(f"Missing simulation parts: {', '.join(missing)}")
        size = int(self.population_size or 0)
        if size <= 0:
            raise ConfigurationError(f"population_size must be > 0, got {size}")
        if not 0 <= self.elitism < size:
            raise ConfigurationError(f"elitism must be in [0, {size}), got {self.elitism}")
        if self.genotype_factory.is_permutation:  # type: ignore[union-attr]
            if not self.crossover.preserves_permutation:  # type: ignore[union-attr]
                raise ConfigurationError(
                    f"{type(self.crossover).__name__} does not preserve permutations; "
                    "use OrderOneCrossover or PartiallyMappedCrossover"
                )
            if not self.mutation.preserves_permutation:  # type: ignore[union-attr]
                raise ConfigurationError(
                    f"{type(self.mutation).__name__} does not preserve permutations; "
                    "use SwapMutator or InversionMutator"
                )

    def build(self) -> Simulator:
        """Validate, sample generation 0 and return an ``INITIALIZED`` simulator."""
        self.validate()
        seed = self.seed if self.seed is not None else random_seed()
        rng = DeterministicRNG(seed, factory=self.random_source_factory)
        population = generate_initial(
            self.population_size,  # type: ignore[arg-type]
            self.genotype_factory,  # type: ignore[arg-type]
            rng.stream("population"),
        )
        LOGGER.info("Built simulation with seed=%d population_size=%d", seed, len(population))
        config = {**self.config, "seed": seed, "population_size": self.population_size}
        return Simulator(
            genotype_factory=self.genotype_factory,  # type: ignore[arg-type]
            population=population,
            fitness_fn=self.fitness_fn,  # type: ignore[arg-type]
            selection=self.selection,  # type: ignore[arg-type]
            crossover=self.crossover,  # type: ignore[arg-type]
            mutation=self.mutation,  # type: ignore[arg-type]
            termination=self.termination,  # type: ignore[arg-type]
            rng=rng,
            elitism=self.elitism,
            executor=self.executor,
            logger=self.logger,
            config=config,
        )
