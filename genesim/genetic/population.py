"""Individuals, populations and population-level statistics."""

from __future__ import annotations

import numbers
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from genesim.core.errors import ConfigurationError, SimulationError
from genesim.core.random_source import RandomSource
from genesim.genetic.genotype import Genotype, GenotypeFactory


FitnessFunction = Callable[[Genotype], Any]


@dataclass(frozen=True)
class Individual:
    """A genotype paired with its fitness, ``None`` until evaluated."""

    genotype: Genotype
    fitness: Any = None

    @property
    def evaluated(self) -> bool:
        return self.fitness is not None

    def with_fitness(self, fitness: Any) -> "Individual":
        return Individual(genotype=self.genotype, fitness=fitness)


class Population(Sequence[Individual]):
    """Ordered, immutable, non-empty collection of individuals."""

    __slots__ = ("_individuals",)

    def __init__(self, individuals: Sequence[Individual]) -> None:
        members = tuple(individuals)
        if not members:
            raise SimulationError("Population must never be empty.")
        self._individuals = members

    def __getitem__(self, index):  # type: ignore[override]
        if isinstance(index, slice):
            return self._individuals[index]
        return self._individuals[index]

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._individuals)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Population):
            return NotImplemented
        return self._individuals == other._individuals

    def __hash__(self) -> int:
        return hash(self._individuals)

    def __repr__(self) -> str:
        return f"Population(size={len(self)})"

    @property
    def genotypes(self) -> list[Genotype]:
        return [individual.genotype for individual in self._individuals]

    @property
    def fitness_values(self) -> list[Any]:
        return [individual.fitness for individual in self._individuals]

    @property
    def is_evaluated(self) -> bool:
        return all(individual.evaluated for individual in self._individuals)


def generate_initial(
    size: int,
    genotype_factory: GenotypeFactory,
    rng: RandomSource,
    fitness_fn: FitnessFunction | None = None,
) -> Population:
    """Sample ``size`` fresh individuals from ``genotype_factory``.

    Args:
        size: Number of individuals, must be positive.
        genotype_factory: Source of random genotypes.
        rng: Random source used for sampling.
        fitness_fn: When given, the new population is evaluated immediately.

    Returns:
        The initial population, in sampling order.
    """
    if size <= 0:
        raise ConfigurationError(f"Population size must be > 0, got {size}")
    population = Population([Individual(genotype_factory.create(rng)) for _ in range(size)])
    if fitness_fn is not None:
        population = evaluate(population, fitness_fn)
    return population


def evaluate(
    population: Population,
    fitness_fn: FitnessFunction,
    executor: Executor | None = None,
) -> Population:
    """Return a population where every unset fitness has been computed.

    Individuals that already carry a fitness are kept as they are. With an
    ``executor`` the pending evaluations are mapped across its workers; results
    are placed back by index so ordering never depends on scheduling.
    """
    pending = [index for index, individual in enumerate(population) if not individual.evaluated]
    if not pending:
        return population

    genotypes = [population[index].genotype for index in pending]
    if executor is None:
        scores = [fitness_fn(genotype) for genotype in genotypes]
    else:
        scores = list(executor.map(fitness_fn, genotypes))

    members = list(population)
    for index, score in zip(pending, scores):
        if score is None:
            raise SimulationError(f"Fitness function returned None for individual {index}")
        members[index] = members[index].with_fitness(score)
    return Population(members)


def best(population: Population) -> Individual:
    """Return the fittest individual; ties go to the first occurrence."""
    _require_evaluated(population)
    winner = population[0]
    for individual in population[1:]:
        if individual.fitness > winner.fitness:
            winner = individual
    return winner


def average_fitness(population: Population) -> float | None:
    """Return the arithmetic mean fitness of ``population``.

    Ordered but non-numeric fitness values (tuples, for instance) have no
    mean; ``None`` is returned for them.
    """
    _require_evaluated(population)
    values = population.fitness_values
    if not all(is_numeric(value) for value in values):
        return None
    return float(sum(values)) / len(population)


def is_numeric(value: Any) -> bool:
    return isinstance(value, numbers.Real)


def ranked(population: Population) -> list[Individual]:
    """Individuals ordered from fittest to least fit, stable on ties."""
    _require_evaluated(population)
    return sorted(population, key=lambda individual: individual.fitness, reverse=True)


def _require_evaluated(population: Population) -> None:
    if not population.is_evaluated:
        raise SimulationError("Population contains individuals without fitness.")
