"""Parent selection strategies."""

from __future__ import annotations

import bisect
import itertools
from abc import ABC, abstractmethod

from genesim.core.errors import ConfigurationError
from genesim.core.random_source import RandomSource
from genesim.genetic.population import Individual, Population, ranked


class SelectionOperator(ABC):
    """Chooses parents from a population, biased towards higher fitness."""

    @abstractmethod
    def select(self, population: Population, k: int, rng: RandomSource) -> list[Individual]:
        """Return ``k`` parents drawn with replacement.

        Args:
            population (Population): Evaluated current generation.
            k (int): Number of parents requested; may exceed ``len(population)``.
            rng (RandomSource): Source of randomness.

        Returns:
            list[Individual]: Exactly ``k`` individuals, in draw order.

        Invariants:
            - Must not mutate ``population``.
            - Deterministic for a deterministic ``rng``.
        """

    @staticmethod
    def _check(population: Population, k: int) -> None:
        if len(population) == 0:
            raise ConfigurationError("Cannot select from an empty population.")
        if k < 0:
            raise ConfigurationError(f"Number of parents must be >= 0, got {k}")


class TournamentSelector(SelectionOperator):
    """Pick the fittest of ``size`` individuals sampled uniformly."""

    def __init__(self, size: int = 3) -> None:
        if size < 1:
            raise ConfigurationError(f"Tournament size must be >= 1, got {size}")
        self.size = int(size)

    def select(self, population: Population, k: int, rng: RandomSource) -> list[Individual]:
        self._check(population, k)
        parents: list[Individual] = []
        for _ in range(k):
            indices = [rng.randrange(len(population)) for _ in range(self.size)]
            # max() keeps the first maximum, so ties favour the earliest draw.
            best_index = max(indices, key=lambda i: population[i].fitness)
            parents.append(population[best_index])
        return parents


def _draw_weighted(population: Population, weights: list[float], k: int, rng: RandomSource) -> list[Individual]:
    cumulative = list(itertools.accumulate(weights))
    total = cumulative[-1]
    if total <= 0.0:
        return [population[rng.randrange(len(population))] for _ in range(k)]
    parents = []
    for _ in range(k):
        index = bisect.bisect_right(cumulative, rng.random() * total)
        parents.append(population[min(index, len(population) - 1)])
    return parents


class RouletteWheelSelector(SelectionOperator):
    """Fitness-proportional selection.

    Fitness values are shifted so the least fit individual has weight zero
    when any value is negative; equal fitness everywhere degrades to uniform
    sampling.
    """

    def select(self, population: Population, k: int, rng: RandomSource) -> list[Individual]:
        self._check(population, k)
        fitness = [float(value) for value in population.fitness_values]
        floor = min(fitness)
        if floor < 0.0:
            fitness = [value - floor for value in fitness]
        return _draw_weighted(population, fitness, k, rng)


class RankSelector(SelectionOperator):
    """Linear ranking selection with selective ``pressure`` in ``[1, 2]``."""

    def __init__(self, pressure: float = 1.5) -> None:
        if not 1.0 <= pressure <= 2.0:
            raise ConfigurationError(f"Rank selection pressure must be in [1.0, 2.0], got {pressure}")
        self.pressure = float(pressure)

    def select(self, population: Population, k: int, rng: RandomSource) -> list[Individual]:
        self._check(population, k)
        size = len(population)
        order = sorted(range(size), key=lambda i: population[i].fitness)
        weights = [0.0] * size
        for rank, index in enumerate(order):
            if size == 1:
                weights[index] = 1.0
            else:
                weights[index] = (2.0 - self.pressure) + 2.0 * (self.pressure - 1.0) * rank / (size - 1)
        return _draw_weighted(population, weights, k, rng)


class TruncationSelector(SelectionOperator):
    """Uniform sampling among the best ``ratio`` share of the population."""

    def __init__(self, ratio: float = 0.5) -> None:
        if not 0.0 < ratio <= 1.0:
            raise ConfigurationError(f"Truncation ratio must be in (0.0, 1.0], got {ratio}")
        self.ratio = float(ratio)

    def select(self, population: Population, k: int, rng: RandomSource) -> list[Individual]:
        self._check(population, k)
        pool = ranked(population)
        cutoff = max(1, int(round(len(pool) * self.ratio)))
        pool = pool[:cutoff]
        return [pool[rng.randrange(len(pool))] for _ in range(k)]
