"""Recombination operators, including permutation-preserving variants."""

from __future__ import annotations

import bisect
import itertools
from abc import ABC, abstractmethod
from typing import Any, Sequence

from genesim.core.errors import ConfigurationError, ShapeError
from genesim.core.random_source import RandomSource
from genesim.genetic.genotype import Genotype, is_permutation_of


class CrossoverOperator(ABC):
    """Produces offspring genotypes from a group of parent genotypes."""

    num_parents: int = 2
    preserves_permutation: bool = False

    @abstractmethod
    def crossover(self, parents: Sequence[Genotype], rng: RandomSource) -> list[Genotype]:
        """Recombine ``parents`` into offspring of the same shape.

        Args:
            parents (Sequence[Genotype]): Exactly ``num_parents`` genotypes of
                equal length.
            rng (RandomSource): Source of randomness.

        Returns:
            list[Genotype]: One child per parent.

        Invariants:
            - Must not mutate any parent.
            - Every child has the parents' length.
        """

    def _check_parents(self, parents: Sequence[Genotype]) -> int:
        if len(parents) != self.num_parents:
            raise ConfigurationError(
                f"{type(self).__name__} expects {self.num_parents} parents, got {len(parents)}"
            )
        lengths = {len(parent) for parent in parents}
        if len(lengths) != 1:
            raise ShapeError(f"Parents must share one length, got {sorted(lengths)}")
        return lengths.pop()


class UniformCrossBreeder(CrossoverOperator):
    """Copy each locus from a parent picked independently per locus.

    ``weights`` sets the per-parent probability; the default is uniform.
    """

    def __init__(self, weights: Sequence[float] | None = None, num_parents: int = 2) -> None:
        if weights is not None:
            num_parents = len(weights)
            if any(weight < 0.0 for weight in weights) or sum(weights) <= 0.0:
                raise ConfigurationError("Crossover weights must be non-negative with a positive sum")
        if num_parents < 2:
            raise ConfigurationError(f"UniformCrossBreeder needs at least 2 parents, got {num_parents}")
        self.num_parents = int(num_parents)
        self.weights = tuple(float(weight) for weight in weights) if weights is not None else None
        self._cumulative = list(itertools.accumulate(self.weights)) if self.weights is not None else None

    def _pick_parent(self, rng: RandomSource) -> int:
        if self._cumulative is None:
            return rng.randrange(self.num_parents)
        index = bisect.bisect_right(self._cumulative, rng.random() * self._cumulative[-1])
        return min(index, self.num_parents - 1)

    def crossover(self, parents: Sequence[Genotype], rng: RandomSource) -> list[Genotype]:
        length = self._check_parents(parents)
        offspring: list[Genotype] = []
        while len(offspring) < len(parents):
            offspring.append(tuple(parents[self._pick_parent(rng)][locus] for locus in range(length)))
        return offspring


def random_cut_points(rng: RandomSource, count: int, length: int) -> list[int]:
    """Return up to ``count`` sorted, distinct cut points in ``[1, length)``."""
    candidates = range(1, length)
    count = min(count, len(candidates))
    return sorted(rng.sample(candidates, count))


class MultiPointCrossBreeder(CrossoverOperator):
    """Splice slices between random cut points, rotating through the parents."""

    def __init__(self, num_cut_points: int = 2) -> None:
        if num_cut_points < 1:
            raise ConfigurationError(f"num_cut_points must be >= 1, got {num_cut_points}")
        self.num_cut_points = int(num_cut_points)

    def crossover(self, parents: Sequence[Genotype], rng: RandomSource) -> list[Genotype]:
        length = self._check_parents(parents)
        offspring: list[Genotype] = []
        for first in range(len(parents)):
            bounds = [0, *random_cut_points(rng, self.num_cut_points, length), length]
            genes: list[Any] = []
            for segment, (start, end) in enumerate(zip(bounds, bounds[1:])):
                genes.extend(parents[(first + segment) % len(parents)][start:end])
            offspring.append(tuple(genes))
        return offspring


class SinglePointCrossBreeder(MultiPointCrossBreeder):
    """Multi-point crossover with exactly one cut point."""

    def __init__(self) -> None:
        super().__init__(num_cut_points=1)


def random_segment(rng: RandomSource, length: int) -> tuple[int, int]:
    """Draw ``(start, end)`` with ``0 <= start < end <= length``.

    Returns ``(0, 0)`` for an empty genotype.
    """
    if length <= 0:
        return 0, 0
    start = rng.randrange(length)
    end = rng.randrange(start + 1, length + 1)
    return start, end


class PermutationCrossover(CrossoverOperator):
    """Base for operators that keep offspring valid permutations."""

    preserves_permutation = True

    def crossover(self, parents: Sequence[Genotype], rng: RandomSource) -> list[Genotype]:
        length = self._check_parents(parents)
        start, end = random_segment(rng, length)
        first, second = parents
        return [self.cross(first, second, start, end), self.cross(second, first, start, end)]

    def cross(self, first: Sequence[Any], second: Sequence[Any], start: int, end: int) -> Genotype:
        """Build one child that keeps ``first[start:end]`` in place."""
        length = len(first)
        if not 0 <= start <= end <= length:
            raise ConfigurationError(f"Invalid segment [{start}, {end}) for genotype of length {length}")
        if len(set(first)) != length or not is_permutation_of(second, first):
            raise ShapeError("Permutation crossover requires both parents to permute the same distinct elements")
        child = self._fill(first, second, start, end)
        if not is_permutation_of(child, first):
            raise ShapeError(f"{type(self).__name__} produced a non-permutation {child!r}")
        return child

    @abstractmethod
    def _fill(self, first: Sequence[Any], second: Sequence[Any], start: int, end: int) -> Genotype:
        ...


class OrderOneCrossover(PermutationCrossover):
    """Order crossover (OX1).

    The segment of the first parent is kept in place; the remaining positions,
    starting right after the segment and wrapping around, receive the second
    parent's values in its own order (also read from the segment end), skipping
    values already in the segment.
    """

    def _fill(self, first: Sequence[Any], second: Sequence[Any], start: int, end: int) -> Genotype:
        length = len(first)
        child: list[Any] = list(first)
        kept = set(first[start:end])
        positions = [(end + offset) % length for offset in range(length)]
        free_positions = [pos for pos in positions if not start <= pos < end]
        donors = [second[pos] for pos in positions if second[pos] not in kept]
        for pos, value in zip(free_positions, donors):
            child[pos] = value
        return tuple(child)


class PartiallyMappedCrossover(PermutationCrossover):
    """Partially mapped crossover (PMX).

    Positions outside the kept segment take the second parent's value; values
    that collide with the segment are resolved through the mapping
    ``first[k] -> second[k]`` of the segment positions.
    """

    def _fill(self, first: Sequence[Any], second: Sequence[Any], start: int, end: int) -> Genotype:
        child: list[Any] = list(second)
        child[start:end] = first[start:end]
        segment_index = {first[k]: k for k in range(start, end)}
        for pos in itertools.chain(range(0, start), range(end, len(first))):
            candidate = second[pos]
            hops = 0
            while candidate in segment_index:
                candidate = second[segment_index[candidate]]
                hops += 1
                if hops > len(segment_index):
                    raise ShapeError("PMX mapping did not resolve; parents are not permutations")
            child[pos] = candidate
        return tuple(child)
