"""Mutation operators for value-encoded and permutation genotypes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from genesim.core.errors import ConfigurationError
from genesim.core.random_source import RandomSource
from genesim.genetic.genotype import Genotype, ValueDomain


def _check_rate(rate: float) -> float:
    rate = float(rate)
    if not 0.0 <= rate <= 1.0:
        raise ConfigurationError(f"Mutation rate must be in [0.0, 1.0], got {rate}")
    return rate


class MutationOperator(ABC):
    """Perturbs a genotype and returns a new one of the same shape."""

    preserves_permutation: bool = False

    def __init__(self, rate: float) -> None:
        self.rate = _check_rate(rate)

    @abstractmethod
    def mutate(self, genotype: Genotype, rng: RandomSource) -> Genotype:
        """Create a mutated copy of ``genotype``.

        Invariants:
            - Must not modify ``genotype``.
            - Output length equals input length.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rate={self.rate})"


class RandomValueMutator(MutationOperator):
    """Replace each gene with probability ``rate`` by a different domain value.

    Not valid for permutations: independent re-sampling breaks uniqueness.
    """

    def __init__(self, domain: ValueDomain, rate: float) -> None:
        super().__init__(rate)
        self.domain = domain

    def mutate(self, genotype: Genotype, rng: RandomSource) -> Genotype:
        if self.rate == 0.0:
            return tuple(genotype)
        genes: list[Any] = list(genotype)
        for locus, value in enumerate(genes):
            if rng.random() < self.rate:
                genes[locus] = self.domain.sample_other(value, rng)
        return tuple(genes)


class PermutationMutationOperator(MutationOperator):
    """Whole-genome mutations that only reorder genes."""

    preserves_permutation = True


class SwapMutator(PermutationMutationOperator):
    """Each position swaps with another random position with probability ``rate``."""

    def mutate(self, genotype: Genotype, rng: RandomSource) -> Genotype:
        genes = list(genotype)
        length = len(genes)
        if self.rate == 0.0 or length < 2:
            return tuple(genes)
        for locus in range(length):
            if rng.random() < self.rate:
                other = rng.randrange(length - 1)
                if other >= locus:
                    other += 1
                genes[locus], genes[other] = genes[other], genes[locus]
        return tuple(genes)


class InversionMutator(PermutationMutationOperator):
    """With probability ``rate`` reverse one random sub-range of the genome."""

    def mutate(self, genotype: Genotype, rng: RandomSource) -> Genotype:
        genes = list(genotype)
        length = len(genes)
        if length < 2 or rng.random() >= self.rate:
            return tuple(genes)
        start = rng.randrange(length - 1)
        end = rng.randrange(start + 2, length + 1)
        genes[start:end] = reversed(genes[start:end])
        return tuple(genes)
