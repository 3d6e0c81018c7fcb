"""Gene value domains and genotype factories."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, Hashable, Sequence

from genesim.core.errors import ConfigurationError, ShapeError
from genesim.core.random_source import RandomSource


Genotype = tuple[Any, ...]


class ValueDomain(ABC):
    """Value space of a single gene.

    Implementations enforce their bounds once at construction; sampling never
    performs runtime range checks.
    """

    @property
    @abstractmethod
    def size(self) -> float:
        """Number of distinct values, ``math.inf`` for continuous domains."""

    @abstractmethod
    def sample(self, rng: RandomSource) -> Any:
        """Draw one value uniformly at random.

        Args:
            rng (RandomSource): Source of randomness.

        Returns:
            Any: A valid gene value.

        Invariants:
            - Deterministic for a deterministic ``rng``.
        """

    @abstractmethod
    def sample_other(self, value: Any, rng: RandomSource) -> Any:
        """Draw a value uniformly from the domain excluding ``value``.

        Returns ``value`` itself when the domain holds a single value.
        """

    @abstractmethod
    def contains(self, value: Any) -> bool:
        """Return whether ``value`` belongs to the domain."""


class BooleanDomain(ValueDomain):
    """Genes that are ``True`` or ``False``."""

    @property
    def size(self) -> float:
        return 2

    def sample(self, rng: RandomSource) -> bool:
        return rng.random() < 0.5

    def sample_other(self, value: Any, rng: RandomSource) -> bool:
        return not value

    def contains(self, value: Any) -> bool:
        return isinstance(value, bool)

    def __repr__(self) -> str:
        return "BooleanDomain()"


@dataclass(frozen=True)
class IntegerDomain(ValueDomain):
    """Integers in the inclusive range ``[low, high]``."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ConfigurationError(f"IntegerDomain requires low <= high, got [{self.low}, {self.high}]")

    @property
    def size(self) -> float:
        return self.high - self.low + 1

    def sample(self, rng: RandomSource) -> int:
        return rng.randrange(self.low, self.high + 1)

    def sample_other(self, value: Any, rng: RandomSource) -> int:
        if self.low == self.high:
            return self.low
        # Draw from the domain minus one slot and step over ``value``.
        drawn = rng.randrange(self.low, self.high)
        return drawn + 1 if drawn >= value else drawn

    def contains(self, value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and self.low <= value <= self.high


@dataclass(frozen=True)
class RealDomain(ValueDomain):
    """Floats drawn uniformly from ``[low, high]``."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.low) and math.isfinite(self.high)) or self.low > self.high:
            raise ConfigurationError(f"RealDomain requires finite low <= high, got [{self.low}, {self.high}]")

    @property
    def size(self) -> float:
        return 1 if self.low == self.high else math.inf

    def sample(self, rng: RandomSource) -> float:
        return rng.uniform(self.low, self.high)

    def sample_other(self, value: Any, rng: RandomSource) -> float:
        if self.low == self.high:
            return self.low
        drawn = rng.uniform(self.low, self.high)
        while drawn == value:
            drawn = rng.uniform(self.low, self.high)
        return drawn

    def contains(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and self.low <= value <= self.high


class ChoiceDomain(ValueDomain):
    """Genes drawn from a fixed, ordered set of designated values."""

    def __init__(self, values: Sequence[Hashable]) -> None:
        try:
            unique = tuple(dict.fromkeys(values))
        except TypeError as exc:
            raise ConfigurationError(f"ChoiceDomain values must be hashable: {exc}") from exc
        if not unique:
            raise ConfigurationError("ChoiceDomain requires at least one value")
        self.values = unique
        self._index = {value: index for index, value in enumerate(unique)}

    @property
    def size(self) -> float:
        return len(self.values)

    def sample(self, rng: RandomSource) -> Any:
        return self.values[rng.randrange(len(self.values))]

    def sample_other(self, value: Any, rng: RandomSource) -> Any:
        if len(self.values) == 1:
            return self.values[0]
        current = self._index.get(value)
        if current is None:
            return self.sample(rng)
        drawn = rng.randrange(len(self.values) - 1)
        return self.values[drawn + 1 if drawn >= current else drawn]

    def contains(self, value: Any) -> bool:
        return value in self._index

    def __repr__(self) -> str:
        return f"ChoiceDomain({list(self.values)!r})"


class GenotypeFactory(ABC):
    """Creates and validates genotypes of one fixed shape."""

    is_permutation: bool = False

    @property
    @abstractmethod
    def length(self) -> int:
        """Number of genes in every genotype of this factory."""

    @abstractmethod
    def create(self, rng: RandomSource) -> Genotype:
        """Sample a fresh genotype uniformly at random."""

    @abstractmethod
    def validate(self, genotype: Sequence[Any]) -> Genotype:
        """Return ``genotype`` as a tuple or raise ``ShapeError``."""


class VectorGenotypeFactory(GenotypeFactory):
    """Fixed-length vectors of independently meaningful genes."""

    def __init__(self, domain: ValueDomain, length: int) -> None:
        if length <= 0:
            raise ConfigurationError(f"Genotype length must be > 0, got {length}")
        self.domain = domain
        self._length = int(length)

    @property
    def length(self) -> int:
        return self._length

    def create(self, rng: RandomSource) -> Genotype:
        return tuple(self.domain.sample(rng) for _ in range(self._length))

    def validate(self, genotype: Sequence[Any]) -> Genotype:
        if len(genotype) != self._length:
            raise ShapeError(f"Expected genotype of length {self._length}, got {len(genotype)}")
        for locus, value in enumerate(genotype):
            if not self.domain.contains(value):
                raise ShapeError(f"Gene {value!r} at locus {locus} is outside {self.domain!r}")
        return tuple(genotype)


class PermutationGenotypeFactory(GenotypeFactory):
    """Permutations of a fixed set of distinct elements."""

    is_permutation = True

    def __init__(self, elements: Sequence[Hashable]) -> None:
        items = tuple(elements)
        if not items:
            raise ConfigurationError("PermutationGenotypeFactory requires at least one element")
        if len(set(items)) != len(items):
            raise ConfigurationError("Permutation elements must be distinct")
        self.elements = items

    @classmethod
    def of_size(cls, size: int) -> "PermutationGenotypeFactory":
        return cls(range(size))

    @property
    def length(self) -> int:
        return len(self.elements)

    def create(self, rng: RandomSource) -> Genotype:
        genes = list(self.elements)
        rng.shuffle(genes)
        return tuple(genes)

    def validate(self, genotype: Sequence[Any]) -> Genotype:
        if not is_permutation_of(genotype, self.elements):
            raise ShapeError(f"Genotype {tuple(genotype)!r} is not a permutation of the configured elements")
        return tuple(genotype)


def is_permutation_of(candidate: Sequence[Any], reference: Sequence[Any]) -> bool:
    """Return whether ``candidate`` holds exactly the elements of ``reference``."""
    return len(candidate) == len(reference) and Counter(candidate) == Counter(reference)
