"""Toy fitness functions used by the command line and the test-suite."""

from __future__ import annotations

from typing import Any, Sequence

from genesim.core.errors import ConfigurationError


def count_true(genotype: Sequence[Any]) -> int:
    """Number of truthy genes (OneMax for boolean genotypes)."""
    return sum(1 for gene in genotype if gene)


def ordered_pairs(genotype: Sequence[Any]) -> int:
    """Number of adjacent gene pairs in ascending order; ``len - 1`` when sorted."""
    return sum(1 for left, right in zip(genotype, genotype[1:]) if left < right)


def max_fitness(name: str, length: int) -> int:
    """Best reachable score of the named toy problem for genomes of ``length``."""
    if name == "count_true":
        return length
    if name == "ordered_pairs":
        return max(0, length - 1)
    raise ConfigurationError(f"No known maximum fitness for '{name}'")
