"""Tests for value and permutation mutation operators."""

from __future__ import annotations

import random

import pytest

from genesim.core.errors import ConfigurationError
from genesim.genetic.genotype import BooleanDomain, IntegerDomain, RealDomain, is_permutation_of
from genesim.operators.mutation import InversionMutator, RandomValueMutator, SwapMutator


def test_zero_rate_returns_identical_genotype() -> None:
    genotype = (True, False, False, True)

    assert RandomValueMutator(BooleanDomain(), 0.0).mutate(genotype, random.Random(0)) == genotype
    assert SwapMutator(0.0).mutate((3, 1, 2), random.Random(0)) == (3, 1, 2)
    assert InversionMutator(0.0).mutate((3, 1, 2), random.Random(0)) == (3, 1, 2)


def test_full_rate_changes_every_gene_of_multi_valued_domain() -> None:
    rng = random.Random(1)
    domain = IntegerDomain(0, 3)
    mutator = RandomValueMutator(domain, 1.0)
    genotype = tuple(domain.sample(rng) for _ in range(25))

    mutated = mutator.mutate(genotype, rng)

    assert len(mutated) == len(genotype)
    assert all(before != after for before, after in zip(genotype, mutated))


def test_changed_gene_count_tracks_rate() -> None:
    rng = random.Random(2)
    mutator = RandomValueMutator(BooleanDomain(), 0.3)
    genotype = (False,) * 50
    trials = 200

    changed = sum(sum(mutator.mutate(genotype, rng)) for _ in range(trials)) / trials

    assert 13.0 <= changed <= 17.0


def test_real_mutation_stays_in_bounds() -> None:
    rng = random.Random(3)
    domain = RealDomain(-1.0, 1.0)
    mutated = RandomValueMutator(domain, 0.5).mutate((0.0,) * 30, rng)

    assert all(domain.contains(gene) for gene in mutated)


def test_mutation_rate_is_validated() -> None:
    with pytest.raises(ConfigurationError):
        RandomValueMutator(BooleanDomain(), 1.5)
    with pytest.raises(ConfigurationError):
        SwapMutator(-0.1)


@pytest.mark.parametrize("mutator", [SwapMutator(0.3), SwapMutator(1.0), InversionMutator(1.0)], ids=repr)
def test_permutation_mutators_preserve_permutations(mutator) -> None:
    rng = random.Random(4)
    genotype = tuple(range(10))
    for _ in range(100):
        genotype = mutator.mutate(genotype, rng)
        assert is_permutation_of(genotype, range(10))


def test_permutation_mutators_reorder_at_full_rate() -> None:
    rng = random.Random(5)
    genotype = tuple(range(6))

    assert InversionMutator(1.0).mutate(genotype, rng) != genotype
    assert SwapMutator(1.0).mutate((7,), rng) == (7,)


def test_value_and_permutation_mutators_are_distinct_families() -> None:
    assert RandomValueMutator(BooleanDomain(), 0.1).preserves_permutation is False
    assert SwapMutator(0.1).preserves_permutation is True
    assert InversionMutator(0.1).preserves_permutation is True
