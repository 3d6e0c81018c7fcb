"""Tests for gene value domains, genotype factories and random sources."""

from __future__ import annotations

import random

import pytest

from genesim.core.deterministic_rng import DeterministicRNG
from genesim.core.errors import ConfigurationError, ShapeError
from genesim.core.random_source import NumpyRandomSource, RandomSource
from genesim.genetic.genotype import (
    BooleanDomain,
    ChoiceDomain,
    IntegerDomain,
    PermutationGenotypeFactory,
    RealDomain,
    VectorGenotypeFactory,
)


def test_domains_sample_within_bounds() -> None:
    rng = random.Random(3)
    integers = IntegerDomain(-2, 4)
    reals = RealDomain(0.5, 1.5)
    choices = ChoiceDomain(["A", "C", "G", "T"])

    for _ in range(200):
        assert integers.contains(integers.sample(rng))
        assert 0.5 <= reals.sample(rng) <= 1.5
        assert choices.sample(rng) in {"A", "C", "G", "T"}
        assert isinstance(BooleanDomain().sample(rng), bool)


def test_sample_other_never_returns_current_value() -> None:
    rng = random.Random(5)
    integers = IntegerDomain(0, 3)
    choices = ChoiceDomain(["A", "C", "G", "T"])

    for _ in range(200):
        value = integers.sample(rng)
        other = integers.sample_other(value, rng)
        assert other != value and integers.contains(other)

        letter = choices.sample(rng)
        assert choices.sample_other(letter, rng) != letter

    assert BooleanDomain().sample_other(True, rng) is False


def test_single_valued_domains_keep_their_value() -> None:
    rng = random.Random(0)
    assert IntegerDomain(7, 7).sample_other(7, rng) == 7
    assert ChoiceDomain(["x"]).sample_other("x", rng) == "x"
    assert RealDomain(1.0, 1.0).sample_other(1.0, rng) == 1.0


def test_invalid_domain_bounds_are_rejected() -> None:
    with pytest.raises(ConfigurationError):
        IntegerDomain(3, 1)
    with pytest.raises(ConfigurationError):
        RealDomain(2.0, 1.0)
    with pytest.raises(ConfigurationError):
        ChoiceDomain([])


def test_vector_factory_is_deterministic_and_validates_shape() -> None:
    factory = VectorGenotypeFactory(BooleanDomain(), 12)

    first = factory.create(random.Random(11))
    second = factory.create(random.Random(11))
    assert first == second
    assert len(first) == 12

    assert factory.validate(list(first)) == first
    with pytest.raises(ShapeError):
        factory.validate(first[:-1])
    with pytest.raises(ShapeError):
        factory.validate((1,) * 12)
    with pytest.raises(ConfigurationError):
        VectorGenotypeFactory(BooleanDomain(), 0)


def test_permutation_factory_creates_and_validates_permutations() -> None:
    factory = PermutationGenotypeFactory.of_size(8)
    genotype = factory.create(random.Random(2))

    assert sorted(genotype) == list(range(8))
    assert factory.is_permutation is True
    with pytest.raises(ShapeError):
        factory.validate((0, 0, 1, 2, 3, 4, 5, 6))
    with pytest.raises(ConfigurationError):
        PermutationGenotypeFactory([1, 1, 2])


def test_numpy_random_source_satisfies_protocol_and_is_reproducible() -> None:
    source_a = NumpyRandomSource.from_seed(99)
    source_b = NumpyRandomSource.from_seed(99)
    assert isinstance(source_a, RandomSource)

    factory = PermutationGenotypeFactory.of_size(10)
    assert factory.create(source_a) == factory.create(source_b)
    assert sorted(source_a.sample(range(10), 4)) == sorted(source_b.sample(range(10), 4))
    assert 2 <= source_a.randrange(2, 5) < 5
    with pytest.raises(ValueError):
        source_a.randrange(3, 3)


def test_named_rng_streams_are_stable_and_independent() -> None:
    rng_a = DeterministicRNG(42)
    rng_b = DeterministicRNG(42)

    vals_a = [rng_a.stream("selection").random() for _ in range(4)]
    vals_b = [rng_b.stream("selection").random() for _ in range(4)]
    other = [rng_a.stream("mutation").random() for _ in range(4)]

    assert vals_a == vals_b
    assert vals_a != other
    assert rng_a.stream_names() == ["mutation", "selection"]


def test_deterministic_rng_accepts_numpy_factory() -> None:
    rng = DeterministicRNG(5, factory=NumpyRandomSource.from_seed)
    assert isinstance(rng.stream("population"), NumpyRandomSource)


def test_choice_domain_rejects_unhashable_values() -> None:
    with pytest.raises(ConfigurationError, match="hashable"):
        ChoiceDomain([["A", "C"], ["G"]])
