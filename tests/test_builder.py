"""Validation rules of engine.builder.SimulationBuilder."""

from __future__ import annotations

import pytest

from genesim.core.errors import ConfigurationError
from genesim.engine.builder import SimulationBuilder
from genesim.engine.simulator import SimulatorStatus
from genesim.engine.termination import GenerationLimit
from genesim.genetic.genotype import BooleanDomain, PermutationGenotypeFactory, VectorGenotypeFactory
from genesim.operators.crossover import OrderOneCrossover, UniformCrossBreeder
from genesim.operators.mutation import RandomValueMutator, SwapMutator
from genesim.operators.selection import TournamentSelector
from genesim.problems import count_true, ordered_pairs


def _complete() -> SimulationBuilder:
    domain = BooleanDomain()
    return (
        SimulationBuilder()
        .with_genotype(VectorGenotypeFactory(domain, 6))
        .with_population_size(8)
        .with_selection(TournamentSelector(2))
        .with_crossover(UniformCrossBreeder())
        .with_mutation(RandomValueMutator(domain, 0.1))
        .with_fitness(count_true)
        .until(GenerationLimit(5))
        .with_seed(123)
    )


def _permutation(crossover, mutation) -> SimulationBuilder:
    return (
        SimulationBuilder()
        .with_genotype(PermutationGenotypeFactory.of_size(5))
        .with_population_size(6)
        .with_selection(TournamentSelector(2))
        .with_crossover(crossover)
        .with_mutation(mutation)
        .with_fitness(ordered_pairs)
        .until(GenerationLimit(5))
    )


def test_build_returns_initialized_simulator_with_sampled_population() -> None:
    sim = _complete().build()

    assert sim.status == SimulatorStatus.INITIALIZED
    assert sim.generation == 0
    assert sim.seed == 123
    assert len(sim.population) == 8
    assert all(len(genotype) == 6 for genotype in sim.population.genotypes)
    assert sim.rng.stream_names() == ["population"]


def test_same_seed_builds_same_initial_population() -> None:
    assert _complete().build().population == _complete().build().population


def test_missing_parts_are_reported() -> None:
    builder = SimulationBuilder().with_population_size(4)

    with pytest.raises(ConfigurationError, match="genotype.*selection.*crossover.*mutation.*fitness.*termination"):
        builder.build()


@pytest.mark.parametrize("size", [0, -3])
def test_non_positive_population_size_is_rejected(size: int) -> None:
    with pytest.raises(ConfigurationError, match="population_size"):
        _complete().with_population_size(size).build()


@pytest.mark.parametrize("elitism", [-1, 8, 9])
def test_elitism_must_leave_room_for_offspring(elitism: int) -> None:
    with pytest.raises(ConfigurationError, match="elitism"):
        _complete().with_elitism(elitism).build()


def test_permutation_genotype_rejects_value_crossover() -> None:
    with pytest.raises(ConfigurationError, match="UniformCrossBreeder"):
        _permutation(UniformCrossBreeder(), SwapMutator(0.1)).build()


def test_permutation_genotype_rejects_value_mutation() -> None:
    mutation = RandomValueMutator(BooleanDomain(), 0.1)

    with pytest.raises(ConfigurationError, match="RandomValueMutator"):
        _permutation(OrderOneCrossover(), mutation).build()


def test_permutation_genotype_accepts_order_preserving_operators() -> None:
    sim = _permutation(OrderOneCrossover(), SwapMutator(0.1)).with_seed(4).build()

    assert sim.genotype_factory.is_permutation
    assert all(sorted(genotype) == list(range(5)) for genotype in sim.population.genotypes)


def test_unpinned_seed_is_derived_at_build_time() -> None:
    sim = _complete().with_seed(None).build()

    assert isinstance(sim.seed, int)
    assert 0 <= sim.seed <= 0xFFFFFFFF
    assert sim.config["seed"] == sim.seed


def test_unset_population_size_is_a_missing_part() -> None:
    builder = _complete()
    builder.population_size = None

    with pytest.raises(ConfigurationError, match="Missing simulation parts: population_size"):
        builder.validate()
