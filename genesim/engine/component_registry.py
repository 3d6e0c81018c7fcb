"""Built-in name → factory tables used to assemble runs from config files."""

from __future__ import annotations

from typing import Callable

from genesim import problems
from genesim.configs.loader import ExperimentConfig
from genesim.core.errors import ConfigurationError
from genesim.genetic.genotype import (
    BooleanDomain,
    ChoiceDomain,
    GenotypeFactory,
    IntegerDomain,
    PermutationGenotypeFactory,
    RealDomain,
    VectorGenotypeFactory,
)
from genesim.genetic.population import FitnessFunction
from genesim.operators.crossover import (
    CrossoverOperator,
    MultiPointCrossBreeder,
    OrderOneCrossover,
    PartiallyMappedCrossover,
    SinglePointCrossBreeder,
    UniformCrossBreeder,
)
from genesim.operators.mutation import InversionMutator, MutationOperator, RandomValueMutator, SwapMutator
from genesim.operators.selection import (
    RankSelector,
    RouletteWheelSelector,
    SelectionOperator,
    TournamentSelector,
    TruncationSelector,
)


GenotypeFactoryBuilder = Callable[[ExperimentConfig], GenotypeFactory]
SelectionFactory = Callable[[ExperimentConfig], SelectionOperator]
CrossoverFactory = Callable[[ExperimentConfig], CrossoverOperator]
MutationFactory = Callable[[ExperimentConfig, GenotypeFactory], MutationOperator]


_GENOTYPE_FACTORIES: dict[str, GenotypeFactoryBuilder] = {}
_SELECTION_FACTORIES: dict[str, SelectionFactory] = {}
_CROSSOVER_FACTORIES: dict[str, CrossoverFactory] = {}
_MUTATION_FACTORIES: dict[str, MutationFactory] = {}
_FITNESS_FUNCTIONS: dict[str, FitnessFunction] = {}


def register_genotype_factory(name: str, factory: GenotypeFactoryBuilder) -> None:
    _GENOTYPE_FACTORIES[str(name)] = factory


def register_selection_factory(name: str, factory: SelectionFactory) -> None:
    _SELECTION_FACTORIES[str(name)] = factory


def register_crossover_factory(name: str, factory: CrossoverFactory) -> None:
    _CROSSOVER_FACTORIES[str(name)] = factory


def register_mutation_factory(name: str, factory: MutationFactory) -> None:
    _MUTATION_FACTORIES[str(name)] = factory


def register_fitness_function(name: str, fitness_fn: FitnessFunction) -> None:
    _FITNESS_FUNCTIONS[str(name)] = fitness_fn


def available_genotype_factories() -> list[str]:
    return sorted(_GENOTYPE_FACTORIES)


def available_selection_factories() -> list[str]:
    return sorted(_SELECTION_FACTORIES)


def available_crossover_factories() -> list[str]:
    return sorted(_CROSSOVER_FACTORIES)


def available_mutation_factories() -> list[str]:
    return sorted(_MUTATION_FACTORIES)


def available_fitness_functions() -> list[str]:
    return sorted(_FITNESS_FUNCTIONS)


def _lookup(table: dict, kind: str, name: str):
    factory = table.get(str(name))
    if factory is None:
        available = ", ".join(sorted(table)) or "<none>"
        raise ConfigurationError(f"Unknown {kind} '{name}'. Available: {available}")
    return factory


def create_genotype_factory(name: str, config: ExperimentConfig) -> GenotypeFactory:
    return _lookup(_GENOTYPE_FACTORIES, "genotype", name)(config)


def create_selection(name: str, config: ExperimentConfig) -> SelectionOperator:
    return _lookup(_SELECTION_FACTORIES, "selection", name)(config)


def create_crossover(name: str, config: ExperimentConfig) -> CrossoverOperator:
    return _lookup(_CROSSOVER_FACTORIES, "crossover", name)(config)


def create_mutation(name: str, config: ExperimentConfig, genotype_factory: GenotypeFactory) -> MutationOperator:
    return _lookup(_MUTATION_FACTORIES, "mutation", name)(config, genotype_factory)


def get_fitness_function(name: str) -> FitnessFunction:
    return _lookup(_FITNESS_FUNCTIONS, "fitness function", name)


def _genome_length(config: ExperimentConfig) -> int:
    return int(config.get("genome_length", 10))


def _boolean_genotype(config: ExperimentConfig) -> GenotypeFactory:
    return VectorGenotypeFactory(BooleanDomain(), _genome_length(config))


def _integer_genotype(config: ExperimentConfig) -> GenotypeFactory:
    domain = IntegerDomain(int(config.get("low", 0)), int(config.get("high", 9)))
    return VectorGenotypeFactory(domain, _genome_length(config))


def _real_genotype(config: ExperimentConfig) -> GenotypeFactory:
    domain = RealDomain(float(config.get("low", 0.0)), float(config.get("high", 1.0)))
    return VectorGenotypeFactory(domain, _genome_length(config))


def _choice_genotype(config: ExperimentConfig) -> GenotypeFactory:
    values = config.get("values")
    if not isinstance(values, list) or not values:
        raise ConfigurationError("'choice' genotype requires a non-empty 'values' list")
    return VectorGenotypeFactory(ChoiceDomain(values), _genome_length(config))


def _permutation_genotype(config: ExperimentConfig) -> GenotypeFactory:
    return PermutationGenotypeFactory.of_size(_genome_length(config))


def _random_value_mutation(config: ExperimentConfig, genotype_factory: GenotypeFactory) -> MutationOperator:
    if not isinstance(genotype_factory, VectorGenotypeFactory):
        raise ConfigurationError("'random_value' mutation needs a vector genotype with a value domain")
    return RandomValueMutator(genotype_factory.domain, config.mutation_rate)


def _register_defaults() -> None:
    if _GENOTYPE_FACTORIES:
        return
    register_genotype_factory("boolean", _boolean_genotype)
    register_genotype_factory("integer", _integer_genotype)
    register_genotype_factory("real", _real_genotype)
    register_genotype_factory("choice", _choice_genotype)
    register_genotype_factory("permutation", _permutation_genotype)

    register_selection_factory("tournament", lambda config: TournamentSelector(int(config.get("tournament_size", 3))))
    register_selection_factory("roulette", lambda _config: RouletteWheelSelector())
    register_selection_factory("rank", lambda config: RankSelector(float(config.get("rank_pressure", 1.5))))
    register_selection_factory("truncation", lambda config: TruncationSelector(float(config.get("selection_ratio", 0.5))))

    register_crossover_factory("uniform", lambda _config: UniformCrossBreeder())
    register_crossover_factory("single_point", lambda _config: SinglePointCrossBreeder())
    register_crossover_factory(
        "multi_point", lambda config: MultiPointCrossBreeder(int(config.get("num_cut_points", 2)))
    )
    register_crossover_factory("order_one", lambda _config: OrderOneCrossover())
    register_crossover_factory("pmx", lambda _config: PartiallyMappedCrossover())

    register_mutation_factory("random_value", _random_value_mutation)
    register_mutation_factory("swap", lambda config, _factory: SwapMutator(config.mutation_rate))
    register_mutation_factory("inversion", lambda config, _factory: InversionMutator(config.mutation_rate))

    register_fitness_function("count_true", problems.count_true)
    register_fitness_function("ordered_pairs", problems.ordered_pairs)


_register_defaults()
