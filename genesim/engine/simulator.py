"""Generational state machine driving a genetic algorithm run."""

from __future__ import annotations

import enum
import logging
import time
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Mapping

from genesim.core.deterministic_rng import DeterministicRNG
from genesim.core.errors import ConfigurationError, EvolutionError, SimulationError, SimulationStateError
from genesim.data.logger import SimulationLogger
from genesim.engine.termination import Termination, describe
from genesim.genetic.genotype import Genotype, GenotypeFactory
from genesim.genetic.population import (
    FitnessFunction,
    Individual,
    Population,
    average_fitness,
    best,
    evaluate,
    is_numeric,
    ranked,
)
from genesim.operators.crossover import CrossoverOperator
from genesim.operators.mutation import MutationOperator
from genesim.operators.selection import SelectionOperator


LOGGER = logging.getLogger(__name__)


class SimulatorStatus(str, enum.Enum):
    """Lifecycle states of one run."""

    INITIALIZED = "initialized"
    READY = "ready"
    STEPPED = "stepped"
    TERMINATED = "terminated"
    FAILED = "failed"


_FINISHED = frozenset({SimulatorStatus.TERMINATED, SimulatorStatus.FAILED})


@dataclass(frozen=True)
class SimulationState:
    """Immutable view of a run, handed to termination predicates."""

    generation: int
    population: Population
    processing_time: float
    status: SimulatorStatus
    started_at: float | None = None
    elapsed: float = 0.0

    @property
    def best(self) -> Individual:
        return best(self.population)

    @property
    def best_fitness(self) -> Any:
        return self.best.fitness


@dataclass(frozen=True)
class StepResult:
    """Statistics of one completed generation."""

    generation: int
    best: Individual
    best_fitness: Any
    average_fitness: float | None
    step_time: float
    processing_time: float
    elapsed: float = 0.0
    terminated: bool = False
    stop_reason: str | None = None

    def to_metrics(self) -> dict[str, float]:
        """Numeric statistics of the step; non-numeric fitness values are left out."""
        values = {
            "best_fitness": self.best_fitness,
            "average_fitness": self.average_fitness,
            "step_time": self.step_time,
            "processing_time": self.processing_time,
            "elapsed": self.elapsed,
        }
        return {name: float(value) for name, value in values.items() if is_numeric(value)}


class Simulator:
    """Runs select → crossover → mutate → evaluate → replace, one step at a time.

    The simulator exclusively owns its population, random streams and
    processing-time accumulator. It is synchronous: ``step`` runs a whole
    generation before returning, and cancellation means not calling it again.
    """

    def __init__(
        self,
        genotype_factory: GenotypeFactory,
        population: Population,
        fitness_fn: FitnessFunction,
        selection: SelectionOperator,
        crossover: CrossoverOperator,
        mutation: MutationOperator,
        termination: Termination,
        rng: DeterministicRNG,
        elitism: int = 0,
        executor: Executor | None = None,
        logger: SimulationLogger | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize simulator dependencies and deterministic state."""
        self.genotype_factory = genotype_factory
        self.fitness_fn = fitness_fn
        self.selection = selection
        self.crossover = crossover
        self.mutation = mutation
        self.termination = termination
        self.rng = rng
        self.seed = rng.seed
        self.elitism = int(elitism)
        self.executor = executor

        self.logger = logger
        self.config = dict(config or {})
        self.experiment_id: str | None = None
        if self.logger is not None:
            self.experiment_id = self.logger.start_experiment(
                config=self.config,
                seed=self.seed,
                metadata={"population_size": len(population), "simulator_version": "0.1.0"},
            )

        self._population = population
        self._generation = 0
        self._processing_time = 0.0
        self.started_at: float | None = None
        self._started_clock = 0.0
        self._status = SimulatorStatus.INITIALIZED
        self.history: list[StepResult] = []

    @property
    def status(self) -> SimulatorStatus:
        return self._status

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def population(self) -> Population:
        return self._population

    @property
    def processing_time(self) -> float:
        return self._processing_time

    @property
    def elapsed(self) -> float:
        """Wall-clock seconds since the first step started, idle time between steps included."""
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self._started_clock

    def state(self) -> SimulationState:
        """Return an immutable snapshot of the current run state."""
        return SimulationState(
            generation=self._generation,
            population=self._population,
            processing_time=self._processing_time,
            status=self._status,
            started_at=self.started_at,
            elapsed=self.elapsed,
        )

    def step(self) -> StepResult:
        """Advance the run by exactly one generation.

        Lifecycle:
          1) evaluate the initial population on the first call,
          2) select parents and recombine them into offspring,
          3) mutate and validate every child,
          4) evaluate offspring and reinsert elites,
          5) replace the population and account processing time,
          6) evaluate the termination predicate.

        Raises:
            SimulationStateError: The run already terminated or failed.
            ConfigurationError: An operator or the termination predicate
                reported invalid setup; the run moves to ``FAILED``.
            SimulationError: A runtime failure; the run moves to ``FAILED``.
        """
        if self._status in _FINISHED:
            raise SimulationStateError(f"Cannot step a simulation in state '{self._status.value}'.")

        if self.started_at is None:
            self.started_at = time.time()
            self._started_clock = time.monotonic()
        started = time.perf_counter()
        try:
            if self._status == SimulatorStatus.INITIALIZED:
                self._population = self._evaluate(self._population)
                self._status = SimulatorStatus.READY
            next_population = self._next_generation(self._population)
        except EvolutionError as exc:
            self._fail(exc)
            raise
        step_time = time.perf_counter() - started

        self._population = next_population
        self._generation += 1
        self._processing_time += step_time
        self._status = SimulatorStatus.STEPPED

        state = self.state()
        try:
            stop = bool(self.termination(state))
            stop_reason = describe(self.termination, state) if stop else None
        except Exception as exc:
            error = ConfigurationError(f"termination predicate failed: {exc}")
            self._fail(error)
            raise error from exc

        try:
            result = self._safe_call("statistics", self._summarize, state, step_time, stop, stop_reason)
        except EvolutionError as exc:
            self._fail(exc)
            raise
        self.history.append(result)
        LOGGER.debug(
            "Generation %d: best=%s average=%s step_time=%.6fs",
            result.generation,
            result.best_fitness,
            result.average_fitness,
            result.step_time,
        )
        if stop:
            self._status = SimulatorStatus.TERMINATED
            LOGGER.info("Simulation terminated after %d generations: %s", self._generation, stop_reason)
        self.on_generation_end(result)
        return result

    def _summarize(self, state: SimulationState, step_time: float, stop: bool, stop_reason: str | None) -> StepResult:
        return StepResult(
            generation=state.generation,
            best=state.best,
            best_fitness=state.best_fitness,
            average_fitness=average_fitness(state.population),
            step_time=step_time,
            processing_time=state.processing_time,
            elapsed=state.elapsed,
            terminated=stop,
            stop_reason=stop_reason,
        )

    def run(self, max_steps: int | None = None) -> StepResult:
        """Step until the termination predicate holds and return the last result.

        ``max_steps`` bounds the number of steps taken by this call; the run
        stays resumable when the bound is hit before termination.
        """
        if max_steps is not None and max_steps <= 0:
            raise ConfigurationError("max_steps must be positive")
        steps = 0
        while True:
            result = self.step()
            steps += 1
            if result.terminated or (max_steps is not None and steps >= max_steps):
                return result

    def on_generation_end(self, result: StepResult) -> None:
        """Persist metrics for a completed generation if logger is configured."""
        if self.logger is None or self.experiment_id is None:
            return
        try:
            self.logger.log_metrics(
                experiment_id=self.experiment_id,
                generation_index=result.generation,
                metrics=result.to_metrics(),
            )
        except Exception as exc:
            error = SimulationError(f"logger.log_metrics failed: {exc}")
            self._fail(error)
            raise error from exc

    def _next_generation(self, population: Population) -> Population:
        size = len(population)
        group = self.crossover.num_parents
        selection_rng = self.rng.stream("selection")
        crossover_rng = self.rng.stream("crossover")
        mutation_rng = self.rng.stream("mutation")

        children: list[Genotype] = []
        while len(children) < size:
            groups = -(-(size - len(children)) // group)
            parents = self._safe_call(
                "selection.select", self.selection.select, population, groups * group, selection_rng
            )
            if len(parents) != groups * group:
                raise SimulationError(f"selection returned {len(parents)} parents, expected {groups * group}")
            for offset in range(0, len(parents), group):
                brood = self._safe_call(
                    "crossover.crossover",
                    self.crossover.crossover,
                    [parent.genotype for parent in parents[offset:offset + group]],
                    crossover_rng,
                )
                if not brood:
                    raise SimulationError("crossover produced no offspring")
                children.extend(brood)

        offspring = []
        for child in children[:size]:
            mutated = self._safe_call("mutation.mutate", self.mutation.mutate, child, mutation_rng)
            offspring.append(Individual(self.genotype_factory.validate(mutated)))

        next_population = self._evaluate(Population(offspring))
        if self.elitism:
            next_population = self._reinsert_elites(population, next_population)
        if len(next_population) == 0:
            raise SimulationError("Population became empty after replacement.")
        return next_population

    def _reinsert_elites(self, parents: Population, offspring: Population) -> Population:
        """Replace the worst offspring with the best ``elitism`` parents."""
        elites = ranked(parents)[: self.elitism]
        worst = sorted(range(len(offspring)), key=lambda i: offspring[i].fitness)[: len(elites)]
        members = list(offspring)
        for index, elite in zip(sorted(worst), elites):
            members[index] = elite
        return Population(members)

    def _evaluate(self, population: Population) -> Population:
        return self._safe_call("fitness evaluation", evaluate, population, self.fitness_fn, self.executor)

    def _fail(self, error: BaseException) -> None:
        self._status = SimulatorStatus.FAILED
        LOGGER.error("Simulation failed at generation %d: %s", self._generation, error)

    @staticmethod
    def _safe_call(label: str, fn: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except EvolutionError:
            raise
        except Exception as exc:
            raise SimulationError(f"{label} failed: {exc}") from exc
