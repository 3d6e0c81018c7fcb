"""Termination predicates evaluated after every completed generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from genesim.engine.simulator import SimulationState


Termination = Callable[["SimulationState"], bool]


class GenerationLimit:
    """Stop once ``generations`` steps have completed."""

    def __init__(self, generations: int) -> None:
        self.generations = int(generations)

    def __call__(self, state: "SimulationState") -> bool:
        return state.generation >= self.generations

    def __str__(self) -> str:
        return f"generation limit {self.generations} reached"


class FitnessLimit:
    """Stop once the best fitness reaches ``target``."""

    def __init__(self, target: Any) -> None:
        self.target = target

    def __call__(self, state: "SimulationState") -> bool:
        return state.best_fitness >= self.target

    def __str__(self) -> str:
        return f"fitness limit {self.target} reached"


class AnyOf:
    """Stop as soon as one of ``predicates`` holds."""

    def __init__(self, *predicates: Termination) -> None:
        self.predicates = predicates

    def __call__(self, state: "SimulationState") -> bool:
        return any(predicate(state) for predicate in self.predicates)

    def reason(self, state: "SimulationState") -> str:
        """Describe the first predicate that holds for ``state``."""
        for predicate in self.predicates:
            if predicate(state):
                return describe(predicate, state)
        return str(self)

    def __str__(self) -> str:
        return " or ".join(str(predicate) for predicate in self.predicates)


def describe(predicate: Termination, state: "SimulationState") -> str:
    """Human-readable stop reason for a predicate that fired."""
    reason = getattr(predicate, "reason", None)
    if callable(reason):
        return str(reason(state))
    name = getattr(predicate, "__name__", None)
    if name == "<lambda>":
        return "termination predicate satisfied"
    return str(name) if name else str(predicate)
