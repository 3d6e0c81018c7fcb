"""Error taxonomy shared by the genetic engine and its operators."""

from __future__ import annotations


class EvolutionError(Exception):
    """Base class for every error raised by genesim."""


class ConfigurationError(EvolutionError, ValueError):
    """Raised when a run is set up with invalid parameters or operators.

    Detected at build time or at the start of a step and never retried.
    """


class SimulationError(EvolutionError, RuntimeError):
    """Raised when a generation step fails at runtime.

    The simulator moves to ``FAILED`` after raising it.
    """


class ShapeError(SimulationError):
    """Raised when a genotype violates its length or permutation invariants."""


class SimulationStateError(SimulationError):
    """Raised when stepping a simulator that has already terminated or failed."""
