"""Experiment files (YAML or JSON) turned into validated ``ExperimentConfig`` objects."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from genesim.core.errors import ConfigurationError


_REQUIRED: dict[str, Callable[[Any], Any]] = {
    "population_size": int,
    "generations": int,
    "mutation_rate": float,
    "genotype": str,
}
_TYPED_KEYS = frozenset(_REQUIRED) | {"seed"}


@dataclass(frozen=True)
class ExperimentConfig:
    """One experiment: the typed run parameters plus free-form operator options.

    Operator options (``selection``, ``tournament_size``, ``genome_length``,
    ``fitness_target`` ...) live in ``extras`` and are read with ``get``.
    A ``seed`` of ``None`` lets the builder derive one.
    """

    population_size: int
    generations: int
    mutation_rate: float
    genotype: str
    seed: int | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key in _TYPED_KEYS:
            return getattr(self, key)
        return self.extras.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        payload = {key: getattr(self, key) for key in (*_REQUIRED, "seed")}
        payload.update(self.extras)
        return payload


class ConfigLoader:
    """Read experiment files by extension (``.yaml``/``.yml`` or ``.json``)."""

    @staticmethod
    def load(path: str | Path) -> ExperimentConfig:
        payload = _read(path)
        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"{path} must contain a single experiment mapping")
        return validate_config(payload)

    @staticmethod
    def load_many(path: str | Path) -> list[ExperimentConfig]:
        """Load a batch file.

        Accepts a list of experiments, a mapping with an ``experiments`` list,
        or a single experiment mapping.
        """
        payload = _read(path)
        if isinstance(payload, Mapping):
            payload = payload["experiments"] if "experiments" in payload else [payload]
        if not isinstance(payload, list):
            raise ConfigurationError(f"{path} must hold a list of experiments")
        return [validate_config(item) for item in payload]


def _read(path: str | Path) -> Any:
    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in {".json", ".yaml", ".yml"}:
        raise ConfigurationError(f"Unsupported config extension: {suffix or '<none>'}")
    with config_path.open(encoding="utf-8") as handle:
        return json.load(handle) if suffix == ".json" else yaml.safe_load(handle)


def validate_config(payload: Any) -> ExperimentConfig:
    """Check required keys and value ranges, coercing numbers to their types."""
    if not isinstance(payload, Mapping):
        raise ConfigurationError("Experiment config must be a mapping")
    missing = [key for key in _REQUIRED if key not in payload]
    if missing:
        raise ConfigurationError(f"Missing required config keys: {', '.join(missing)}")

    try:
        values = {key: coerce(payload[key]) for key, coerce in _REQUIRED.items()}
        seed = payload.get("seed")
        values["seed"] = None if seed is None else int(seed)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config value: {exc}") from exc

    if values["population_size"] <= 0:
        raise ConfigurationError("population_size must be > 0")
    if values["generations"] <= 0:
        raise ConfigurationError("generations must be > 0")
    if not 0.0 <= values["mutation_rate"] <= 1.0:
        raise ConfigurationError("mutation_rate must be in [0.0, 1.0]")
    if not values["genotype"]:
        raise ConfigurationError("genotype must be non-empty")

    extras = {key: value for key, value in payload.items() if key not in _TYPED_KEYS}
    return ExperimentConfig(**values, extras=extras)
