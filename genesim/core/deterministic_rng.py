"""Deterministic RNG container with independent named streams."""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass, field

from genesim.core.random_source import RandomSource, RandomSourceFactory


@dataclass
class DeterministicRNG:
    """Owns deterministic RNG streams without touching global random state.

    Each operator family draws from its own stream so that swapping one
    operator does not shift the random values seen by the others.
    """

    seed: int
    factory: RandomSourceFactory = field(default=random.Random)

    def __post_init__(self) -> None:
        self._streams: dict[str, RandomSource] = {}

    def stream(self, name: str) -> RandomSource:
        """Return independent deterministic stream by name."""
        if name not in self._streams:
            # Use stable cross-process seed derivation instead of built-in hash().
            digest = hashlib.sha256(f"{self.seed}:{name}".encode("utf-8")).digest()
            derived_seed = int.from_bytes(digest[:8], byteorder="big", signed=False) & 0xFFFFFFFF
            self._streams[name] = self.factory(derived_seed)
        return self._streams[name]

    def stream_names(self) -> list[str]:
        return sorted(self._streams)
