"""Random-source capability consumed by every genetic operator."""

from __future__ import annotations

import os
from typing import Any, Callable, MutableSequence, Protocol, Sequence, TypeVar, runtime_checkable

import numpy as np


T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Uniform random values used by operators.

    ``random.Random`` satisfies this protocol as-is; other generators can be
    adapted (see ``NumpyRandomSource``). The engine only requires that the
    source is seedable so that runs can be reproduced.
    """

    def random(self) -> float: ...

    def randrange(self, start: int, stop: int | None = None) -> int: ...

    def uniform(self, a: float, b: float) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...

    def shuffle(self, x: MutableSequence[Any]) -> None: ...

    def sample(self, population: Sequence[T], k: int) -> list[T]: ...


RandomSourceFactory = Callable[[int], RandomSource]


class NumpyRandomSource:
    """Adapt ``numpy.random.Generator`` to the ``RandomSource`` protocol."""

    def __init__(self, generator: np.random.Generator) -> None:
        self.generator = generator

    @classmethod
    def from_seed(cls, seed: int) -> "NumpyRandomSource":
        return cls(np.random.default_rng(seed))

    def random(self) -> float:
        return float(self.generator.random())

    def randrange(self, start: int, stop: int | None = None) -> int:
        if stop is None:
            start, stop = 0, start
        if start >= stop:
            raise ValueError(f"empty range for randrange ({start}, {stop})")
        return int(self.generator.integers(start, stop))

    def uniform(self, a: float, b: float) -> float:
        return float(self.generator.uniform(a, b))

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.generator.integers(len(seq)))]

    def shuffle(self, x: MutableSequence[Any]) -> None:
        order = self.generator.permutation(len(x))
        x[:] = [x[int(i)] for i in order]

    def sample(self, population: Sequence[T], k: int) -> list[T]:
        items = list(population)
        if not 0 <= k <= len(items):
            raise ValueError("Sample larger than population or is negative")
        picked = self.generator.choice(len(items), size=k, replace=False)
        return [items[int(i)] for i in picked]


def random_seed() -> int:
    """Return a process-derived seed for runs that did not pin one."""
    return int.from_bytes(os.urandom(8), byteorder="big", signed=False) & 0xFFFFFFFF
