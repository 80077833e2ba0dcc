from __future__ import annotations

import math
import random
from collections.abc import MutableSequence, Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")

TAU = 2.0 * math.pi


class RandomSource(Protocol):
    """Random draws consumed by the event generator and the numbering shuffle."""

    def random(self) -> float:
        ...

    def uniform(self, a: float, b: float) -> float:
        ...

    def randint(self, a: int, b: int) -> int:
        ...

    def choice(self, seq: Sequence[T]) -> T:
        ...

    def shuffle(self, seq: MutableSequence[T]) -> None:
        ...


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def shuffle(self, seq: MutableSequence[T]) -> None:
        self._rng.shuffle(seq)


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def clamp(value: float, lo: float, hi: float) -> float:
    if lo > hi:
        raise ValueError("lo must be <= hi")
    return lo if value < lo else hi if value > hi else float(value)


def handedness(charge: int) -> int:
    """Curvature direction sign: negative charges curl one way, everything else the other."""

    return -1 if int(charge) < 0 else 1


def signed(rng: RandomSource, lo: float, hi: float) -> float:
    """Magnitude in [lo, hi] with a random sign."""

    mag = rng.uniform(lo, hi)
    return mag if rng.random() < 0.5 else -mag
