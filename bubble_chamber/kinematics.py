"""Two-dimensional momentum bookkeeping.

Units: GeV/c. Only the transverse plane of the chamber is modelled; every
vertex conserves the vector sum exactly because one product is always
obtained by subtraction from the parent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MomentumVector:
    magnitude: float
    angle: float

    @classmethod
    def from_components(cls, px: float, py: float) -> "MomentumVector":
        return cls(math.hypot(px, py), math.atan2(py, px))

    @property
    def px(self) -> float:
        return self.magnitude * math.cos(self.angle)

    @property
    def py(self) -> float:
        return self.magnitude * math.sin(self.angle)

    def scaled(self, factor: float) -> "MomentumVector":
        return MomentumVector(self.magnitude * factor, self.angle)

    def __add__(self, other: "MomentumVector") -> "MomentumVector":
        return MomentumVector.from_components(self.px + other.px, self.py + other.py)

    def __sub__(self, other: "MomentumVector") -> "MomentumVector":
        return MomentumVector.from_components(self.px - other.px, self.py - other.py)

    def __repr__(self) -> str:
        return f"MomentumVector(p={self.magnitude:.4f}, angle={self.angle:.4f})"


def split_momentum(
    parent: MomentumVector,
    *,
    fraction: float,
    offset: float,
) -> tuple[MomentumVector, MomentumVector]:
    """Two-body split of ``parent``.

    The primary product carries ``fraction`` of the parent magnitude, rotated
    by ``offset`` from the parent direction; the complement is whatever is left
    of the parent vector.
    """

    primary = MomentumVector(parent.magnitude * fraction, parent.angle + offset)
    return primary, parent - primary


def symmetric_pair(total: MomentumVector, *, half_opening: float) -> tuple[MomentumVector, MomentumVector]:
    """Two equal products at ``total.angle -/+ half_opening`` summing to ``total``.

    Each magnitude is the forward share divided by cos(half_opening); callers
    keep the opening well inside (-pi/2, pi/2).
    """

    each = (total.magnitude / 2.0) / math.cos(half_opening)
    return (
        MomentumVector(each, total.angle - half_opening),
        MomentumVector(each, total.angle + half_opening),
    )


def vector_sum(vectors: tuple[MomentumVector, ...] | list[MomentumVector]) -> tuple[float, float]:
    return (sum(v.px for v in vectors), sum(v.py for v in vectors))
