"""Track shapes in normalized chamber coordinates.

The chamber is the unit square: x grows to the right, y grows downwards, the
beam enters at x = 0. Every shape maps a parameter t in [0, 1] to a point and
knows its tangent direction analytically, so a decay product can be launched
from the exact end point and direction of its parent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from .chamber_core import TAU

OUT_OF_VIEW_DISTANCE = 2.0


class ShapeKind(StrEnum):
    STRAIGHT = "straight"
    ARC = "arc"
    SPIRAL = "spiral"


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float

    def offset(self, distance: float, angle: float) -> "Point":
        return Point(self.x + math.cos(angle) * distance, self.y + math.sin(angle) * distance)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


# Returned by any shape evaluation that degenerates (non-finite parameters).
FALLBACK_POINT = Point(-1.0, -1.0)


def _guarded(p: Point) -> Point:
    return p if p.is_finite() else FALLBACK_POINT


@dataclass(frozen=True, slots=True)
class StraightShape:
    origin: Point
    angle: float
    length: float

    kind: ClassVar[ShapeKind] = ShapeKind.STRAIGHT

    def point_at(self, t: float) -> Point:
        return _guarded(self.origin.offset(t * self.length, self.angle))

    def tangent_at(self, t: float) -> float:
        _ = t
        return self.angle

    def end_point(self) -> Point:
        return self.point_at(1.0)

    def midpoint(self) -> Point:
        return self.point_at(0.5)

    def sample(self, steps: int = 1) -> tuple[Point, ...]:
        _ = steps
        return (self.point_at(0.0), self.point_at(1.0))


@dataclass(frozen=True, slots=True)
class ArcShape:
    """Circular arc starting at ``origin``.

    ``angle`` is the polar angle of ``origin`` seen from the circle centre and
    ``length`` the swept fraction of a full turn.
    """

    origin: Point
    angle: float
    radius: float
    length: float
    handedness: int

    kind: ClassVar[ShapeKind] = ShapeKind.ARC

    @classmethod
    def launched(
        cls,
        *,
        origin: Point,
        direction: float,
        radius: float,
        length: float,
        handedness: int,
    ) -> "ArcShape":
        """Arc whose tangent at ``origin`` points along ``direction``."""

        return cls(
            origin=origin,
            angle=direction - handedness * (math.pi / 2.0),
            radius=radius,
            length=length,
            handedness=handedness,
        )

    @property
    def center(self) -> Point:
        return self.origin.offset(-self.radius, self.angle)

    @property
    def sweep(self) -> float:
        return self.length * TAU * self.handedness

    def point_at(self, t: float) -> Point:
        return _guarded(self.center.offset(self.radius, self.angle + t * self.sweep))

    def tangent_at(self, t: float) -> float:
        return self.angle + t * self.sweep + self.handedness * (math.pi / 2.0)

    def end_point(self) -> Point:
        return self.point_at(1.0)

    def midpoint(self) -> Point:
        return self.point_at(0.5)

    def sample(self, steps: int = 64) -> tuple[Point, ...]:
        n = max(1, int(steps))
        return tuple(self.point_at(i / n) for i in range(n + 1))


@dataclass(frozen=True, slots=True)
class SpiralShape:
    """Spiral with a growing (0 -> R) or shrinking (R -> 0) radius.

    A growing spiral is centred on ``origin``. A shrinking spiral passes
    through ``origin`` at t = 0 and ends on its centre.
    """

    origin: Point
    angle: float
    radius: float
    turns: float
    handedness: int
    shrink: bool = False

    kind: ClassVar[ShapeKind] = ShapeKind.SPIRAL

    @classmethod
    def launched(
        cls,
        *,
        origin: Point,
        direction: float,
        radius: float,
        turns: float,
        handedness: int,
        shrink: bool = True,
    ) -> "SpiralShape":
        """Spiral whose circulation at ``origin`` points along ``direction``."""

        return cls(
            origin=origin,
            angle=direction - handedness * (math.pi / 2.0),
            radius=radius,
            turns=turns,
            handedness=handedness,
            shrink=shrink,
        )

    @property
    def center(self) -> Point:
        if self.shrink:
            return self.origin.offset(-self.radius, self.angle)
        return self.origin

    def _phase(self, t: float) -> float:
        return self.angle + self.handedness * t * TAU * self.turns

    def point_at(self, t: float) -> Point:
        r = self.radius * (1.0 - t) if self.shrink else self.radius * t
        return _guarded(self.center.offset(r, self._phase(t)))

    def tangent_at(self, t: float) -> float:
        return self._phase(t) + self.handedness * (math.pi / 2.0)

    def end_point(self) -> Point:
        return self.point_at(1.0)

    def midpoint(self) -> Point:
        return self.point_at(0.5)

    def sample(self, steps: int = 100) -> tuple[Point, ...]:
        n = max(1, int(steps))
        return tuple(self.point_at(i / n) for i in range(n + 1))


Shape = StraightShape | ArcShape | SpiralShape


def ray_to_boundary(origin: Point, angle: float, *, width: float = 1.0, height: float = 1.0) -> Point:
    """Nearest point where the ray from ``origin`` along ``angle`` leaves the chamber.

    Candidates on the four edges are evaluated by their parametric distance
    and the smallest positive one wins. A ray that never meets the boundary
    ahead of it (origin outside, pointing away) gets a point far out of view.
    """

    dx = math.cos(angle)
    dy = math.sin(angle)
    best_t: float | None = None
    best: Point | None = None

    def consider(t: float, p: Point) -> None:
        nonlocal best_t, best
        if t > 0.0 and (best_t is None or t < best_t):
            best_t = t
            best = p

    if dx < 0.0:
        t = (0.0 - origin.x) / dx
        y = origin.y + t * dy
        if 0.0 <= y <= height:
            consider(t, Point(0.0, y))
    if dx > 0.0:
        t = (width - origin.x) / dx
        y = origin.y + t * dy
        if 0.0 <= y <= height:
            consider(t, Point(width, y))
    if dy < 0.0:
        t = (0.0 - origin.y) / dy
        x = origin.x + t * dx
        if 0.0 <= x <= width:
            consider(t, Point(x, 0.0))
    if dy > 0.0:
        t = (height - origin.y) / dy
        x = origin.x + t * dx
        if 0.0 <= x <= width:
            consider(t, Point(x, height))

    if best is None:
        return origin.offset(max(width, height) * OUT_OF_VIEW_DISTANCE, angle)
    return best
