from __future__ import annotations

import math

import pytest

from bubble_chamber.kinematics import MomentumVector, split_momentum, symmetric_pair, vector_sum


def _components(v: MomentumVector) -> tuple[float, float]:
    return (v.px, v.py)


def test_components_round_trip() -> None:
    v = MomentumVector.from_components(3.0, -4.0)
    assert math.isclose(v.magnitude, 5.0)
    assert math.isclose(v.px, 3.0)
    assert math.isclose(v.py, -4.0)


def test_add_and_sub_are_componentwise() -> None:
    a = MomentumVector(10.0, 0.3)
    b = MomentumVector(4.0, -1.1)
    s = a + b
    d = s - b
    assert math.isclose(s.px, a.px + b.px)
    assert math.isclose(s.py, a.py + b.py)
    assert math.isclose(d.px, a.px, abs_tol=1e-12)
    assert math.isclose(d.py, a.py, abs_tol=1e-12)


@pytest.mark.parametrize("fraction,offset", [(0.4, 0.1), (0.8, -0.1), (0.5, 0.7), (0.2, -0.25)])
def test_split_momentum_conserves_exactly(fraction: float, offset: float) -> None:
    parent = MomentumVector(25.0, 0.6)
    primary, rest = split_momentum(parent, fraction=fraction, offset=offset)

    assert math.isclose(primary.magnitude, 25.0 * fraction)
    assert math.isclose(primary.angle, 0.6 + offset)
    px, py = vector_sum([primary, rest])
    assert math.isclose(px, parent.px, abs_tol=1e-9)
    assert math.isclose(py, parent.py, abs_tol=1e-9)


def test_symmetric_pair_sums_to_total() -> None:
    total = MomentumVector(12.0, -0.4)
    a, b = symmetric_pair(total, half_opening=math.radians(30))

    assert math.isclose(a.magnitude, b.magnitude)
    assert math.isclose(a.angle, -0.4 - math.radians(30))
    assert math.isclose(b.angle, -0.4 + math.radians(30))
    px, py = vector_sum((a, b))
    assert math.isclose(px, total.px, abs_tol=1e-9)
    assert math.isclose(py, total.py, abs_tol=1e-9)
