from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


def parse_neutrino_guess(raw: object) -> int | None:
    """Integer neutrino count typed by the user, or None when it is not one."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    total_particles: int
    correct_particles: int
    per_particle: float
    neutrino_points: float
    score: float


def score_breakdown(
    truth: Mapping[int, str],
    identifications: Mapping[int, str],
    neutrino_guess: object,
    true_neutrino_count: int,
) -> ScoreBreakdown:
    """Score identifications keyed by display number against ``truth``.

    Every correct symbol is worth 100/(N+2). The rest of the budget,
    100 - 100/(N+2), goes to an exact neutrino count and nothing else.
    The total is clamped to [0, 100].
    """

    n = len(truth)
    if n == 0:
        return ScoreBreakdown(0, 0, 0.0, 0.0, 0.0)

    per = 100.0 / (n + 2)
    correct = sum(1 for display, symbol in identifications.items() if symbol and truth.get(display) == symbol)
    guess = parse_neutrino_guess(neutrino_guess)
    neutrino_points = (100.0 - per) if guess is not None and guess == int(true_neutrino_count) else 0.0
    score = min(100.0, max(0.0, correct * per + neutrino_points))
    return ScoreBreakdown(
        total_particles=n,
        correct_particles=correct,
        per_particle=per,
        neutrino_points=neutrino_points,
        score=score,
    )


def score_identifications(
    truth: Mapping[int, str],
    identifications: Mapping[int, str],
    neutrino_guess: object,
    true_neutrino_count: int,
) -> float:
    return score_breakdown(truth, identifications, neutrino_guess, true_neutrino_count).score
