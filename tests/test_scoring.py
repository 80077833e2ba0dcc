from __future__ import annotations

import math

import pytest

from bubble_chamber.scoring import parse_neutrino_guess, score_breakdown, score_identifications

TRUTH = {1: "p", 2: "π⁺", 3: "μ⁺", 4: "e⁺", 5: "π⁻"}  # N = 5, 100/(N+2) per particle
PER = 100.0 / 7.0


def test_all_correct_with_exact_neutrino_count_scores_100() -> None:
    assert math.isclose(score_identifications(TRUTH, dict(TRUTH), "3", 3), 100.0)


def test_empty_answers_score_zero() -> None:
    assert score_identifications(TRUTH, {}, "", 3) == 0.0


@pytest.mark.parametrize("k", [0, 1, 2, 3, 4, 5])
@pytest.mark.parametrize("guess", ["0", "2", "4", "9"])
def test_partial_identifications_with_wrong_neutrino_count(k: int, guess: str) -> None:
    answers = {d: TRUTH[d] for d in list(TRUTH)[:k]}
    assert math.isclose(score_identifications(TRUTH, answers, guess, 3), k * PER)


def test_exact_neutrino_count_alone_earns_the_remaining_budget() -> None:
    assert math.isclose(score_identifications(TRUTH, {}, " 3 ", 3), 100.0 - PER)


def test_wrong_symbols_and_unknown_rows_earn_nothing() -> None:
    answers = {1: "n", 2: "π⁻", 99: "p", 3: ""}
    assert score_identifications(TRUTH, answers, "", 3) == 0.0


def test_non_integer_guess_earns_no_neutrino_credit() -> None:
    assert score_identifications(TRUTH, {}, "three", 3) == 0.0
    assert score_identifications(TRUTH, {}, "3.0", 3) == 0.0


def test_zero_true_neutrinos_still_rewards_an_exact_guess() -> None:
    truth = {1: "π⁰", 2: "γ", 3: "e⁻", 4: "e⁺"}
    assert math.isclose(score_identifications(truth, dict(truth), "0", 0), 100.0)
    assert math.isclose(score_identifications(truth, dict(truth), "", 0), 4 * 100.0 / 6.0)


def test_score_is_clamped_to_100() -> None:
    # Every correct row plus the neutrino budget exceeds 100 before clamping.
    breakdown = score_breakdown(TRUTH, dict(TRUTH), 3, 3)
    assert breakdown.correct_particles == 5
    assert breakdown.score == 100.0


def test_no_particles_scores_zero() -> None:
    assert score_identifications({}, {}, "0", 0) == 0.0


def test_parse_neutrino_guess() -> None:
    assert parse_neutrino_guess(" 4 ") == 4
    assert parse_neutrino_guess(2) == 2
    assert parse_neutrino_guess("") is None
    assert parse_neutrino_guess(None) is None
    assert parse_neutrino_guess(True) is None
