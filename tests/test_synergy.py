"""Tests for doubles synergy scoring."""

from __future__ import annotations

import pytest

from conftest import make_match
from domain.statistics import calculate_synergy_score, compute_synergies


def _corpus():
    return [
        make_match("m1", ["a", "b"], ["c", "d"], 21, 15),
        make_match("m2", ["b", "a"], ["d", "c"], 21, 19),
        make_match("m3", ["c", "d"], ["a", "b"], 21, 15),
        make_match("m4", ["a", "c"], ["b", "d"], 21, 10),
        make_match("m5", ["a"], ["b"], 21, 0),
    ]


def test_score_formula_and_confidence_discount() -> None:
    assert calculate_synergy_score(1.0, 10.0, 10) == pytest.approx(1.0)
    assert calculate_synergy_score(1.0, 10.0, 20) == pytest.approx(1.0)
    assert calculate_synergy_score(0.5, 0.0, 5) == pytest.approx(0.5 * 0.7 * 0.5)
    assert calculate_synergy_score(0.0, -10.0, 10) == pytest.approx(-0.3)


def test_pairs_are_tallied_on_either_side() -> None:
    synergies = compute_synergies(_corpus())

    assert len(synergies) == 2
    best, other = synergies
    assert (best.player1.player_id, best.player2.player_id) == ("a", "b")
    assert best.matches_played == 3
    assert best.matches_won == 2
    assert best.win_rate == pytest.approx(2 / 3)
    assert best.average_score_difference == pytest.approx(2 / 3)
    assert best.synergy_score == pytest.approx(calculate_synergy_score(2 / 3, 2 / 3, 3))
    assert (other.player1.player_id, other.player2.player_id) == ("c", "d")
    assert other.average_score_difference == pytest.approx(-2 / 3)
    assert best.synergy_score > other.synergy_score


def test_pairs_under_minimum_and_singles_are_excluded() -> None:
    pairs = {
        (synergy.player1.player_id, synergy.player2.player_id)
        for synergy in compute_synergies(_corpus(), min_matches=1, limit=None)
    }
    assert pairs == {("a", "b"), ("c", "d"), ("a", "c"), ("b", "d")}
    assert len(compute_synergies(_corpus(), limit=None)) == 2


def test_limit_and_empty_corpus() -> None:
    assert len(compute_synergies(_corpus(), min_matches=1, limit=1)) == 1
    assert compute_synergies([]) == []


def test_mixed_match_counts_only_the_doubles_side() -> None:
    corpus = [
        make_match("m1", ["a", "b"], ["c"], 21, 18),
        make_match("m2", ["c"], ["b", "a"], 21, 19),
    ]

    synergies = compute_synergies(corpus, min_matches=1)

    assert [(s.player1.player_id, s.player2.player_id) for s in synergies] == [("a", "b")]
    assert synergies[0].matches_played == 2
    assert synergies[0].matches_won == 1
