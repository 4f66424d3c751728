"""Tests for player standing updates and ledger entries."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from domain.common import Match, Player, TeamRoster, TeamSide
from domain.ledger import (
    apply_match_to_player,
    build_history_entries,
    group_by_match,
    verify_ledger,
)
from domain.ratings.elo import TeamEloCalculator

PLAYED_AT = datetime(2026, 1, 5, 18, 30, 0)


def _players() -> dict[str, Player]:
    return {
        "a": Player("a", "Ann", rating=1100.0, matches_played=4, wins=3, streak_count=2),
        "b": Player("b", "Ben", rating=900.0, matches_played=2, wins=0),
        "c": Player("c", "Cat", rating=1000.0),
    }


def _match(players: dict[str, Player]) -> Match:
    return Match(
        match_id="m1",
        team1=TeamRoster.from_players([players["a"].ref(), players["b"].ref()]),
        team2=TeamRoster(first=players["c"].ref()),
        team1_score=21,
        team2_score=10,
        winner=TeamSide.TEAM1,
        created_at=PLAYED_AT,
    )


def test_win_extends_streak_and_counts() -> None:
    player = _players()["a"]
    updated = apply_match_to_player(player, delta=16, won=True, played_at=PLAYED_AT)

    assert updated.rating == pytest.approx(1116.0)
    assert updated.matches_played == 5
    assert updated.wins == 4
    assert updated.streak_count == 3
    assert updated.last_played_at == PLAYED_AT
    assert player.matches_played == 4


def test_loss_resets_streak() -> None:
    player = _players()["a"]
    updated = apply_match_to_player(player, delta=-16, won=False, played_at=PLAYED_AT)

    assert updated.rating == pytest.approx(1084.0)
    assert updated.wins == 3
    assert updated.losses == 2
    assert updated.streak_count == 0


def test_ratings_are_not_clamped_at_zero() -> None:
    player = Player("z", "Zed", rating=10.0)
    updated = apply_match_to_player(player, delta=-31, won=False, played_at=PLAYED_AT)
    assert updated.rating == pytest.approx(-21.0)


def test_history_entries_cover_every_participant_in_roster_order() -> None:
    players = _players()
    match = _match(players)
    deltas = TeamEloCalculator().compute_deltas(1000.0, 1000.0, TeamSide.TEAM1)

    entries = build_history_entries(match, players, deltas)

    assert [entry.player_id for entry in entries] == ["a", "b", "c"]
    assert [entry.team for entry in entries] == [TeamSide.TEAM1, TeamSide.TEAM1, TeamSide.TEAM2]
    a_entry, b_entry, c_entry = entries
    assert (a_entry.rating_before, a_entry.rating_after, a_entry.rating_change) == (1100, 1116, 16)
    assert (b_entry.rating_before, b_entry.rating_after, b_entry.rating_change) == (900, 916, 16)
    assert (c_entry.rating_before, c_entry.rating_after, c_entry.rating_change) == (1000, 984, -16)
    assert a_entry.score_difference == 11
    assert c_entry.score_difference == -11
    assert a_entry.is_winner and not c_entry.is_winner
    assert all(entry.date == PLAYED_AT for entry in entries)
    verify_ledger(entries)


def test_group_by_match() -> None:
    players = _players()
    deltas = TeamEloCalculator().compute_deltas(1000.0, 1000.0, TeamSide.TEAM1)
    entries = build_history_entries(_match(players), players, deltas)

    grouped = group_by_match(entries)
    assert list(grouped) == ["m1"]
    assert len(grouped["m1"]) == 3


def test_verify_ledger_detects_inconsistent_rows() -> None:
    players = _players()
    deltas = TeamEloCalculator().compute_deltas(1000.0, 1000.0, TeamSide.TEAM1)
    entries = build_history_entries(_match(players), players, deltas)

    with pytest.raises(ValueError, match="does not equal"):
        verify_ledger([replace(entries[0], rating_after=1200), *entries[1:]])
    with pytest.raises(ValueError, match="more than one entry"):
        verify_ledger([*entries, entries[0]])
    with pytest.raises(ValueError, match="teammates"):
        verify_ledger(
            [entries[0], replace(entries[1], rating_after=917, rating_change=17), entries[2]]
        )
