"""Tests for the match submission workflow and its failure contract."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FIXED_NOW, InMemoryMatchStore, make_player
from domain.common import MatchInput, TeamSide
from domain.errors import InvalidMatch, PartialWriteFailure, PlayerNotFound, SubmissionFailed
from domain.ledger import verify_ledger
from domain.protocol import MatchStore
from domain.submission import MatchSubmissionWorkflow, SubmissionState, submit_match

DOUBLES = MatchInput(team1=("a", "b"), team2=("c", "d"), team1_score=21, team2_score=17)


def test_fake_store_satisfies_protocol(memory_store: InMemoryMatchStore) -> None:
    assert isinstance(memory_store, MatchStore)


def test_singles_submission_updates_players_and_ledger(memory_store, clock) -> None:
    result = submit_match(
        memory_store,
        MatchInput(team1=("c",), team2=("d",), team1_score=21, team2_score=15),
        clock=clock,
    )

    assert result.match.match_id == "m1"
    assert result.match.winner is TeamSide.TEAM1
    assert result.match.created_at == FIXED_NOW
    assert result.match.team1.first.name == "C"
    assert memory_store.players["c"].rating == pytest.approx(1016.0)
    assert memory_store.players["d"].rating == pytest.approx(984.0)
    assert memory_store.players["c"].wins == 1
    assert memory_store.players["d"].matches_played == 1
    assert [entry.player_id for entry in memory_store.history] == ["c", "d"]


def test_doubles_submission_moves_teammates_together(memory_store, clock) -> None:
    result = submit_match(memory_store, DOUBLES, clock=clock)

    assert result.deltas.team1_delta == 16
    assert memory_store.players["a"].rating == pytest.approx(1116.0)
    assert memory_store.players["b"].rating == pytest.approx(916.0)
    assert memory_store.players["c"].rating == pytest.approx(984.0)
    assert len(memory_store.history) == 4
    verify_ledger(memory_store.history)


def test_successful_submission_records_every_transition(memory_store, clock) -> None:
    workflow = MatchSubmissionWorkflow(memory_store, clock=clock)
    workflow.submit(DOUBLES)

    assert workflow.transitions == [
        SubmissionState.PENDING,
        SubmissionState.VALIDATED,
        SubmissionState.PERSISTED,
        SubmissionState.RATING_COMPUTED,
        SubmissionState.PLAYERS_UPDATED,
        SubmissionState.HISTORY_APPENDED,
        SubmissionState.COMPLETE,
    ]


def test_workflow_is_single_use(memory_store, clock) -> None:
    workflow = MatchSubmissionWorkflow(memory_store, clock=clock)
    workflow.submit(DOUBLES)
    with pytest.raises(RuntimeError):
        workflow.submit(DOUBLES)


def test_tie_is_rejected_before_any_write(memory_store, clock) -> None:
    workflow = MatchSubmissionWorkflow(memory_store, clock=clock)
    with pytest.raises(InvalidMatch):
        workflow.submit(MatchInput(team1=("a",), team2=("b",), team1_score=15, team2_score=15))

    assert memory_store.calls == []
    assert memory_store.matches == []
    assert workflow.transitions == [SubmissionState.PENDING, SubmissionState.FAILED]


def test_future_match_date_is_rejected(memory_store, clock) -> None:
    with pytest.raises(InvalidMatch):
        submit_match(
            memory_store,
            MatchInput(
                team1=("a",),
                team2=("b",),
                team1_score=21,
                team2_score=3,
                match_date=FIXED_NOW + timedelta(days=2),
            ),
            clock=clock,
        )
    assert memory_store.matches == []


def test_unknown_player_is_rejected(memory_store, clock) -> None:
    with pytest.raises(PlayerNotFound) as excinfo:
        submit_match(
            memory_store,
            MatchInput(team1=("a",), team2=("ghost",), team1_score=21, team2_score=3),
            clock=clock,
        )
    assert excinfo.value.player_ids == ("ghost",)
    assert memory_store.matches == []


def test_atomic_store_failure_rolls_back_everything(clock) -> None:
    store = InMemoryMatchStore(
        [make_player("a"), make_player("b"), make_player("c"), make_player("d")],
        atomic=True,
    )
    store.fail_history_after = 2

    workflow = MatchSubmissionWorkflow(store, clock=clock)
    with pytest.raises(SubmissionFailed) as excinfo:
        workflow.submit(DOUBLES)

    assert excinfo.value.match_id is None
    assert excinfo.value.state is SubmissionState.PLAYERS_UPDATED
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert store.matches == []
    assert store.history == []
    assert all(player.matches_played == 0 for player in store.players.values())
    assert workflow.state is SubmissionState.FAILED


def test_failure_before_match_exists_is_total(memory_store, clock) -> None:
    memory_store.fail_insert_match = True
    with pytest.raises(SubmissionFailed) as excinfo:
        submit_match(memory_store, DOUBLES, clock=clock)
    assert excinfo.value.state is SubmissionState.VALIDATED
    assert memory_store.history == []


def test_partial_player_update_is_reported_and_retried(memory_store, clock) -> None:
    memory_store.fail_update_after = 1

    with pytest.raises(PartialWriteFailure) as excinfo:
        submit_match(memory_store, DOUBLES, clock=clock)

    failure = excinfo.value
    assert failure.match_id == "m1"
    assert failure.state is SubmissionState.RATING_COMPUTED
    assert failure.verified
    assert failure.updated_player_ids == frozenset({"a"})
    assert failure.pending_player_ids == frozenset({"b", "c", "d"})
    assert failure.pending_history_player_ids == frozenset({"a", "b", "c", "d"})
    assert "match_id=m1" in failure.detail

    result = MatchSubmissionWorkflow(memory_store, clock=clock).retry(failure)

    assert result.match.match_id == "m1"
    assert memory_store.players["a"].matches_played == 1
    assert memory_store.players["a"].rating == pytest.approx(1116.0)
    assert memory_store.players["b"].rating == pytest.approx(916.0)
    assert len(memory_store.history) == 4
    assert len(memory_store.matches) == 1
    verify_ledger(memory_store.history)


def test_partial_history_append_is_completed_by_retry(memory_store, clock) -> None:
    memory_store.fail_history_after = 2

    with pytest.raises(PartialWriteFailure) as excinfo:
        submit_match(memory_store, DOUBLES, clock=clock)

    failure = excinfo.value
    assert failure.state is SubmissionState.PLAYERS_UPDATED
    assert failure.updated_player_ids == frozenset({"a", "b", "c", "d"})
    assert failure.history_player_ids == frozenset({"a", "b"})

    workflow = MatchSubmissionWorkflow(memory_store, clock=clock)
    workflow.retry(failure)
    workflow.retry(failure)

    assert [entry.player_id for entry in memory_store.history] == ["a", "b", "c", "d"]
    assert all(player.matches_played == 1 for player in memory_store.players.values())
    assert workflow.state is SubmissionState.COMPLETE


def test_unverifiable_partial_write_is_flagged(memory_store, clock) -> None:
    memory_store.fail_update_after = 0
    original_update = memory_store.update_players

    def failing_update(players, *, match_id):
        memory_store.fail_reads = True
        original_update(players, match_id=match_id)

    memory_store.update_players = failing_update  # type: ignore[method-assign]

    with pytest.raises(PartialWriteFailure) as excinfo:
        submit_match(memory_store, DOUBLES, clock=clock)

    assert not excinfo.value.verified
    assert excinfo.value.updated_player_ids == frozenset()


def test_retry_keeps_matches_played_after_the_failure(memory_store, clock) -> None:
    memory_store.fail_update_after = 1
    with pytest.raises(PartialWriteFailure) as excinfo:
        submit_match(
            memory_store,
            MatchInput(team1=("a",), team2=("b",), team1_score=21, team2_score=11),
            clock=clock,
        )
    failure = excinfo.value
    assert failure.updated_player_ids == frozenset({"a"})

    submit_match(
        memory_store,
        MatchInput(team1=("b",), team2=("c",), team1_score=21, team2_score=19),
        clock=clock,
    )
    assert memory_store.players["b"].rating == pytest.approx(920.0)
    assert memory_store.players["b"].matches_played == 1

    workflow = MatchSubmissionWorkflow(memory_store, clock=clock)
    result = workflow.retry(failure)

    ben = memory_store.players["b"]
    assert ben.rating == pytest.approx(912.0)
    assert ben.matches_played == 2
    assert ben.wins == 1
    assert ben.streak_count == 0
    assert memory_store.players["a"].matches_played == 1
    assert memory_store.list_updated_player_ids("m1") == frozenset({"a", "b"})

    m1_entries = {entry.player_id: entry for entry in memory_store.list_match_history(match_id="m1")}
    assert (m1_entries["b"].rating_before, m1_entries["b"].rating_after) == (920, 912)
    assert m1_entries["b"].rating_change == -8
    assert (m1_entries["a"].rating_before, m1_entries["a"].rating_after) == (1100, 1108)
    assert [entry.player_id for entry in result.history_entries] == ["a", "b"]
    verify_ledger(memory_store.history)
    assert workflow.state is SubmissionState.COMPLETE


def test_retry_after_completion_writes_nothing(memory_store, clock) -> None:
    memory_store.fail_history_after = 0
    with pytest.raises(PartialWriteFailure) as excinfo:
        submit_match(memory_store, DOUBLES, clock=clock)

    MatchSubmissionWorkflow(memory_store, clock=clock).retry(excinfo.value)
    memory_store.calls.clear()
    MatchSubmissionWorkflow(memory_store, clock=clock).retry(excinfo.value)

    assert "update_players" not in memory_store.calls
    assert "insert_history_entries" not in memory_store.calls
    assert all(player.matches_played == 1 for player in memory_store.players.values())
