"""Match submission workflow.

Pending -> Validated -> Persisted -> RatingComputed -> PlayersUpdated ->
HistoryAppended -> Complete, or Failed from any state.

Steps 2-5 run inside ``MatchStore.transaction()``, rating from participant
rows re-read and locked inside that transaction. On an atomic store a
failure rolls everything back and surfaces as ``SubmissionFailed``. On a
non-atomic store the workflow reconciles against the persisted match id and
raises ``PartialWriteFailure``; ``retry`` completes the missing writes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from domain.common import (
    Match,
    MatchDraft,
    MatchHistoryEntry,
    MatchInput,
    Player,
    TeamRoster,
    TeamSide,
)
from domain.errors import ClubRankError, PartialWriteFailure, PlayerNotFound, SubmissionFailed
from domain.ledger import apply_match_to_player, build_history_entries, build_history_entry
from domain.protocol import MatchStore
from domain.ratings.elo.calculator import (
    EloParameters,
    MatchRatingDeltas,
    TeamEloCalculator,
    calculate_team_rating,
)
from domain.validation import MatchRules, validate_match_input

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    PERSISTED = "persisted"
    RATING_COMPUTED = "rating_computed"
    PLAYERS_UPDATED = "players_updated"
    HISTORY_APPENDED = "history_appended"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionPlan:
    """Every write a submission intends to make, keyed by the persisted match."""

    match: Match
    deltas: MatchRatingDeltas
    players_before: tuple[Player, ...]
    updated_players: tuple[Player, ...]
    history_entries: tuple[MatchHistoryEntry, ...]

    @property
    def participant_ids(self) -> frozenset[str]:
        return frozenset(player.player_id for player in self.players_before)


@dataclass(frozen=True)
class SubmissionResult:
    match: Match
    history_entries: tuple[MatchHistoryEntry, ...]
    updated_players: tuple[Player, ...]
    deltas: MatchRatingDeltas


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _load_participants(
    store: MatchStore,
    player_ids: Sequence[str],
    *,
    for_update: bool = False,
) -> dict[str, Player]:
    players = store.get_players(list(player_ids), for_update=for_update)
    missing = set(player_ids) - set(players)
    if missing:
        raise PlayerNotFound(missing)
    return players


class MatchSubmissionWorkflow:
    """Single-use orchestrator for one match submission."""

    def __init__(
        self,
        store: MatchStore,
        *,
        params: EloParameters | None = None,
        rules: MatchRules | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.calculator = TeamEloCalculator(params)
        self.rules = rules or MatchRules()
        self._clock = clock or _utcnow
        self.state = SubmissionState.PENDING
        self.transitions: list[SubmissionState] = [SubmissionState.PENDING]
        self.match: Match | None = None

    def _advance(self, state: SubmissionState) -> None:
        self.state = state
        self.transitions.append(state)
        logger.debug(
            "submission state=%s match_id=%s",
            state.value,
            self.match.match_id if self.match is not None else None,
        )

    def submit(self, match_input: MatchInput) -> SubmissionResult:
        if self.state is not SubmissionState.PENDING:
            raise RuntimeError(f"workflow already used (state={self.state.value})")

        try:
            draft = self._validate(match_input)
        except ClubRankError as exc:
            self._advance(SubmissionState.FAILED)
            logger.info("rejected match submission: %s", exc.detail)
            raise
        self._advance(SubmissionState.VALIDATED)

        players: dict[str, Player] = {}
        plan: SubmissionPlan | None = None
        try:
            with self.store.transaction():
                players = _load_participants(
                    self.store,
                    [*draft.team1.player_ids, *draft.team2.player_ids],
                    for_update=True,
                )
                self.match = self.store.insert_match(draft)
                self._advance(SubmissionState.PERSISTED)

                plan = self.plan(self.match, players)
                self._advance(SubmissionState.RATING_COMPUTED)

                self.store.update_players(plan.updated_players, match_id=self.match.match_id)
                self._advance(SubmissionState.PLAYERS_UPDATED)

                self.store.insert_history_entries(plan.history_entries)
                self._advance(SubmissionState.HISTORY_APPENDED)
        except Exception as exc:
            failed_state = self.state
            self._advance(SubmissionState.FAILED)
            if self.match is None or self.store.atomic:
                logger.error(
                    "match submission failed at state=%s; nothing persisted: %s",
                    failed_state.value,
                    exc,
                )
                raise SubmissionFailed(
                    f"match submission failed at state={failed_state.value}: {exc}",
                    state=failed_state,
                ) from exc

            if plan is None:
                plan = self.plan(self.match, players)
            failure = self._reconcile(plan, failed_state)
            logger.error("partial match submission: %s", failure.detail)
            raise failure from exc

        self._advance(SubmissionState.COMPLETE)
        logger.info(
            "recorded match_id=%s %s %d-%d team1_delta=%+d team2_delta=%+d",
            plan.match.match_id,
            plan.match.winner.value,
            plan.match.team1_score,
            plan.match.team2_score,
            plan.deltas.team1_delta,
            plan.deltas.team2_delta,
        )
        return SubmissionResult(
            match=plan.match,
            history_entries=plan.history_entries,
            updated_players=plan.updated_players,
            deltas=plan.deltas,
        )

    def retry(self, failure: PartialWriteFailure) -> SubmissionResult:
        """Idempotently apply whatever writes ``failure`` reports as missing.

        Whether a participant's update landed is read from the store's
        per-match marker, never inferred from counters. A participant still
        missing the update is re-rated from their current standing with the
        match's team delta, so matches they played since the failure are kept.
        """
        plan = failure.plan
        match = plan.match
        self.match = match
        before = {player.player_id: player for player in plan.players_before}
        updated = {player.player_id: player for player in plan.updated_players}
        entries = {entry.player_id: entry for entry in plan.history_entries}
        try:
            with self.store.transaction():
                applied = self.store.list_updated_player_ids(match.match_id)
                written = {
                    entry.player_id
                    for entry in self.store.list_match_history(match_id=match.match_id)
                }
                pending_ids = sorted(plan.participant_ids - applied)
                current = _load_participants(self.store, pending_ids, for_update=True)

                pending_players: list[Player] = []
                for side in (TeamSide.TEAM1, TeamSide.TEAM2):
                    delta = plan.deltas.for_side(side).delta
                    for player_id in match.roster(side).player_ids:
                        if player_id in applied:
                            continue
                        player = current[player_id]
                        if player.matches_played != before[player_id].matches_played:
                            logger.warning(
                                "player_id=%s played since match_id=%s failed; "
                                "re-rating from current standing",
                                player_id,
                                match.match_id,
                            )
                        updated[player_id] = apply_match_to_player(
                            player,
                            delta=delta,
                            won=match.winner is side,
                            played_at=max(match.created_at, player.last_played_at or match.created_at),
                        )
                        entries[player_id] = build_history_entry(match, player, side, delta)
                        pending_players.append(updated[player_id])

                if pending_players:
                    self.store.update_players(pending_players, match_id=match.match_id)
                self._advance(SubmissionState.PLAYERS_UPDATED)

                pending_history = [
                    entries[entry.player_id]
                    for entry in plan.history_entries
                    if entry.player_id not in written
                ]
                if pending_history:
                    self.store.insert_history_entries(pending_history)
                self._advance(SubmissionState.HISTORY_APPENDED)
        except Exception as exc:
            failed_state = self.state
            self._advance(SubmissionState.FAILED)
            retry_failure = self._reconcile(plan, failed_state)
            logger.error("retry incomplete: %s", retry_failure.detail)
            raise retry_failure from exc

        self._advance(SubmissionState.COMPLETE)
        logger.info(
            "completed match_id=%s on retry: players=%d history=%d",
            match.match_id,
            len(pending_players),
            len(pending_history),
        )
        return SubmissionResult(
            match=match,
            history_entries=tuple(entries[entry.player_id] for entry in plan.history_entries),
            updated_players=tuple(updated[player.player_id] for player in plan.updated_players),
            deltas=plan.deltas,
        )

    def plan(self, match: Match, players: Mapping[str, Player]) -> SubmissionPlan:
        """Compute every player and ledger write for a persisted match."""
        deltas = self.calculator.compute_deltas(
            calculate_team_rating([players[pid].rating for pid in match.team1.player_ids]),
            calculate_team_rating([players[pid].rating for pid in match.team2.player_ids]),
            match.winner,
        )

        players_before: list[Player] = []
        updated_players: list[Player] = []
        for side in (TeamSide.TEAM1, TeamSide.TEAM2):
            delta = deltas.for_side(side).delta
            for player_id in match.roster(side).player_ids:
                before = players[player_id]
                players_before.append(before)
                updated_players.append(
                    apply_match_to_player(
                        before,
                        delta=delta,
                        won=match.winner is side,
                        played_at=match.created_at,
                    )
                )

        return SubmissionPlan(
            match=match,
            deltas=deltas,
            players_before=tuple(players_before),
            updated_players=tuple(updated_players),
            history_entries=tuple(build_history_entries(match, players, deltas)),
        )

    def _validate(self, match_input: MatchInput) -> MatchDraft:
        winner, match_date = validate_match_input(match_input, now=self._clock(), rules=self.rules)
        players = _load_participants(self.store, [*match_input.team1, *match_input.team2])
        return MatchDraft(
            team1=TeamRoster.from_players([players[pid].ref() for pid in match_input.team1]),
            team2=TeamRoster.from_players([players[pid].ref() for pid in match_input.team2]),
            team1_score=match_input.team1_score,
            team2_score=match_input.team2_score,
            winner=winner,
            created_at=match_date,
        )

    def _reconcile(self, plan: SubmissionPlan, state: SubmissionState) -> PartialWriteFailure:
        match_id = plan.match.match_id
        try:
            applied = self.store.list_updated_player_ids(match_id)
            history = self.store.list_match_history(match_id=match_id)
        except Exception:
            logger.exception("could not verify writes for match_id=%s", match_id)
            return PartialWriteFailure(
                match_id=match_id,
                state=state,
                plan=plan,
                updated_player_ids=frozenset(),
                history_player_ids=frozenset(),
                verified=False,
            )

        return PartialWriteFailure(
            match_id=match_id,
            state=state,
            plan=plan,
            updated_player_ids=frozenset(applied) & plan.participant_ids,
            history_player_ids=frozenset(entry.player_id for entry in history),
        )


def submit_match(
    store: MatchStore,
    match_input: MatchInput,
    *,
    params: EloParameters | None = None,
    rules: MatchRules | None = None,
    clock: Callable[[], datetime] | None = None,
) -> SubmissionResult:
    """Validate, persist and rate one match."""
    workflow = MatchSubmissionWorkflow(store, params=params, rules=rules, clock=clock)
    return workflow.submit(match_input)


__all__ = [
    "MatchSubmissionWorkflow",
    "SubmissionPlan",
    "SubmissionResult",
    "SubmissionState",
    "submit_match",
]
