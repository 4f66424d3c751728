"""Error taxonomy for match validation, submission and statistics."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.submission import SubmissionPlan, SubmissionState


class ClubRankError(Exception):
    """Base class for all domain errors."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidMatch(ClubRankError, ValueError):
    """Raised for tied, out-of-range or inconsistent scores."""


class InvalidRoster(ClubRankError, ValueError):
    """Raised for wrong team sizes or players listed on both teams."""


class PlayerNotFound(InvalidRoster):
    def __init__(self, player_ids: Iterable[str]) -> None:
        self.player_ids = tuple(sorted(player_ids))
        super().__init__(f"unknown player ids: {', '.join(self.player_ids)}")


class NotEnoughData(ClubRankError):
    """Raised only by strict callers; aggregations normally return empty results."""


class SubmissionFailed(ClubRankError):
    """Nothing from the submission was persisted."""

    def __init__(self, detail: str, *, state: SubmissionState) -> None:
        super().__init__(detail)
        self.state = state
        self.match_id: str | None = None


class PartialWriteFailure(ClubRankError):
    """The match exists but some player or ledger writes are missing.

    Carries the planned outcome so the submission can be completed with
    ``MatchSubmissionWorkflow.retry``.
    """

    def __init__(
        self,
        *,
        match_id: str,
        state: SubmissionState,
        plan: SubmissionPlan,
        updated_player_ids: frozenset[str],
        history_player_ids: frozenset[str],
        verified: bool = True,
    ) -> None:
        self.match_id = match_id
        self.state = state
        self.plan = plan
        self.updated_player_ids = updated_player_ids
        self.history_player_ids = history_player_ids
        self.verified = verified
        pending_players = sorted(plan.participant_ids - updated_player_ids)
        pending_history = sorted(plan.participant_ids - history_player_ids)
        super().__init__(
            f"match_id={match_id} partially written after state={state.value}: "
            f"pending_player_updates={pending_players} pending_history={pending_history}"
            + ("" if verified else " (write status could not be verified)")
        )

    @property
    def pending_player_ids(self) -> frozenset[str]:
        return self.plan.participant_ids - self.updated_player_ids

    @property
    def pending_history_player_ids(self) -> frozenset[str]:
        return self.plan.participant_ids - self.history_player_ids


__all__ = [
    "ClubRankError",
    "InvalidMatch",
    "InvalidRoster",
    "NotEnoughData",
    "PartialWriteFailure",
    "PlayerNotFound",
    "SubmissionFailed",
]
