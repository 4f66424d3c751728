#!/usr/bin/env python3
"""Record one singles or doubles match and apply the rating update."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory, session_scope
from domain.common import MatchInput
from domain.config import load_league_config
from domain.errors import InvalidMatch, InvalidRoster, PartialWriteFailure, SubmissionFailed
from domain.submission import submit_match
from repositories import SqlAlchemyMatchStore, ensure_schema, find_players_by_name

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Record a match result.",
)


def _resolve_team(label: str, names: list[str], known: dict[str, str]) -> tuple[str, ...]:
    missing = [name for name in names if name not in known]
    if missing:
        raise typer.BadParameter(f"unknown players: {', '.join(missing)}", param_hint=label)
    return tuple(known[name] for name in names)


@app.command()
def record_match(
    team1: Annotated[
        list[str],
        typer.Option("--team1", help="Player name on team 1; repeat for doubles."),
    ],
    team2: Annotated[
        list[str],
        typer.Option("--team2", help="Player name on team 2; repeat for doubles."),
    ],
    team1_score: Annotated[int, typer.Option("--team1-score", help="Points scored by team 1.")],
    team2_score: Annotated[int, typer.Option("--team2-score", help="Points scored by team 2.")],
    played_at: Annotated[
        datetime | None,
        typer.Option("--played-at", help="Match time (UTC). Defaults to now."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="League TOML config. Defaults to configs/default.toml."),
    ] = None,
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local clubrank postgres instance."),
    ] = DEFAULT_DB_URL,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Python logging level (DEBUG, INFO, WARNING, ...)."),
    ] = "INFO",
) -> None:
    """Validate, store and rate a match; prints each participant's rating change."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    league = load_league_config(config)

    engine = create_db_engine(db_url)
    ensure_schema(engine)
    with session_scope(create_session_factory(engine)) as session:
        known = {name: player.player_id for name, player in find_players_by_name(session, [*team1, *team2]).items()}
        match_input = MatchInput(
            team1=_resolve_team("--team1", team1, known),
            team2=_resolve_team("--team2", team2, known),
            team1_score=team1_score,
            team2_score=team2_score,
            match_date=played_at,
        )
        store = SqlAlchemyMatchStore(session)
        try:
            result = submit_match(
                store,
                match_input,
                params=league.parameters,
                rules=league.match_rules,
            )
        except (InvalidMatch, InvalidRoster) as exc:
            raise typer.BadParameter(exc.detail) from exc
        except (SubmissionFailed, PartialWriteFailure) as exc:
            typer.echo(exc.detail, err=True)
            raise typer.Exit(code=1) from exc

    match = result.match
    typer.echo(
        f"match_id={match.match_id} {match.team1_score}-{match.team2_score} "
        f"winner={match.winner.value} team1_delta={result.deltas.team1_delta:+d} "
        f"team2_delta={result.deltas.team2_delta:+d}"
    )
    names = {ref.player_id: ref.name for ref in (*match.team1.players, *match.team2.players)}
    for entry in result.history_entries:
        typer.echo(
            f"  {names[entry.player_id]:<20} {entry.rating_before:5d} -> {entry.rating_after:5d} "
            f"({entry.rating_change:+d})"
        )


if __name__ == "__main__":
    app()
