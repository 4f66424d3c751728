#!/usr/bin/env python3
"""Split a selection of players into two teams of similar total rating."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory, session_scope
from domain.balancing import TeamProjection, balance_selection
from domain.errors import NotEnoughData
from repositories import SqlAlchemyMatchStore, ensure_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Balance teams from a player selection.",
)


def _describe(label: str, team: TeamProjection) -> str:
    names = ", ".join(f"{player.name} ({player.display_rating})" for player in team.players)
    return (
        f"{label}: {names}\n"
        f"  total={team.total_rating:.0f} mean={team.mean_rating:.0f} "
        f"win_probability={team.win_probability:.1%} elo_expected={team.rating_expected_score:.1%}"
    )


@app.command()
def balance_teams(
    names: Annotated[list[str], typer.Argument(help="Names of the players to split.")],
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local clubrank postgres instance."),
    ] = DEFAULT_DB_URL,
) -> None:
    """Snake-draft the selected players into team A and team B."""
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    with session_scope(create_session_factory(engine)) as session:
        players = SqlAlchemyMatchStore(session).list_players()

    by_name = {player.name: player for player in players}
    unknown = [name for name in names if name not in by_name]
    if unknown:
        raise typer.BadParameter(f"unknown players: {', '.join(unknown)}", param_hint="NAMES")

    try:
        teams = balance_selection(players, [by_name[name].player_id for name in names], strict=True)
    except NotEnoughData as exc:
        raise typer.BadParameter(exc.detail, param_hint="NAMES") from exc

    typer.echo(_describe("team A", teams.team_a))
    typer.echo(_describe("team B", teams.team_b))
    typer.echo(f"rating gap={teams.rating_gap:.0f}")


if __name__ == "__main__":
    app()
