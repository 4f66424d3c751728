#!/usr/bin/env python3
"""Create the schema and register players."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory, session_scope
from domain.config import load_league_config
from repositories import add_player as add_player_record
from repositories import ensure_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Schema and player management commands.",
)


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Python logging level (DEBUG, INFO, WARNING, ...)."),
    ] = "WARNING",
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("init-db")
def init_db(
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local clubrank postgres instance."),
    ] = DEFAULT_DB_URL,
) -> None:
    """Create players, matches and match_history tables if missing."""
    ensure_schema(create_db_engine(db_url))
    typer.echo("schema ready")


@app.command("add-player")
def add_player(
    name: Annotated[str, typer.Argument(help="Display name; must be unique.")],
    rating: Annotated[
        float | None,
        typer.Option("--rating", help="Starting rating. Defaults to the league's initial rating."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="League TOML config. Defaults to configs/default.toml."),
    ] = None,
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local clubrank postgres instance."),
    ] = DEFAULT_DB_URL,
) -> None:
    """Register a new player at the league's initial rating."""
    league = load_league_config(config)
    starting_rating = league.parameters.initial_rating if rating is None else rating

    engine = create_db_engine(db_url)
    ensure_schema(engine)
    with session_scope(create_session_factory(engine)) as session:
        try:
            player = add_player_record(session, name, rating=starting_rating)
            session.commit()
        except ValueError as exc:
            session.rollback()
            raise typer.BadParameter(str(exc), param_hint="NAME") from exc

    typer.echo(f"added {player.name} id={player.player_id} rating={player.display_rating}")


if __name__ == "__main__":
    app()
