#!/usr/bin/env python3
"""Show the leaderboard, recent matches and the rating trend of tracked players."""

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
from domain.statistics import rank_players, recent_matches, summarize_leaderboard
from domain.trend import DASHBOARD_RANKS, build_rating_trend, tracked_players
from repositories import SqlAlchemyMatchStore, ensure_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    help="Print the current leaderboard.",
)


@app.command()
def show_leaderboard(
    recent: Annotated[
        int,
        typer.Option("--recent", help="Number of recent matches to list."),
    ] = 5,
    trend_start: Annotated[
        int,
        typer.Option("--trend-start", help="First leaderboard rank (0-based) to chart."),
    ] = DASHBOARD_RANKS[0],
    trend_stop: Annotated[
        int,
        typer.Option("--trend-stop", help="Leaderboard rank (0-based, exclusive) to stop charting at."),
    ] = DASHBOARD_RANKS[1],
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to the local clubrank postgres instance."),
    ] = DEFAULT_DB_URL,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Python logging level (DEBUG, INFO, WARNING, ...)."),
    ] = "WARNING",
) -> None:
    """Print ranked players, a summary line, recent matches and the rating trend."""
    if recent < 0:
        raise typer.BadParameter("--recent must be >= 0")
    if trend_start < 0 or trend_stop < trend_start:
        raise typer.BadParameter("--trend-start/--trend-stop must satisfy 0 <= start <= stop")
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_db_engine(db_url)
    ensure_schema(engine)
    with session_scope(create_session_factory(engine)) as session:
        store = SqlAlchemyMatchStore(session)
        players = store.list_players()
        matches = store.list_matches()
        history = store.list_match_history()

    if not players:
        typer.echo("No players registered.")
        return

    summary = summarize_leaderboard(players, matches)
    top = summary.top_player
    typer.echo(
        f"players={summary.total_players} matches={summary.total_matches} "
        f"average_rating={summary.average_rating} "
        f"top={top.name if top is not None else '-'}"
    )
    for index, player in enumerate(rank_players(players), start=1):
        typer.echo(
            f"{index:2d}. {player.name:<20} rating={player.display_rating:5d} "
            f"W/L={player.wins}/{player.losses} win_rate={player.win_rate:6.1%} "
            f"streak={player.streak_count}"
        )

    if recent and matches:
        typer.echo("")
        typer.echo("recent matches:")
        for match in recent_matches(matches, limit=recent):
            team1 = " & ".join(ref.name for ref in match.team1.players)
            team2 = " & ".join(ref.name for ref in match.team2.players)
            typer.echo(
                f"  {match.created_at:%Y-%m-%d %H:%M} {team1} {match.team1_score}-"
                f"{match.team2_score} {team2}"
            )

    tracked = tracked_players(players, trend_start, trend_stop)
    rows = build_rating_trend(history, [player.player_id for player in tracked])
    if tracked and rows:
        typer.echo("")
        typer.echo("rating trend: " + ", ".join(player.name for player in tracked))
        for row in rows:
            cells = " ".join(
                f"{'-' if row.ratings[player.player_id] is None else row.ratings[player.player_id]:>6}"
                for player in tracked
            )
            typer.echo(f"  {row.day.isoformat()} {cells}")


if __name__ == "__main__":
    app()
