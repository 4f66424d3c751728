#!/usr/bin/env python3
"""Show the closest singles rivalries and the strongest doubles partnerships."""

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
from domain.statistics import FullScanStatistics
from repositories import SqlAlchemyMatchStore, ensure_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    help="Print rivalry and synergy rankings.",
)


@app.command()
def show_statistics(
    top_n: Annotated[
        int | None,
        typer.Option("--top-n", help="Rows per ranking. Defaults to the league config."),
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
    ] = "WARNING",
) -> None:
    """Rank rivalries by closest average margin and partnerships by synergy score."""
    if top_n is not None and top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    rules = load_league_config(config).statistics

    engine = create_db_engine(db_url)
    ensure_schema(engine)
    with session_scope(create_session_factory(engine)) as session:
        statistics = FullScanStatistics(
            SqlAlchemyMatchStore(session),
            min_rivalry_matches=rules.min_rivalry_matches,
            min_synergy_matches=rules.min_synergy_matches,
            top_n=top_n or rules.top_n,
        )
        rivalries = statistics.rivalries()
        synergies = statistics.synergies()

    typer.echo(f"rivalries (min {rules.min_rivalry_matches} singles matches):")
    if not rivalries:
        typer.echo("  not enough data")
    for rivalry in rivalries:
        typer.echo(
            f"  {rivalry.player1.name} vs {rivalry.player2.name}: "
            f"matches={rivalry.match_count} avg_diff={rivalry.average_score_difference:.1f} "
            f"record={rivalry.player1_wins}-{rivalry.player2_wins}"
        )

    typer.echo(f"synergies (min {rules.min_synergy_matches} doubles matches):")
    if not synergies:
        typer.echo("  not enough data")
    for synergy in synergies:
        typer.echo(
            f"  {synergy.player1.name} & {synergy.player2.name}: "
            f"score={synergy.synergy_score:.3f} win_rate={synergy.win_rate:.1%} "
            f"avg_diff={synergy.average_score_difference:+.1f} matches={synergy.matches_played}"
        )


if __name__ == "__main__":
    app()
