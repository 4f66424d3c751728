"""Load league definitions (rating, match and statistics rules) from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

from domain.ratings.elo.calculator import EloParameters
from domain.validation import MatchRules

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "default.toml"


@dataclass(frozen=True)
class StatisticsRules:
    min_rivalry_matches: int = 2
    min_synergy_matches: int = 3
    top_n: int = 2


@dataclass(frozen=True)
class LeagueConfig:
    """Everything needed to rate and summarise one league."""

    name: str
    description: str | None
    file_path: Path
    parameters: EloParameters = field(default_factory=EloParameters)
    match_rules: MatchRules = field(default_factory=MatchRules)
    statistics: StatisticsRules = field(default_factory=StatisticsRules)


def default_league_config() -> LeagueConfig:
    return LeagueConfig(name="default", description=None, file_path=DEFAULT_CONFIG_PATH)


def load_league_config(file_path: Path | None = None) -> LeagueConfig:
    """Load one league config; the bundled default when no path is given."""
    return _read_league_file(file_path or DEFAULT_CONFIG_PATH)


def load_league_configs(config_dir: Path) -> list[LeagueConfig]:
    """Load and validate all league TOML config files in a directory."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    configs = [_read_league_file(path) for path in config_files]
    names = [config.name for config in configs]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate league names found in {config_dir}: {names}")
    return configs


def _read_league_file(file_path: Path) -> LeagueConfig:
    if not file_path.is_file():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    with file_path.open("rb") as file:
        return _parse_league_config(tomllib.load(file), file_path)


def _parse_league_config(raw: dict[str, Any], file_path: Path) -> LeagueConfig:
    league_raw = raw.get("league", {})
    elo_raw = raw.get("elo", {})
    match_raw = raw.get("match", {})
    statistics_raw = raw.get("statistics", {})

    name = str(league_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [league].name is required")

    description_value = league_raw.get("description")
    description = None if description_value is None else str(description_value)

    parameters = EloParameters(
        initial_rating=float(elo_raw.get("initial_rating", 1000.0)),
        k_factor=float(elo_raw.get("k_factor", 32.0)),
        scale_factor=float(elo_raw.get("scale_factor", 400.0)),
    )
    match_rules = MatchRules(
        min_score=int(match_raw.get("min_score", 0)),
        max_score=int(match_raw.get("max_score", 30)),
        allow_future_dates=bool(match_raw.get("allow_future_dates", False)),
    )
    statistics = StatisticsRules(
        min_rivalry_matches=int(statistics_raw.get("min_rivalry_matches", 2)),
        min_synergy_matches=int(statistics_raw.get("min_synergy_matches", 3)),
        top_n=int(statistics_raw.get("top_n", 2)),
    )
    _validate(file_path=file_path, parameters=parameters, match_rules=match_rules, statistics=statistics)

    return LeagueConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
        match_rules=match_rules,
        statistics=statistics,
    )


def _validate(
    *,
    file_path: Path,
    parameters: EloParameters,
    match_rules: MatchRules,
    statistics: StatisticsRules,
) -> None:
    if parameters.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].k_factor must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if match_rules.min_score < 0:
        raise ValueError(f"{file_path}: [match].min_score must be >= 0")
    if match_rules.max_score <= match_rules.min_score:
        raise ValueError(f"{file_path}: [match].max_score must be > min_score")
    if statistics.min_rivalry_matches < 1:
        raise ValueError(f"{file_path}: [statistics].min_rivalry_matches must be >= 1")
    if statistics.min_synergy_matches < 1:
        raise ValueError(f"{file_path}: [statistics].min_synergy_matches must be >= 1")
    if statistics.top_n <= 0:
        raise ValueError(f"{file_path}: [statistics].top_n must be > 0")


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "LeagueConfig",
    "StatisticsRules",
    "default_league_config",
    "load_league_config",
    "load_league_configs",
]
