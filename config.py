"""
Competition Engine Configuration

Centralized settings, paths, and constants for the engine.
"""

import logging
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

import appdirs


# Application info
APP_NAME = "CompetitionEngine"
APP_AUTHOR = "KorfballStats"
APP_VERSION = "1.0.0"

DATABASE_URL_ENV = "COMPETITION_ENGINE_DATABASE_URL"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores the database)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Config directory
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Cache directory
    cache_dir: Path = Path(appdirs.user_cache_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def database(self) -> Path:
        return self.data_dir / "competitions.db"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "competition_engine.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.config_dir, self.cache_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class ScoringSettings:
    """League scoring rules."""
    # Points awarded per result. This is the only place the value lives.
    points_per_win: int = 3
    points_per_draw: int = 1
    points_per_loss: int = 0

    # Number of results kept in the form string
    form_length: int = 5


@dataclass(frozen=True)
class RankingSettings:
    """Team strength rating settings."""
    base_rating: float = 1000.0

    # 100% wins adds +200
    win_rate_weight: float = 200.0

    # +1 goal per game adds +50
    goal_diff_weight: float = 50.0

    # Number of most recent games inspected for streaks
    streak_window: int = 10

    rating_precision: int = 2
    default_limit: int = 20

    compare_min_teams: int = 2
    compare_max_teams: int = 10


@dataclass(frozen=True)
class HeadToHeadSettings:
    """Head-to-head settings."""
    default_recent_limit: int = 10


@dataclass(frozen=True)
class StoreSettings:
    """Relational store settings."""
    url: Optional[str] = field(default_factory=lambda: os.getenv(DATABASE_URL_ENV))
    echo: bool = False

    def resolve_url(self, paths: "Paths") -> str:
        """Explicit URL if configured, otherwise the SQLite file in the data dir."""
        if self.url:
            return self.url
        return f"sqlite:///{paths.database}"


# Shared immutable settings
PATHS = Paths()
SCORING = ScoringSettings()
RANKING = RankingSettings()
HEAD_TO_HEAD = HeadToHeadSettings()
STORE = StoreSettings()

POINTS_PER_WIN = SCORING.points_per_win

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def init_config() -> None:
    """Initialize configuration and create required directories."""
    PATHS.ensure_directories()


def configure_logging(level: int = logging.INFO, to_file: bool = False) -> None:
    """
    Configure root logging for the engine.

    Args:
        level: Root log level
        to_file: Also write to the log file in the log directory
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if to_file:
        PATHS.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(PATHS.log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
