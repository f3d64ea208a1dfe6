"""
Head-to-Head Service - pairwise records between two teams.

The record is rebuilt from the games on every call. After computing, the
canonical row in ``head_to_head`` is refreshed in a separate transaction;
if that write fails the caller still gets the computed record.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select

from config import HEAD_TO_HEAD, HeadToHeadSettings
from engine.head_to_head import HeadToHeadSummary, canonical_pair, summarize_pair
from engine.streaks import winner_of
from exceptions import ConstraintViolation, StoreError, ValidationError
from models.base import Database
from models.ranking import HeadToHeadSnapshot
from models.schemas import HeadToHeadResponse, HeadToHeadStreak, RecentGame, TeamSide
from services.event_bus import EventBus
from services.queries import GameFilter
from services.roster import require_team

logger = logging.getLogger(__name__)


class HeadToHeadService:
    """Computes and caches head-to-head records."""

    def __init__(self, db: Database, event_bus: Optional[EventBus] = None,
                 settings: HeadToHeadSettings = HEAD_TO_HEAD):
        self.db = db
        self.event_bus = event_bus
        self.settings = settings

    def get_head_to_head(self, team_a: int, team_b: int,
                         limit: Optional[int] = None) -> HeadToHeadResponse:
        """
        Record between two teams, oriented so team1 is ``team_a``.

        Args:
            limit: Number of recent games to list (the totals always cover all games)

        Raises:
            SameTeam: team_a == team_b
            TeamNotFound: either team does not exist
        """
        canonical_pair(team_a, team_b)
        limit = self.settings.default_recent_limit if limit is None else limit
        if limit < 0:
            raise ValidationError("limit cannot be negative")

        with self.db.session() as session:
            first = require_team(session, team_a)
            second = require_team(session, team_b)
            games = session.scalars(GameFilter(team_id=team_a, opponent_id=team_b).statement()).all()

            summary = summarize_pair(team_a, team_b, games)
            recent = [
                RecentGame(
                    id=g.id,
                    home_team_id=g.home_team_id,
                    away_team_id=g.away_team_id,
                    home_score=g.home_score,
                    away_score=g.away_score,
                    played_at=g.played_at,
                    winner_team_id=winner_of(g.home_team_id, g.away_team_id,
                                             g.home_score, g.away_score),
                )
                for g in games[:limit]
            ]
            names = {first.id: first.name, second.id: second.name}

        self._write_cache(summary)
        return self._oriented(summary, team_a, team_b, names, recent)

    def _oriented(self, summary: HeadToHeadSummary, team_a: int, team_b: int,
                  names: dict[int, str], recent: list[RecentGame]) -> HeadToHeadResponse:
        wins_a, goals_a = summary.side(team_a)
        wins_b, goals_b = summary.side(team_b)

        streak = None
        if summary.streak_team_id is not None:
            streak = HeadToHeadStreak(team_id=summary.streak_team_id, count=summary.streak_count)

        return HeadToHeadResponse(
            pair_key=summary.pair_key,
            team1=TeamSide(team_id=team_a, team_name=names.get(team_a), wins=wins_a, goals=goals_a),
            team2=TeamSide(team_id=team_b, team_name=names.get(team_b), wins=wins_b, goals=goals_b),
            total_games=summary.total_games,
            draws=summary.draws,
            last_game_id=summary.last_game_id,
            last_game_date=summary.last_game_date,
            current_streak=streak,
            recent_games=recent,
        )

    def _write_cache(self, summary: HeadToHeadSummary) -> None:
        """Refresh the cached row for the pair. Failures are logged, not raised."""
        try:
            with self.db.session() as session:
                snapshot = session.scalars(
                    select(HeadToHeadSnapshot).where(
                        HeadToHeadSnapshot.team1_id == summary.team1_id,
                        HeadToHeadSnapshot.team2_id == summary.team2_id,
                    )
                ).first()
                if snapshot is None:
                    snapshot = HeadToHeadSnapshot(team1_id=summary.team1_id, team2_id=summary.team2_id)
                    session.add(snapshot)

                snapshot.total_games = summary.total_games
                snapshot.team1_wins = summary.team1_wins
                snapshot.team2_wins = summary.team2_wins
                snapshot.draws = summary.draws
                snapshot.team1_goals = summary.team1_goals
                snapshot.team2_goals = summary.team2_goals
                snapshot.last_game_id = summary.last_game_id
                snapshot.last_game_date = summary.last_game_date
                snapshot.streak_team_id = summary.streak_team_id
                snapshot.streak_count = summary.streak_count
                snapshot.updated_at = datetime.now(timezone.utc)
        except (StoreError, ConstraintViolation) as exc:
            logger.warning("Could not cache head-to-head %s: %s", summary.pair_key, exc)
            if self.event_bus is not None:
                self.event_bus.store_error.emit(str(exc))
