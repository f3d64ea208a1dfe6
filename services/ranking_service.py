"""
Ranking Service - team strength ratings and streaks.

Rankings are always computed from the games feed. The ``team_rankings``
table is a cache written by ``recalculate_rankings`` and cleared when a
game is corrected; nothing here reads it back as truth.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from config import RANKING, RankingSettings
from engine.rating import TeamRecord, rank_records, summarize_games
from exceptions import ConstraintViolation, InvalidComparison, StoreError, TeamNotFound
from models.base import Database
from models.game import Game
from models.ranking import TeamRankingSnapshot
from models.schemas import StreakInfo, TeamComparison, TeamRankingResponse
from models.team import Team
from services.event_bus import EventBus
from services.queries import GameFilter

logger = logging.getLogger(__name__)


def ranking_response(record: TeamRecord, team_name: Optional[str] = None,
                     season_id: Optional[int] = None, overall_rank: Optional[int] = None,
                     settings: RankingSettings = RANKING) -> TeamRankingResponse:
    streaks = record.streaks(settings)
    return TeamRankingResponse(
        team_id=record.team_id,
        team_name=team_name,
        season_id=season_id,
        overall_rank=overall_rank,
        games_played=record.games_played,
        wins=record.wins,
        losses=record.losses,
        draws=record.draws,
        goals_for=record.goals_for,
        goals_against=record.goals_against,
        goal_difference=record.goal_difference,
        clean_sheets=record.clean_sheets,
        points=record.points(),
        rating=record.rating(settings),
        win_percentage=record.win_percentage,
        avg_goals_per_game=record.avg_goals_per_game,
        avg_goals_conceded=record.avg_goals_conceded,
        longest_win_streak=streaks.longest_win_streak,
        current_streak=StreakInfo(type=streaks.current_type, count=streaks.current_count),
        current_streak_display=streaks.compact,
    )


class RankingService:
    """
    Computes team rankings.

    Usage:
        service = RankingService(db)
        service.get_team_ranking(team_id=7)
        service.get_all_rankings(season_id=2, limit=10)
    """

    def __init__(self, db: Database, event_bus: Optional[EventBus] = None,
                 settings: RankingSettings = RANKING):
        self.db = db
        self.event_bus = event_bus
        self.settings = settings

    def _team_record(self, session: Session, team_id: int, season_id: Optional[int]) -> TeamRecord:
        games = session.scalars(GameFilter(team_id=team_id, season_id=season_id).statement()).all()
        return summarize_games(team_id, games)

    def _all_records(self, session: Session, season_id: Optional[int]) -> list[TeamRecord]:
        """Records for every team with at least one completed game."""
        games = session.scalars(GameFilter(season_id=season_id).statement()).all()

        # Games arrive most recent first; grouping keeps that order per team
        per_team: dict[int, list[Game]] = {}
        for game in games:
            per_team.setdefault(game.home_team_id, []).append(game)
            per_team.setdefault(game.away_team_id, []).append(game)

        return [summarize_games(team_id, team_games) for team_id, team_games in per_team.items()]

    def _team_names(self, session: Session, team_ids: Iterable[int]) -> dict[int, str]:
        ids = list(team_ids)
        if not ids:
            return {}
        return dict(session.execute(select(Team.id, Team.name).where(Team.id.in_(ids))).all())

    # ============ Queries ============

    def get_team_ranking(self, team_id: int, season_id: Optional[int] = None) -> Optional[TeamRankingResponse]:
        """
        Ranking for one team, or None if the team does not exist.

        A team with no completed games rates exactly the base rating.
        """
        with self.db.session() as session:
            team = session.get(Team, team_id)
            if team is None:
                return None
            record = self._team_record(session, team_id, season_id)
            return ranking_response(record, team.name, season_id, settings=self.settings)

    def get_all_rankings(self, season_id: Optional[int] = None,
                         limit: Optional[int] = None) -> list[TeamRankingResponse]:
        """Every team with a completed game, highest rating first."""
        limit = self.settings.default_limit if limit is None else limit
        with self.db.session() as session:
            ranked = rank_records(self._all_records(session, season_id), self.settings)
            if limit > 0:
                ranked = ranked[:limit]
            names = self._team_names(session, (r.team_id for _, r in ranked))
            return [
                ranking_response(record, names.get(record.team_id), season_id, rank, self.settings)
                for rank, record in ranked
            ]

    def compare_teams(self, team_ids: list[int], season_id: Optional[int] = None) -> list[TeamComparison]:
        """
        Side-by-side records for a handful of teams.

        Raises:
            InvalidComparison: fewer than 2 or more than 10 teams, or a repeated id
            TeamNotFound: an id does not exist
        """
        unique = list(dict.fromkeys(team_ids))
        if len(unique) != len(team_ids):
            raise InvalidComparison("Each team can only appear once in a comparison")
        if not self.settings.compare_min_teams <= len(unique) <= self.settings.compare_max_teams:
            raise InvalidComparison(
                f"Compare between {self.settings.compare_min_teams} and "
                f"{self.settings.compare_max_teams} teams, got {len(unique)}"
            )

        with self.db.session() as session:
            names = self._team_names(session, unique)
            missing = [t for t in unique if t not in names]
            if missing:
                raise TeamNotFound(f"Team not found: {missing[0]}")

            comparisons = []
            for team_id in unique:
                record = self._team_record(session, team_id, season_id)
                comparisons.append(TeamComparison(
                    team_id=team_id,
                    team_name=names[team_id],
                    games_played=record.games_played,
                    wins=record.wins,
                    losses=record.losses,
                    draws=record.draws,
                    goals_for=record.goals_for,
                    goals_against=record.goals_against,
                    goal_difference=record.goal_difference,
                    win_percentage=record.win_percentage,
                    avg_goals_per_game=record.avg_goals_per_game,
                    avg_goals_conceded=record.avg_goals_conceded,
                    home_wins=record.home_wins,
                    away_wins=record.away_wins,
                    rating=record.rating(self.settings),
                ))
            return comparisons

    # ============ Cache ============

    def recalculate_rankings(self, season_id: Optional[int] = None) -> list[TeamRankingResponse]:
        """
        Recompute every ranking and write the ``team_rankings`` cache.

        The cache write is best effort: if the store fails, the computed
        rankings are still returned.
        """
        rankings = self.get_all_rankings(season_id, limit=0)

        try:
            with self.db.session() as session:
                for ranking in rankings:
                    self._upsert_snapshot(session, ranking)
        except (StoreError, ConstraintViolation) as exc:
            logger.warning("Could not write ranking cache: %s", exc)
            if self.event_bus is not None:
                self.event_bus.store_error.emit(str(exc))
        else:
            logger.info("Recalculated rankings for %d teams (season %s)", len(rankings), season_id)
            if self.event_bus is not None:
                self.event_bus.rankings_recalculated.emit(len(rankings))

        return rankings

    def _upsert_snapshot(self, session: Session, ranking: TeamRankingResponse) -> None:
        stmt = select(TeamRankingSnapshot).where(TeamRankingSnapshot.team_id == ranking.team_id)
        if ranking.season_id is None:
            stmt = stmt.where(TeamRankingSnapshot.season_id.is_(None))
        else:
            stmt = stmt.where(TeamRankingSnapshot.season_id == ranking.season_id)

        snapshot = session.scalars(stmt).first()
        if snapshot is None:
            snapshot = TeamRankingSnapshot(team_id=ranking.team_id, season_id=ranking.season_id)
            session.add(snapshot)

        snapshot.overall_rank = ranking.overall_rank
        snapshot.points = ranking.points
        snapshot.rating = ranking.rating
        snapshot.games_played = ranking.games_played
        snapshot.wins = ranking.wins
        snapshot.losses = ranking.losses
        snapshot.draws = ranking.draws
        snapshot.goals_for = ranking.goals_for
        snapshot.goals_against = ranking.goals_against
        snapshot.clean_sheets = ranking.clean_sheets
        snapshot.longest_win_streak = ranking.longest_win_streak
        snapshot.current_streak = ranking.current_streak_display
        snapshot.last_updated = datetime.now(timezone.utc)
