"""
Game Feed - the results provider seam.

Games are recorded and completed here. Correcting the score of a
completed game invalidates the derived caches that counted it.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select

from engine.head_to_head import canonical_pair
from exceptions import CompetitionNotFound, GameNotCompleted, GameNotFound, NotFoundError, StateError
from models.base import Database
from models.competition import Competition
from models.game import Game, GameStatus
from models.ranking import HeadToHeadSnapshot, TeamRankingSnapshot
from models.schemas import GameCreate, GameResponse, GameScore
from models.team import Season
from services.event_bus import EventBus
from services.queries import GameFilter
from services.roster import require_team

logger = logging.getLogger(__name__)


class GameFeed:
    """
    Records games and their results.

    Usage:
        feed = GameFeed(db, event_bus)
        game = feed.record_game(GameCreate(home_team_id=1, away_team_id=2))
        feed.complete_game(game.id, GameScore(home_score=3, away_score=1))
    """

    def __init__(self, db: Database, event_bus: Optional[EventBus] = None):
        self.db = db
        self.event_bus = event_bus

    def record_game(self, payload: GameCreate) -> GameResponse:
        with self.db.session() as session:
            require_team(session, payload.home_team_id)
            require_team(session, payload.away_team_id)
            if payload.competition_id is not None and session.get(Competition, payload.competition_id) is None:
                raise CompetitionNotFound(f"Competition not found: {payload.competition_id}")
            if payload.season_id is not None and session.get(Season, payload.season_id) is None:
                raise NotFoundError(f"Season not found: {payload.season_id}")

            played_at = payload.played_at
            if played_at is None and payload.status == GameStatus.COMPLETED:
                played_at = datetime.now(timezone.utc)

            game = Game(
                home_team_id=payload.home_team_id,
                away_team_id=payload.away_team_id,
                home_score=payload.home_score,
                away_score=payload.away_score,
                status=payload.status,
                played_at=played_at,
                season_id=payload.season_id,
                competition_id=payload.competition_id,
            )
            session.add(game)
            session.flush()
            logger.info("Recorded game %s: %s vs %s (%s)", game.id, game.home_team_id,
                        game.away_team_id, game.status.value)
            return GameResponse.model_validate(game)

    def get_game(self, game_id: int) -> GameResponse:
        with self.db.session() as session:
            game = session.get(Game, game_id)
            if game is None:
                raise GameNotFound(f"Game not found: {game_id}")
            return GameResponse.model_validate(game)

    def list_games(self, filters: Optional[GameFilter] = None) -> list[GameResponse]:
        filters = filters or GameFilter(completed_only=False)
        with self.db.session() as session:
            return [GameResponse.model_validate(g) for g in session.scalars(filters.statement()).all()]

    def complete_game(self, game_id: int, score: GameScore) -> GameResponse:
        """Set the final score of a game that has not been completed yet."""
        with self.db.session() as session:
            game = session.get(Game, game_id)
            if game is None:
                raise GameNotFound(f"Game not found: {game_id}")
            if game.is_completed:
                raise StateError(f"Game {game_id} is already completed; correct the score instead")
            if game.status == GameStatus.CANCELLED:
                raise StateError(f"Game {game_id} was cancelled")

            game.home_score = score.home_score
            game.away_score = score.away_score
            game.status = GameStatus.COMPLETED
            game.played_at = score.played_at or game.played_at or datetime.now(timezone.utc)
            logger.info("Completed game %s: %d-%d", game_id, game.home_score, game.away_score)
            return GameResponse.model_validate(game)

    def correct_score(self, game_id: int, score: GameScore) -> GameResponse:
        """
        Change the score of a completed game.

        The cached head-to-head row for the pair and the cached rankings of
        both teams are deleted in the same transaction.
        """
        with self.db.session() as session:
            game = session.get(Game, game_id)
            if game is None:
                raise GameNotFound(f"Game not found: {game_id}")
            if not game.is_completed:
                raise GameNotCompleted(f"Game {game_id} is {game.status.value}, not completed")

            previous = (game.home_score, game.away_score)
            game.home_score = score.home_score
            game.away_score = score.away_score
            if score.played_at is not None:
                game.played_at = score.played_at

            team_ids = [game.home_team_id, game.away_team_id]
            low, high = canonical_pair(game.home_team_id, game.away_team_id)
            session.execute(delete(HeadToHeadSnapshot).where(
                HeadToHeadSnapshot.team1_id == low,
                HeadToHeadSnapshot.team2_id == high,
            ))
            session.execute(delete(TeamRankingSnapshot).where(
                TeamRankingSnapshot.team_id.in_(team_ids)
            ))
            response = GameResponse.model_validate(game)

        logger.info("Corrected game %s from %d-%d to %d-%d", game_id, previous[0], previous[1],
                    score.home_score, score.away_score)
        if self.event_bus is not None:
            self.event_bus.caches_invalidated.emit({"game_id": game_id, "team_ids": team_ids})
        return response

    def cached_pairs(self) -> list[tuple[int, int]]:
        """Pairs that currently have a cached head-to-head row."""
        with self.db.session() as session:
            return [tuple(row) for row in session.execute(
                select(HeadToHeadSnapshot.team1_id, HeadToHeadSnapshot.team2_id)
                .order_by(HeadToHeadSnapshot.team1_id, HeadToHeadSnapshot.team2_id)
            ).all()]
