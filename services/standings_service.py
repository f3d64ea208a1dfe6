"""
Standings Service - league tables.

A completed game is folded into the two teams' rows and the whole table
is re-ranked inside one transaction, under the competition lock, so a
reader never sees counters that disagree with points or ranks that
disagree with the counters.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from engine.standings import apply_outcome, outcomes_for_game, rank_standings, reset_counters
from exceptions import (
    GameAlreadyApplied,
    GameNotCompleted,
    GameNotFound,
    StandingsAlreadyInitialized,
    StandingsNotInitialized,
    UnknownTeam,
    ValidationError,
)
from models.base import Database
from models.competition import CompetitionStatus, CompetitionTeam
from models.game import Game, GameStatus
from models.schemas import StandingResponse
from models.standing import CompetitionStanding, StandingGame
from services.competition_service import load_competition, ordered_entries
from services.event_bus import EventBus
from services.locking import CompetitionLocks

logger = logging.getLogger(__name__)


def load_standings(session: Session, competition_id: int) -> list[CompetitionStanding]:
    stmt = (
        select(CompetitionStanding)
        .where(CompetitionStanding.competition_id == competition_id)
        .order_by(CompetitionStanding.rank.is_(None), CompetitionStanding.rank,
                  CompetitionStanding.team_id)
    )
    return list(session.scalars(stmt).all())


class StandingsService:
    """
    Initializes, updates and reads league standings.

    Each game is applied at most once per competition; the
    ``competition_standing_games`` ledger records which games are in.
    """

    def __init__(self, db: Database, event_bus: Optional[EventBus] = None,
                 locks: Optional[CompetitionLocks] = None):
        self.db = db
        self.event_bus = event_bus
        self.locks = locks or CompetitionLocks()

    def initialize_standings(self, competition_id: int, reset: bool = False) -> list[StandingResponse]:
        """
        Create one zeroed row per enrolled team.

        Args:
            reset: Replace existing rows (and forget which games were applied)
        """
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                load_competition(session, competition_id, for_update=True)
                entries = ordered_entries(session, competition_id)
                if not entries:
                    raise ValidationError(f"Competition {competition_id} has no teams")

                existing = load_standings(session, competition_id)
                if existing and not reset:
                    raise StandingsAlreadyInitialized(
                        f"Standings already exist for competition {competition_id}"
                    )
                if existing:
                    self._clear(session, competition_id)

                rows = [
                    CompetitionStanding.zeroed(competition_id, entry.team_id, rank=position)
                    for position, entry in enumerate(entries, start=1)
                ]
                session.add_all(rows)
                session.flush()
                response = [StandingResponse.model_validate(r) for r in rows]

        logger.info("Initialized standings for competition %s with %d teams",
                    competition_id, len(response))
        if self.event_bus is not None:
            self.event_bus.standings_initialized.emit(competition_id)
        return response

    def _clear(self, session: Session, competition_id: int) -> None:
        session.execute(
            delete(CompetitionStanding).where(CompetitionStanding.competition_id == competition_id)
        )
        session.execute(
            delete(StandingGame).where(StandingGame.competition_id == competition_id)
        )
        logger.info("Cleared standings for competition %s", competition_id)

    def apply_game(self, competition_id: int, game_id: int) -> list[StandingResponse]:
        """
        Fold a completed game into the table and re-rank every row.

        Raises:
            GameNotFound: no such game
            GameNotCompleted: the game is not completed
            UnknownTeam: a participant is not enrolled in the competition
            StandingsNotInitialized: a participant has no standings row
            GameAlreadyApplied: the game was applied before
        """
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                competition = load_competition(session, competition_id, for_update=True)

                game = session.get(Game, game_id)
                if game is None:
                    raise GameNotFound(f"Game not found: {game_id}")
                if not game.is_completed:
                    raise GameNotCompleted(
                        f"Game {game_id} is {game.status.value}, not completed"
                    )

                enrolled = set(session.scalars(
                    select(CompetitionTeam.team_id)
                    .where(CompetitionTeam.competition_id == competition_id)
                ).all())
                for team_id in (game.home_team_id, game.away_team_id):
                    if team_id not in enrolled:
                        raise UnknownTeam(
                            f"Team {team_id} is not in competition {competition_id}"
                        )

                if self._is_applied(session, competition_id, game_id):
                    raise GameAlreadyApplied(
                        f"Game {game_id} is already counted in competition {competition_id}"
                    )

                rows = load_standings(session, competition_id)
                by_team = {r.team_id: r for r in rows}
                for team_id in (game.home_team_id, game.away_team_id):
                    if team_id not in by_team:
                        raise StandingsNotInitialized(
                            f"No standings row for team {team_id} in competition {competition_id}"
                        )

                now = datetime.now(timezone.utc)
                for outcome in outcomes_for_game(game.home_team_id, game.away_team_id,
                                                 game.home_score, game.away_score):
                    row = by_team[outcome.team_id]
                    apply_outcome(row, outcome)
                    row.updated_at = now
                    logger.debug("Team %s: %s, %d pts, form %s",
                                 row.team_id, outcome.result, row.points, row.form)

                ordered = rank_standings(rows)
                session.add(StandingGame(competition_id=competition_id, game_id=game_id))

                if competition.status == CompetitionStatus.UPCOMING:
                    competition.status = CompetitionStatus.IN_PROGRESS

                session.flush()
                response = [StandingResponse.model_validate(r) for r in ordered]

        logger.info("Applied game %s to competition %s standings", game_id, competition_id)
        if self.event_bus is not None:
            self.event_bus.standings_updated.emit(competition_id, game_id)
        return response

    def _is_applied(self, session: Session, competition_id: int, game_id: int) -> bool:
        return session.scalars(
            select(StandingGame.id).where(
                StandingGame.competition_id == competition_id,
                StandingGame.game_id == game_id,
            )
        ).first() is not None

    def get_standings(self, competition_id: int) -> list[StandingResponse]:
        with self.db.session() as session:
            load_competition(session, competition_id)
            return [StandingResponse.model_validate(r) for r in load_standings(session, competition_id)]

    def rebuild_standings(self, competition_id: int) -> list[StandingResponse]:
        """
        Recompute the table from the games already applied to it.

        Used after a score correction. Games are replayed oldest first so
        the form string ends up most recent first. Games no longer
        completed are dropped from the ledger.
        """
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                load_competition(session, competition_id, for_update=True)
                rows = load_standings(session, competition_id)
                if not rows:
                    raise StandingsNotInitialized(
                        f"Standings have not been initialized for competition {competition_id}"
                    )

                ledger = session.scalars(
                    select(StandingGame).where(StandingGame.competition_id == competition_id)
                ).all()
                game_ids = [entry.game_id for entry in ledger]
                games = session.scalars(
                    select(Game)
                    .where(Game.id.in_(game_ids))
                    .order_by(Game.played_at.is_(None).desc(), Game.played_at, Game.id)
                ).all() if game_ids else []

                for row in rows:
                    reset_counters(row)
                by_team = {r.team_id: r for r in rows}

                for game in games:
                    if game.status != GameStatus.COMPLETED:
                        session.execute(delete(StandingGame).where(
                            StandingGame.competition_id == competition_id,
                            StandingGame.game_id == game.id,
                        ))
                        continue
                    for outcome in outcomes_for_game(game.home_team_id, game.away_team_id,
                                                     game.home_score, game.away_score):
                        if outcome.team_id in by_team:
                            apply_outcome(by_team[outcome.team_id], outcome)

                now = datetime.now(timezone.utc)
                for row in rows:
                    row.updated_at = now
                ordered = rank_standings(rows)
                session.flush()
                response = [StandingResponse.model_validate(r) for r in ordered]

        logger.info("Rebuilt standings for competition %s from %d games",
                    competition_id, len(games))
        if self.event_bus is not None:
            self.event_bus.standings_updated.emit(competition_id, 0)
        return response

    def competitions_with_game(self, game_id: int) -> list[int]:
        """Competitions whose standings include the game."""
        with self.db.session() as session:
            return list(session.scalars(
                select(StandingGame.competition_id)
                .where(StandingGame.game_id == game_id)
                .order_by(StandingGame.competition_id)
            ).all())
