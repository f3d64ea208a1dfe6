"""
Competition Engine Application

Top-level controller that wires the database, event bus, locks and
services together and exposes every operation as an OperationResult.
"""

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PayloadError
from PySide6.QtCore import QObject

from exceptions import CompetitionEngineError, StoreError, TeamNotFound
from models.base import Database
from models.competition import CompetitionStatus, CompetitionType
from models.game import GameStatus
from models.schemas import (
    CompetitionCreate,
    GameCreate,
    GameScore,
    MatchResultSubmit,
    MatchSchedule,
    OperationResult,
    SeasonCreate,
    TeamCreate,
    TeamEnroll,
)
from services.bracket_service import BracketService
from services.competition_service import CompetitionService
from services.event_bus import EventBus
from services.game_feed import GameFeed
from services.head_to_head_service import HeadToHeadService
from services.locking import CompetitionLocks
from services.queries import CompetitionFilter
from services.ranking_service import RankingService
from services.roster import RosterService
from services.standings_service import StandingsService

logger = logging.getLogger(__name__)


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [_dump(item) for item in data]
    return data


class CompetitionEngineApp(QObject):
    """
    Top-level application controller.

    Services raise; this class is the operation boundary. Every public
    method returns an OperationResult and never lets an engine error
    escape. Reads that hit a StoreError are retried once; writes are
    never retried because a write whose outcome is unknown could
    otherwise advance a bracket or count a game twice.

    Usage:
        app = CompetitionEngineApp("sqlite://")
        app.init_db()
        result = app.generate_bracket(competition_id=1)
        if not result.ok:
            print(result.error.kind, result.error.message)
    """

    def __init__(self, database_url: Optional[str] = None,
                 event_bus: Optional[EventBus] = None, echo: bool = False):
        super().__init__()

        self.db = Database(database_url, echo=echo)
        self.event_bus = event_bus or EventBus()
        self.locks = CompetitionLocks()

        # Services
        self.roster = RosterService(self.db)
        self.competitions = CompetitionService(self.db, self.event_bus, self.locks)
        self.brackets = BracketService(self.db, self.event_bus, self.locks)
        self.standings = StandingsService(self.db, self.event_bus, self.locks)
        self.rankings = RankingService(self.db, self.event_bus)
        self.head_to_head = HeadToHeadService(self.db, self.event_bus)
        self.games = GameFeed(self.db, self.event_bus)

    def init_db(self) -> None:
        self.db.init_db()

    def close(self) -> None:
        self.db.dispose()

    # ============ Operation boundary ============

    def _run(self, operation: str, func: Callable[[], Any], read: bool = False) -> OperationResult:
        retried = False
        while True:
            try:
                return OperationResult.success(_dump(func()))
            except StoreError as exc:
                if read and not retried:
                    logger.warning("%s hit a store error, retrying once: %s", operation, exc.message)
                    retried = True
                    continue
                logger.error("%s failed: %s", operation, exc.message)
                self.event_bus.store_error.emit(exc.message)
                return OperationResult.failure(exc.kind, type(exc).__name__, exc.message)
            except CompetitionEngineError as exc:
                logger.info("%s rejected (%s): %s", operation, type(exc).__name__, exc.message)
                return OperationResult.failure(exc.kind, type(exc).__name__, exc.message)
            except PayloadError as exc:
                logger.info("%s rejected: invalid payload", operation)
                return OperationResult.failure("validation", "InvalidPayload", str(exc))

    # ============ Roster ============

    def add_team(self, name: str, abbreviation: Optional[str] = None) -> OperationResult:
        return self._run("add_team", lambda: self.roster.add_team(
            TeamCreate(name=name, abbreviation=abbreviation)))

    def add_season(self, name: str, start_date: Optional[date] = None,
                   end_date: Optional[date] = None, is_active: bool = False) -> OperationResult:
        return self._run("add_season", lambda: self.roster.add_season(
            SeasonCreate(name=name, start_date=start_date, end_date=end_date, is_active=is_active)))

    # ============ Competitions ============

    def create_competition(self, name: str, competition_type: CompetitionType, start_date: date,
                           season_id: Optional[int] = None, end_date: Optional[date] = None,
                           description: Optional[str] = None) -> OperationResult:
        return self._run("create_competition", lambda: self.competitions.create_competition(
            CompetitionCreate(
                name=name,
                competition_type=competition_type,
                start_date=start_date,
                season_id=season_id,
                end_date=end_date,
                description=description,
            )))

    def get_competition(self, competition_id: int) -> OperationResult:
        return self._run("get_competition",
                         lambda: self.competitions.get_competition(competition_id), read=True)

    def list_competitions(self, competition_type: Optional[CompetitionType] = None,
                          season_id: Optional[int] = None,
                          status: Optional[CompetitionStatus] = None) -> OperationResult:
        filters = CompetitionFilter(competition_type=competition_type, season_id=season_id, status=status)
        return self._run("list_competitions",
                         lambda: self.competitions.list_competitions(filters), read=True)

    def delete_competition(self, competition_id: int) -> OperationResult:
        return self._run("delete_competition",
                         lambda: self.competitions.delete_competition(competition_id))

    def enroll_team(self, competition_id: int, team_id: int, seed: Optional[int] = None,
                    group_name: Optional[str] = None) -> OperationResult:
        return self._run("enroll_team", lambda: self.competitions.enroll_team(
            competition_id, TeamEnroll(team_id=team_id, seed=seed, group_name=group_name)))

    def withdraw_team(self, competition_id: int, team_id: int) -> OperationResult:
        return self._run("withdraw_team",
                         lambda: self.competitions.withdraw_team(competition_id, team_id))

    def list_teams(self, competition_id: int) -> OperationResult:
        return self._run("list_teams", lambda: self.competitions.list_teams(competition_id), read=True)

    # ============ Brackets ============

    def generate_bracket(self, competition_id: int, regenerate: bool = False) -> OperationResult:
        return self._run("generate_bracket",
                         lambda: self.brackets.generate_bracket(competition_id, regenerate))

    def get_bracket(self, competition_id: int) -> OperationResult:
        return self._run("get_bracket", lambda: self.brackets.get_bracket(competition_id), read=True)

    def submit_match_result(self, competition_id: int, match_id: int, winner_team_id: int,
                            game_id: Optional[int] = None) -> OperationResult:
        return self._run("submit_match_result", lambda: self.brackets.submit_match_result(
            competition_id, match_id,
            MatchResultSubmit(winner_team_id=winner_team_id, game_id=game_id)))

    def schedule_match(self, competition_id: int, match_id: int, scheduled_date: datetime,
                       game_id: Optional[int] = None) -> OperationResult:
        return self._run("schedule_match", lambda: self.brackets.schedule_match(
            competition_id, match_id,
            MatchSchedule(scheduled_date=scheduled_date, game_id=game_id)))

    # ============ Standings ============

    def initialize_standings(self, competition_id: int, reset: bool = False) -> OperationResult:
        return self._run("initialize_standings",
                         lambda: self.standings.initialize_standings(competition_id, reset))

    def apply_game_to_standings(self, competition_id: int, game_id: int) -> OperationResult:
        return self._run("apply_game_to_standings",
                         lambda: self.standings.apply_game(competition_id, game_id))

    def get_standings(self, competition_id: int) -> OperationResult:
        return self._run("get_standings",
                         lambda: self.standings.get_standings(competition_id), read=True)

    def rebuild_standings(self, competition_id: int) -> OperationResult:
        return self._run("rebuild_standings",
                         lambda: self.standings.rebuild_standings(competition_id))

    # ============ Rankings ============

    def get_team_ranking(self, team_id: int, season_id: Optional[int] = None) -> OperationResult:
        def lookup():
            ranking = self.rankings.get_team_ranking(team_id, season_id)
            if ranking is None:
                raise TeamNotFound(f"Team not found: {team_id}")
            return ranking

        return self._run("get_team_ranking", lookup, read=True)

    def get_all_rankings(self, season_id: Optional[int] = None,
                         limit: Optional[int] = None) -> OperationResult:
        return self._run("get_all_rankings",
                         lambda: self.rankings.get_all_rankings(season_id, limit), read=True)

    def recalculate_rankings(self, season_id: Optional[int] = None) -> OperationResult:
        return self._run("recalculate_rankings",
                         lambda: self.rankings.recalculate_rankings(season_id))

    def compare_teams(self, team_ids: list[int], season_id: Optional[int] = None) -> OperationResult:
        return self._run("compare_teams",
                         lambda: self.rankings.compare_teams(team_ids, season_id), read=True)

    # ============ Head-to-Head ============

    def get_head_to_head(self, team_a: int, team_b: int, limit: Optional[int] = None) -> OperationResult:
        return self._run("get_head_to_head",
                         lambda: self.head_to_head.get_head_to_head(team_a, team_b, limit), read=True)

    # ============ Game feed ============

    def record_game(self, home_team_id: int, away_team_id: int, home_score: int = 0,
                    away_score: int = 0, status: GameStatus = GameStatus.SCHEDULED,
                    played_at: Optional[datetime] = None, season_id: Optional[int] = None,
                    competition_id: Optional[int] = None) -> OperationResult:
        return self._run("record_game", lambda: self.games.record_game(GameCreate(
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            home_score=home_score,
            away_score=away_score,
            status=status,
            played_at=played_at,
            season_id=season_id,
            competition_id=competition_id,
        )))

    def complete_game(self, game_id: int, home_score: int, away_score: int,
                      played_at: Optional[datetime] = None) -> OperationResult:
        return self._run("complete_game", lambda: self.games.complete_game(
            game_id, GameScore(home_score=home_score, away_score=away_score, played_at=played_at)))

    def correct_score(self, game_id: int, home_score: int, away_score: int) -> OperationResult:
        """
        Correct a completed game and rebuild every league table that counted it.

        The returned data is the corrected game; tables are rebuilt after
        the correction commits.
        """
        def correct():
            game = self.games.correct_score(
                game_id, GameScore(home_score=home_score, away_score=away_score))
            for competition_id in self.standings.competitions_with_game(game_id):
                self.standings.rebuild_standings(competition_id)
            return game

        return self._run("correct_score", correct)
