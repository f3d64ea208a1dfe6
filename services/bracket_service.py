"""
Bracket Service - persists and advances knockout brackets.

Every write loads the competition's matches into a BracketTree, lets the
engine decide what changes, and writes the tree back in the same
transaction while holding the competition lock.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from engine.tournament_bracket import BracketTree
from exceptions import BracketAlreadyExists, GameNotFound, MatchAlreadyDecided, MatchNotFound, NotATournament
from models.base import Database
from models.bracket import BracketMatch, BracketMatchStatus
from models.competition import Competition, CompetitionStatus, CompetitionTeam
from models.game import Game
from models.schemas import (
    BracketMatchResponse,
    BracketResponse,
    BracketRound,
    MatchResultSubmit,
    MatchSchedule,
)
from services.competition_service import find_entry, load_competition, ordered_entries
from services.event_bus import EventBus
from services.locking import CompetitionLocks

logger = logging.getLogger(__name__)


def load_matches(session: Session, competition_id: int) -> list[BracketMatch]:
    stmt = (
        select(BracketMatch)
        .where(BracketMatch.competition_id == competition_id)
        .order_by(BracketMatch.round_number, BracketMatch.match_number)
    )
    return list(session.scalars(stmt).all())


def bracket_response(competition_id: int, matches: list[BracketMatch]) -> BracketResponse:
    """Group matches by round, earliest round first."""
    rounds: dict[int, BracketRound] = {}
    for match in sorted(matches, key=lambda m: (m.round_number, m.match_number)):
        bracket_round = rounds.get(match.round_number)
        if bracket_round is None:
            bracket_round = BracketRound(round_number=match.round_number, round_name=match.round_name)
            rounds[match.round_number] = bracket_round
        bracket_round.matches.append(BracketMatchResponse.model_validate(match))

    return BracketResponse(
        competition_id=competition_id,
        total_rounds=len(rounds),
        total_matches=len(matches),
        rounds=list(rounds.values()),
    )


class BracketService:
    """
    Generates brackets, records results and schedules matches.

    Signals (via EventBus, after commit):
        bracket_generated, match_result_recorded, team_eliminated,
        tournament_completed, match_scheduled
    """

    def __init__(self, db: Database, event_bus: Optional[EventBus] = None,
                 locks: Optional[CompetitionLocks] = None):
        self.db = db
        self.event_bus = event_bus
        self.locks = locks or CompetitionLocks()

    # ============ Generation ============

    def generate_bracket(self, competition_id: int, regenerate: bool = False) -> BracketResponse:
        """
        Build the bracket for a tournament from its enrolled teams.

        Args:
            competition_id: Tournament to build for
            regenerate: Replace an existing bracket (destroys recorded results)

        Raises:
            NotATournament: the competition is a league
            BracketAlreadyExists: a bracket exists and regenerate is False
            InsufficientTeams: fewer than 2 teams are enrolled
        """
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                competition = load_competition(session, competition_id, for_update=True)
                if not competition.is_tournament:
                    raise NotATournament(f"Competition {competition_id} is not a tournament")

                existing = load_matches(session, competition_id)
                if existing and not regenerate:
                    raise BracketAlreadyExists(
                        f"Competition {competition_id} already has a bracket"
                    )

                entries = ordered_entries(session, competition_id)
                tree = BracketTree.build([e.team_id for e in entries])

                if existing:
                    self._clear(session, competition)

                matches = self._persist(session, competition_id, tree)
                response = bracket_response(competition_id, matches)

        logger.info("Generated bracket for competition %s: %d teams, %d rounds, %d matches",
                    competition_id, len(entries), response.total_rounds, response.total_matches)
        if self.event_bus is not None:
            self.event_bus.bracket_generated.emit(competition_id, response.total_matches)
        return response

    def _clear(self, session: Session, competition: Competition) -> None:
        """Drop the old bracket and every result that came from it."""
        session.execute(
            delete(BracketMatch).where(BracketMatch.competition_id == competition.id)
        )
        session.execute(
            update(CompetitionTeam)
            .where(CompetitionTeam.competition_id == competition.id)
            .values(is_eliminated=False, elimination_round=None, final_rank=None)
        )
        competition.status = CompetitionStatus.UPCOMING
        logger.info("Cleared existing bracket for competition %s", competition.id)

    def _persist(self, session: Session, competition_id: int, tree: BracketTree) -> list[BracketMatch]:
        rows: dict[int, BracketMatch] = {}
        for node in tree.ordered():
            row = BracketMatch(
                competition_id=competition_id,
                round_number=node.round_number,
                round_name=node.round_name,
                match_number=node.match_number,
                home_team_id=node.home_team_id,
                away_team_id=node.away_team_id,
                winner_team_id=node.winner_team_id,
                status=BracketMatchStatus.COMPLETED if node.is_complete else BracketMatchStatus.PENDING,
                is_bye=node.is_bye,
            )
            session.add(row)
            rows[node.node_id] = row

        # Ids are needed before the forward links can be written
        session.flush()
        for node in tree.ordered():
            if node.parent_id is not None:
                rows[node.node_id].next_bracket_id = rows[node.parent_id].id
                rows[node.node_id].next_slot = node.parent_slot
        session.flush()

        return [rows[node.node_id] for node in tree.ordered()]

    # ============ Queries ============

    def get_bracket(self, competition_id: int) -> BracketResponse:
        with self.db.session() as session:
            load_competition(session, competition_id)
            return bracket_response(competition_id, load_matches(session, competition_id))

    # ============ Results ============

    def submit_match_result(self, competition_id: int, match_id: int,
                            payload: MatchResultSubmit) -> BracketMatchResponse:
        """
        Record the winner of a bracket match.

        The winner moves into the slot fixed for them when the bracket was
        built; the loser is eliminated in this match's round. Deciding the
        Final completes the tournament.

        Raises:
            MatchNotFound: no such match in this competition
            InvalidWinner: winner is not playing in the match
            MatchNotReady: the match is still waiting for a team
            MatchAlreadyDecided: the match already has a different winner
            GameNotFound: game_id does not exist
        """
        eliminated: Optional[int] = None
        champion: Optional[int] = None

        with self.locks.hold(competition_id):
            with self.db.session() as session:
                competition = load_competition(session, competition_id, for_update=True)
                matches = load_matches(session, competition_id)
                by_id = {m.id: m for m in matches}
                if match_id not in by_id:
                    raise MatchNotFound(
                        f"Match {match_id} not found in competition {competition_id}"
                    )
                if payload.game_id is not None and session.get(Game, payload.game_id) is None:
                    raise GameNotFound(f"Game not found: {payload.game_id}")

                tree = BracketTree.from_matches(matches)
                result = tree.advance(match_id, payload.winner_team_id)
                match = by_id[match_id]

                if result.changed:
                    self._write_back(tree, by_id)
                    if payload.game_id is not None:
                        match.game_id = payload.game_id

                    if result.loser_team_id is not None:
                        eliminated = result.loser_team_id
                        self._eliminate(session, competition_id, eliminated, match.round_number)

                    final = tree.final
                    if final is not None and final.is_complete and final.winner_team_id is not None:
                        champion = final.winner_team_id
                        self._complete(session, competition, champion, final.loser_team_id)
                    elif competition.status == CompetitionStatus.UPCOMING:
                        competition.status = CompetitionStatus.IN_PROGRESS

                response = BracketMatchResponse.model_validate(match)

        if not result.changed:
            logger.debug("Match %s already won by team %s; nothing to do",
                         match_id, payload.winner_team_id)
            return response

        logger.info("Competition %s match %s won by team %s",
                    competition_id, match_id, payload.winner_team_id)
        if self.event_bus is not None:
            self.event_bus.emit_match_result(competition_id, match_id,
                                             payload.winner_team_id, eliminated)
            if eliminated is not None:
                self.event_bus.team_eliminated.emit(competition_id, eliminated, response.round_number)
            if champion is not None:
                self.event_bus.tournament_completed.emit(competition_id, champion)
        return response

    def _write_back(self, tree: BracketTree, by_id: dict[int, BracketMatch]) -> None:
        for node in tree.nodes.values():
            row = by_id[node.node_id]
            row.home_team_id = node.home_team_id
            row.away_team_id = node.away_team_id
            row.winner_team_id = node.winner_team_id
            row.is_bye = node.is_bye
            if node.is_complete:
                row.status = BracketMatchStatus.COMPLETED

    def _eliminate(self, session: Session, competition_id: int, team_id: int, round_number: int) -> None:
        entry = find_entry(session, competition_id, team_id)
        if entry is None:
            # Withdrawn after the bracket was generated
            logger.warning("Eliminated team %s is no longer enrolled in competition %s",
                           team_id, competition_id)
            return
        entry.is_eliminated = True
        entry.elimination_round = round_number
        logger.info("Team %s eliminated from competition %s in round %s",
                    team_id, competition_id, round_number)

    def _complete(self, session: Session, competition: Competition,
                  champion_id: int, runner_up_id: Optional[int]) -> None:
        competition.status = CompetitionStatus.COMPLETED

        champion = find_entry(session, competition.id, champion_id)
        if champion is not None:
            champion.final_rank = 1
        if runner_up_id is not None:
            runner_up = find_entry(session, competition.id, runner_up_id)
            if runner_up is not None:
                runner_up.final_rank = 2

        logger.info("Competition %s completed, champion team %s", competition.id, champion_id)

    # ============ Scheduling ============

    def schedule_match(self, competition_id: int, match_id: int,
                       payload: MatchSchedule) -> BracketMatchResponse:
        """Set the date (and optionally the game) of a match that has not been played."""
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                load_competition(session, competition_id, for_update=True)
                match = session.get(BracketMatch, match_id)
                if match is None or match.competition_id != competition_id:
                    raise MatchNotFound(
                        f"Match {match_id} not found in competition {competition_id}"
                    )
                if match.is_completed:
                    raise MatchAlreadyDecided(f"Match {match_id} is already completed")
                if payload.game_id is not None and session.get(Game, payload.game_id) is None:
                    raise GameNotFound(f"Game not found: {payload.game_id}")

                match.scheduled_date = payload.scheduled_date
                if payload.game_id is not None:
                    match.game_id = payload.game_id
                match.status = BracketMatchStatus.SCHEDULED
                response = BracketMatchResponse.model_validate(match)

        logger.info("Scheduled competition %s match %s for %s",
                    competition_id, match_id, payload.scheduled_date)
        if self.event_bus is not None:
            self.event_bus.match_scheduled.emit(competition_id, match_id)
        return response
