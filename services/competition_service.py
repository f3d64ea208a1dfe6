"""
Competition Service - competitions and team enrollment.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from exceptions import CompetitionNotFound, DuplicateEnrollment, NotFoundError, UnknownTeam
from models.base import Database
from models.competition import Competition, CompetitionTeam
from models.schemas import (
    CompetitionCreate,
    CompetitionResponse,
    CompetitionTeamResponse,
    TeamEnroll,
)
from models.team import Season, Team
from services.event_bus import EventBus
from services.locking import CompetitionLocks
from services.queries import CompetitionFilter
from services.roster import require_team

logger = logging.getLogger(__name__)


# ============ Shared lookups ============

def load_competition(session: Session, competition_id: int, for_update: bool = False) -> Competition:
    """
    Load a competition or raise CompetitionNotFound.

    With ``for_update`` the row is locked until the transaction ends on
    backends that support SELECT ... FOR UPDATE.
    """
    stmt = select(Competition).where(Competition.id == competition_id)
    if for_update:
        stmt = stmt.with_for_update()
    competition = session.scalars(stmt).first()
    if competition is None:
        raise CompetitionNotFound(f"Competition not found: {competition_id}")
    return competition


def ordered_entries(session: Session, competition_id: int) -> list[CompetitionTeam]:
    """Enrolled teams by seed ascending, unseeded last, then team name."""
    stmt = (
        select(CompetitionTeam)
        .join(Team, Team.id == CompetitionTeam.team_id)
        .where(CompetitionTeam.competition_id == competition_id)
        .order_by(CompetitionTeam.seed.is_(None), CompetitionTeam.seed, Team.name, Team.id)
    )
    return list(session.scalars(stmt).all())


def find_entry(session: Session, competition_id: int, team_id: int) -> Optional[CompetitionTeam]:
    return session.scalars(
        select(CompetitionTeam).where(
            CompetitionTeam.competition_id == competition_id,
            CompetitionTeam.team_id == team_id,
        )
    ).first()


def entry_response(entry: CompetitionTeam) -> CompetitionTeamResponse:
    return CompetitionTeamResponse(
        competition_id=entry.competition_id,
        team_id=entry.team_id,
        team_name=entry.team.name if entry.team else None,
        seed=entry.seed,
        group_name=entry.group_name,
        is_eliminated=bool(entry.is_eliminated),
        elimination_round=entry.elimination_round,
        final_rank=entry.final_rank,
    )


class CompetitionService:
    """
    Creates competitions and manages which teams take part.

    Enrollment changes take the competition lock so they cannot interleave
    with bracket generation or standings initialization.
    """

    def __init__(self, db: Database, event_bus: Optional[EventBus] = None,
                 locks: Optional[CompetitionLocks] = None):
        self.db = db
        self.event_bus = event_bus
        self.locks = locks or CompetitionLocks()

    def create_competition(self, payload: CompetitionCreate) -> CompetitionResponse:
        with self.db.session() as session:
            if payload.season_id is not None and session.get(Season, payload.season_id) is None:
                raise NotFoundError(f"Season not found: {payload.season_id}")

            competition = Competition(
                name=payload.name,
                competition_type=payload.competition_type,
                season_id=payload.season_id,
                start_date=payload.start_date,
                end_date=payload.end_date,
                description=payload.description,
            )
            session.add(competition)
            session.flush()
            logger.info("Created %s competition %s (%s)",
                        competition.competition_type.value, competition.id, competition.name)
            return CompetitionResponse.model_validate(competition)

    def get_competition(self, competition_id: int) -> CompetitionResponse:
        with self.db.session() as session:
            return CompetitionResponse.model_validate(load_competition(session, competition_id))

    def list_competitions(self, filters: Optional[CompetitionFilter] = None) -> list[CompetitionResponse]:
        filters = filters or CompetitionFilter()
        with self.db.session() as session:
            rows = session.scalars(filters.statement()).all()
            return [CompetitionResponse.model_validate(c) for c in rows]

    def delete_competition(self, competition_id: int) -> None:
        """Delete a competition with its bracket, standings and enrollment."""
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                competition = load_competition(session, competition_id, for_update=True)
                session.delete(competition)
        self.locks.forget(competition_id)
        logger.info("Deleted competition %s", competition_id)

    # ============ Enrollment ============

    def enroll_team(self, competition_id: int, payload: TeamEnroll) -> CompetitionTeamResponse:
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                load_competition(session, competition_id, for_update=True)
                team = require_team(session, payload.team_id)

                if find_entry(session, competition_id, team.id) is not None:
                    raise DuplicateEnrollment(
                        f"Team {team.id} is already in competition {competition_id}"
                    )

                entry = CompetitionTeam(
                    competition_id=competition_id,
                    team_id=team.id,
                    seed=payload.seed,
                    group_name=payload.group_name,
                    is_eliminated=False,
                )
                session.add(entry)
                session.flush()
                logger.info("Enrolled team %s in competition %s (seed %s)",
                            team.id, competition_id, payload.seed)
                return entry_response(entry)

    def withdraw_team(self, competition_id: int, team_id: int) -> None:
        with self.locks.hold(competition_id):
            with self.db.session() as session:
                load_competition(session, competition_id, for_update=True)
                entry = find_entry(session, competition_id, team_id)
                if entry is None:
                    raise UnknownTeam(f"Team {team_id} is not in competition {competition_id}")
                session.delete(entry)
        logger.info("Withdrew team %s from competition %s", team_id, competition_id)

    def list_teams(self, competition_id: int) -> list[CompetitionTeamResponse]:
        with self.db.session() as session:
            load_competition(session, competition_id)
            return [entry_response(e) for e in ordered_entries(session, competition_id)]
