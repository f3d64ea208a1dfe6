"""
Roster Service - teams and seasons.

Teams and seasons belong to the roster provider; the engine only needs to
register and look them up.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from exceptions import TeamNotFound
from models.base import Database
from models.schemas import SeasonCreate, SeasonResponse, TeamCreate, TeamResponse
from models.team import Season, Team

logger = logging.getLogger(__name__)


def require_team(session: Session, team_id: int) -> Team:
    """Load a team or raise TeamNotFound."""
    team = session.get(Team, team_id)
    if team is None:
        raise TeamNotFound(f"Team not found: {team_id}")
    return team


class RosterService:
    """Registers and looks up teams and seasons."""

    def __init__(self, db: Database):
        self.db = db

    def add_team(self, payload: TeamCreate) -> TeamResponse:
        with self.db.session() as session:
            team = Team(name=payload.name, abbreviation=payload.abbreviation)
            session.add(team)
            session.flush()
            logger.info("Registered team %s (%s)", team.id, team.name)
            return TeamResponse.model_validate(team)

    def get_team(self, team_id: int) -> TeamResponse:
        with self.db.session() as session:
            return TeamResponse.model_validate(require_team(session, team_id))

    def list_teams(self) -> list[TeamResponse]:
        with self.db.session() as session:
            teams = session.scalars(select(Team).order_by(Team.name, Team.id)).all()
            return [TeamResponse.model_validate(t) for t in teams]

    def add_season(self, payload: SeasonCreate) -> SeasonResponse:
        with self.db.session() as session:
            season = Season(
                name=payload.name,
                start_date=payload.start_date,
                end_date=payload.end_date,
                is_active=payload.is_active,
            )
            session.add(season)
            session.flush()
            logger.info("Registered season %s (%s)", season.id, season.name)
            return SeasonResponse.model_validate(season)

    def active_season(self) -> Optional[SeasonResponse]:
        with self.db.session() as session:
            season = session.scalars(
                select(Season).where(Season.is_active.is_(True)).order_by(Season.id.desc())
            ).first()
            return SeasonResponse.model_validate(season) if season else None
