"""
Typed query filters.

Every filter turns its fields into bound SQLAlchemy clauses. Values are
always parameters; no predicate is ever assembled from strings.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, and_, or_, select

from models.competition import Competition, CompetitionStatus, CompetitionType
from models.game import Game, GameStatus


@dataclass
class GameFilter:
    """
    Filter over the games feed.

    ``opponent_id`` narrows to games between ``team_id`` and that
    opponent, in either home/away orientation.
    """
    team_id: Optional[int] = None
    opponent_id: Optional[int] = None
    season_id: Optional[int] = None
    competition_id: Optional[int] = None
    completed_only: bool = True
    limit: Optional[int] = None

    def clauses(self) -> list:
        clauses = []

        if self.completed_only:
            clauses.append(Game.status == GameStatus.COMPLETED)

        if self.team_id is not None and self.opponent_id is not None:
            clauses.append(or_(
                and_(Game.home_team_id == self.team_id, Game.away_team_id == self.opponent_id),
                and_(Game.home_team_id == self.opponent_id, Game.away_team_id == self.team_id),
            ))
        elif self.team_id is not None:
            clauses.append(or_(Game.home_team_id == self.team_id,
                               Game.away_team_id == self.team_id))
        elif self.opponent_id is not None:
            raise ValueError("opponent_id requires team_id")

        if self.season_id is not None:
            clauses.append(Game.season_id == self.season_id)
        if self.competition_id is not None:
            clauses.append(Game.competition_id == self.competition_id)

        return clauses

    def statement(self) -> Select:
        """Games matching the filter, most recent first (undated games last)."""
        stmt = (
            select(Game)
            .where(*self.clauses())
            .order_by(Game.played_at.is_(None), Game.played_at.desc(), Game.id.desc())
        )
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        return stmt


@dataclass
class CompetitionFilter:
    """Filter over competitions."""
    competition_type: Optional[CompetitionType] = None
    season_id: Optional[int] = None
    status: Optional[CompetitionStatus] = None

    def clauses(self) -> list:
        clauses = []
        if self.competition_type is not None:
            clauses.append(Competition.competition_type == self.competition_type)
        if self.season_id is not None:
            clauses.append(Competition.season_id == self.season_id)
        if self.status is not None:
            clauses.append(Competition.status == self.status)
        return clauses

    def statement(self) -> Select:
        """Competitions matching the filter, newest start date first."""
        return (
            select(Competition)
            .where(*self.clauses())
            .order_by(Competition.start_date.desc(), Competition.id.desc())
        )
