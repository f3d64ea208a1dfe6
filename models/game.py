"""
Game model - the completed-result feed consumed by standings, rankings
and head-to-head.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, ForeignKey, DateTime, Enum as SAEnum, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class GameStatus(enum.Enum):
    """Game lifecycle states."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Game(Base):
    """
    A single game between a home and an away team.

    Only games with status COMPLETED count towards standings, rankings
    and head-to-head records.
    """
    __tablename__ = "games"
    __table_args__ = (
        CheckConstraint("home_team_id <> away_team_id", name="ck_games_distinct_teams"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)

    home_score: Mapped[int] = mapped_column(Integer, default=0)
    away_score: Mapped[int] = mapped_column(Integer, default=0)

    status: Mapped[GameStatus] = mapped_column(
        SAEnum(GameStatus),
        default=GameStatus.SCHEDULED
    )

    played_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)

    season_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("seasons.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    competition_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("competitions.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return (f"<Game(id={self.id}, {self.home_team_id} {self.home_score}-"
                f"{self.away_score} {self.away_team_id}, status={self.status.value})>")

    @property
    def is_completed(self) -> bool:
        return self.status == GameStatus.COMPLETED

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def scores_for(self, team_id: int) -> tuple[int, int]:
        """(goals for, goals against) from the given team's side."""
        if team_id == self.home_team_id:
            return self.home_score, self.away_score
        return self.away_score, self.home_score
