"""
Competition and enrollment models.

A competition is either a knockout tournament (bracket) or a league
(standings table).
"""

import enum
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Integer, Text, Date, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.team import Team
    from models.bracket import BracketMatch
    from models.standing import CompetitionStanding


class CompetitionType(enum.Enum):
    """Competition formats."""
    TOURNAMENT = "tournament"
    LEAGUE = "league"


class CompetitionStatus(enum.Enum):
    """Competition lifecycle states."""
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Competition(Base):
    """
    A tournament or league.

    Tournaments own a set of BracketMatch rows, leagues own a set of
    CompetitionStanding rows. Both own their CompetitionTeam enrollment.
    """
    __tablename__ = "competitions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    competition_type: Mapped[CompetitionType] = mapped_column(
        SAEnum(CompetitionType),
        nullable=False,
        index=True
    )
    status: Mapped[CompetitionStatus] = mapped_column(
        SAEnum(CompetitionStatus),
        default=CompetitionStatus.UPCOMING,
        index=True
    )
    season_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("seasons.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    teams: Mapped[list["CompetitionTeam"]] = relationship(
        back_populates="competition",
        cascade="all, delete-orphan"
    )
    bracket_matches: Mapped[list["BracketMatch"]] = relationship(
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    standings: Mapped[list["CompetitionStanding"]] = relationship(
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return (f"<Competition(id={self.id}, name='{self.name}', "
                f"type={self.competition_type.value})>")

    @property
    def is_tournament(self) -> bool:
        return self.competition_type == CompetitionType.TOURNAMENT


class CompetitionTeam(Base):
    """
    A team entered into a competition.

    ``is_eliminated`` and ``elimination_round`` are only written by the
    bracket advancer.
    """
    __tablename__ = "competition_teams"
    __table_args__ = (
        UniqueConstraint("competition_id", "team_id", name="uq_competition_teams"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ForeignKey("competitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    seed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    group_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    is_eliminated: Mapped[bool] = mapped_column(default=False)
    elimination_round: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    final_rank: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    competition: Mapped["Competition"] = relationship(back_populates="teams")
    team: Mapped["Team"] = relationship()

    def __repr__(self) -> str:
        return (f"<CompetitionTeam(competition={self.competition_id}, team={self.team_id}, "
                f"seed={self.seed})>")
