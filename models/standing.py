"""
League standings models.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class CompetitionStanding(Base):
    """
    A team's aggregate record and rank within one league competition.

    ``points`` and ``goal_difference`` are stored but always derived from
    the counters in the same update (see engine.standings).
    """
    __tablename__ = "competition_standings"
    __table_args__ = (
        UniqueConstraint("competition_id", "team_id", name="uq_competition_standings"),
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

    rank: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    games_played: Mapped[int] = mapped_column(Integer, default=0)
    wins: Mapped[int] = mapped_column(Integer, default=0)
    losses: Mapped[int] = mapped_column(Integer, default=0)
    draws: Mapped[int] = mapped_column(Integer, default=0)
    goals_for: Mapped[int] = mapped_column(Integer, default=0)
    goals_against: Mapped[int] = mapped_column(Integer, default=0)
    goal_difference: Mapped[int] = mapped_column(Integer, default=0)
    points: Mapped[int] = mapped_column(Integer, default=0)

    # Last results, most recent first, e.g. "WWLDW"
    form: Mapped[str] = mapped_column(String(20), default="")

    home_wins: Mapped[int] = mapped_column(Integer, default=0)
    home_losses: Mapped[int] = mapped_column(Integer, default=0)
    home_draws: Mapped[int] = mapped_column(Integer, default=0)
    away_wins: Mapped[int] = mapped_column(Integer, default=0)
    away_losses: Mapped[int] = mapped_column(Integer, default=0)
    away_draws: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return (f"<CompetitionStanding(competition={self.competition_id}, team={self.team_id}, "
                f"rank={self.rank}, points={self.points})>")

    @classmethod
    def zeroed(cls, competition_id: int, team_id: int, rank: Optional[int] = None) -> "CompetitionStanding":
        """A fresh row with every counter explicitly at zero."""
        return cls(
            competition_id=competition_id,
            team_id=team_id,
            rank=rank,
            games_played=0,
            wins=0,
            losses=0,
            draws=0,
            goals_for=0,
            goals_against=0,
            goal_difference=0,
            points=0,
            form="",
            home_wins=0,
            home_losses=0,
            home_draws=0,
            away_wins=0,
            away_losses=0,
            away_draws=0,
        )


class StandingGame(Base):
    """Ledger of games already applied to a competition's standings."""
    __tablename__ = "competition_standing_games"
    __table_args__ = (
        UniqueConstraint("competition_id", "game_id", name="uq_competition_standing_games"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ForeignKey("competitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    game_id: Mapped[int] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"),
        nullable=False
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc)
    )
