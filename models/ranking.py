"""
Derived-record caches: team rankings and head-to-head pairs.

Rows in these tables are projections written after a recompute. Readers
never treat them as ground truth; games can be corrected after the fact.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String, Integer, Float, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class TeamRankingSnapshot(Base):
    """Last computed ranking for a team, overall or per season."""
    __tablename__ = "team_rankings"
    __table_args__ = (
        UniqueConstraint("team_id", "season_id", name="uq_team_rankings"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    season_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("seasons.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    overall_rank: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    points: Mapped[int] = mapped_column(Integer, default=0)
    rating: Mapped[float] = mapped_column(Float, default=1000.0)

    games_played: Mapped[int] = mapped_column(Integer, default=0)
    wins: Mapped[int] = mapped_column(Integer, default=0)
    losses: Mapped[int] = mapped_column(Integer, default=0)
    draws: Mapped[int] = mapped_column(Integer, default=0)
    goals_for: Mapped[int] = mapped_column(Integer, default=0)
    goals_against: Mapped[int] = mapped_column(Integer, default=0)
    clean_sheets: Mapped[int] = mapped_column(Integer, default=0)
    longest_win_streak: Mapped[int] = mapped_column(Integer, default=0)
    current_streak: Mapped[str] = mapped_column(String(20), default="")

    last_updated: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<TeamRankingSnapshot(team={self.team_id}, season={self.season_id}, rating={self.rating})>"


class HeadToHeadSnapshot(Base):
    """Last computed head-to-head record for an unordered team pair."""
    __tablename__ = "head_to_head"
    __table_args__ = (
        UniqueConstraint("team1_id", "team2_id", name="uq_head_to_head_pair"),
        CheckConstraint("team1_id < team2_id", name="ck_head_to_head_ordered"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team1_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    team2_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )

    total_games: Mapped[int] = mapped_column(Integer, default=0)
    team1_wins: Mapped[int] = mapped_column(Integer, default=0)
    team2_wins: Mapped[int] = mapped_column(Integer, default=0)
    draws: Mapped[int] = mapped_column(Integer, default=0)
    team1_goals: Mapped[int] = mapped_column(Integer, default=0)
    team2_goals: Mapped[int] = mapped_column(Integer, default=0)

    last_game_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("games.id", ondelete="SET NULL"), nullable=True
    )
    last_game_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    streak_team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    streak_count: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<HeadToHeadSnapshot({self.team1_id}-{self.team2_id}, games={self.total_games})>"
