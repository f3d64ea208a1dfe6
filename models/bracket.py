"""
Bracket match model for knockout tournaments.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class BracketMatchStatus(enum.Enum):
    """Bracket match lifecycle states."""
    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class BracketSlot(enum.Enum):
    """Which side of the next match a winner is placed in."""
    HOME = "home"
    AWAY = "away"


class BracketMatch(Base):
    """
    One match in a single-elimination bracket.

    ``next_bracket_id`` points at the match the winner advances to, and
    ``next_slot`` says which side of it. Both are fixed when the bracket
    is generated and never inferred later.
    """
    __tablename__ = "tournament_brackets"
    __table_args__ = (
        UniqueConstraint("competition_id", "round_number", "match_number",
                         name="uq_tournament_brackets_position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    competition_id: Mapped[int] = mapped_column(
        ForeignKey("competitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    round_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    round_name: Mapped[str] = mapped_column(String(100), nullable=False)
    match_number: Mapped[int] = mapped_column(Integer, nullable=False)

    home_team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    away_team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    winner_team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )

    next_bracket_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("tournament_brackets.id", ondelete="SET NULL"), nullable=True
    )
    next_slot: Mapped[Optional[BracketSlot]] = mapped_column(SAEnum(BracketSlot), nullable=True)

    game_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("games.id", ondelete="SET NULL"), nullable=True, index=True
    )
    scheduled_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    status: Mapped[BracketMatchStatus] = mapped_column(
        SAEnum(BracketMatchStatus),
        default=BracketMatchStatus.PENDING
    )
    # Resolved without being played (one team and a permanently empty slot)
    is_bye: Mapped[bool] = mapped_column(default=False)

    def __repr__(self) -> str:
        return (f"<BracketMatch(id={self.id}, round={self.round_number}, "
                f"match={self.match_number}, status={self.status.value})>")

    @property
    def is_completed(self) -> bool:
        return self.status == BracketMatchStatus.COMPLETED

    @property
    def is_void(self) -> bool:
        """Completed with no team at all (both slots permanently empty)."""
        return self.is_completed and self.winner_team_id is None

    @property
    def loser_team_id(self) -> Optional[int]:
        if not self.is_completed or self.is_bye or self.winner_team_id is None:
            return None
        if self.winner_team_id == self.home_team_id:
            return self.away_team_id
        return self.home_team_id
