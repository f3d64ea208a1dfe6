"""
Team and Season models.

Both are owned by the roster provider; the engine only reads them.
"""

from datetime import date
from typing import Optional

from sqlalchemy import String, Date
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Team(Base):
    """A team that can be entered into competitions."""
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    abbreviation: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"


class Season(Base):
    """A season used to scope games, competitions and rankings."""
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(default=False)

    def __repr__(self) -> str:
        return f"<Season(id={self.id}, name='{self.name}')>"
