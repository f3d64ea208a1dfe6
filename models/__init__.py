"""
Competition Engine Database Models

SQLAlchemy ORM models for competitions, brackets, standings and the
derived ranking caches.
"""

from models.base import Base, Database
from models.team import Team, Season
from models.game import Game, GameStatus
from models.competition import Competition, CompetitionTeam, CompetitionType, CompetitionStatus
from models.bracket import BracketMatch, BracketMatchStatus, BracketSlot
from models.standing import CompetitionStanding, StandingGame
from models.ranking import TeamRankingSnapshot, HeadToHeadSnapshot

__all__ = [
    "Base",
    "Database",
    "Team",
    "Season",
    "Game",
    "GameStatus",
    "Competition",
    "CompetitionTeam",
    "CompetitionType",
    "CompetitionStatus",
    "BracketMatch",
    "BracketMatchStatus",
    "BracketSlot",
    "CompetitionStanding",
    "StandingGame",
    "TeamRankingSnapshot",
    "HeadToHeadSnapshot",
]
