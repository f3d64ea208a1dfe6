"""
Competition Engine Services

Transactional services over the engine: competitions, brackets,
standings, rankings, head-to-head and the game feed.
"""

from services.event_bus import EventBus
from services.locking import CompetitionLocks
from services.queries import CompetitionFilter, GameFilter
from services.roster import RosterService
from services.competition_service import CompetitionService
from services.bracket_service import BracketService
from services.standings_service import StandingsService
from services.ranking_service import RankingService
from services.head_to_head_service import HeadToHeadService
from services.game_feed import GameFeed

__all__ = [
    "EventBus",
    "CompetitionLocks",
    "CompetitionFilter",
    "GameFilter",
    "RosterService",
    "CompetitionService",
    "BracketService",
    "StandingsService",
    "RankingService",
    "HeadToHeadService",
    "GameFeed",
]
