"""
Competition Engine core

Bracket, standings, rating and head-to-head calculations.
Nothing here opens sessions or emits signals; the services do that.
"""

from engine.tournament_bracket import BracketTree, BracketNode, AdvanceResult, round_name
from engine.standings import apply_outcome, outcomes_for_game, rank_standings, points_for
from engine.rating import TeamRecord, StreakSummary, compute_rating, summarize_games
from engine.head_to_head import HeadToHeadSummary, canonical_pair, summarize_pair
from engine.streaks import leading_run, longest_run, format_streak, result_for

__all__ = [
    "BracketTree",
    "BracketNode",
    "AdvanceResult",
    "round_name",
    "apply_outcome",
    "outcomes_for_game",
    "rank_standings",
    "points_for",
    "TeamRecord",
    "StreakSummary",
    "compute_rating",
    "summarize_games",
    "HeadToHeadSummary",
    "canonical_pair",
    "summarize_pair",
    "leading_run",
    "longest_run",
    "format_streak",
    "result_for",
]
