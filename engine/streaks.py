"""
Streak calculations shared by rankings and head-to-head.

All sequences are ordered most recent first. A run is the block of equal
entries at the front of the sequence. ``None`` marks "no result for this
side" (a drawn head-to-head game): it never starts a run and it ends any
run it meets. Team form uses "D" for a draw instead, so a draw is its own
result type there and still breaks a run of wins.
"""

from typing import Hashable, Optional, Sequence, TypeVar

WIN = "W"
LOSS = "L"
DRAW = "D"

T = TypeVar("T", bound=Hashable)


def result_for(team_id: int, home_team_id: int, away_team_id: int,
               home_score: int, away_score: int) -> str:
    """
    Result of a game from one team's side.

    Args:
        team_id: The team whose result is wanted (must be home or away)

    Returns:
        "W", "L" or "D"
    """
    if team_id == home_team_id:
        scored, conceded = home_score, away_score
    elif team_id == away_team_id:
        scored, conceded = away_score, home_score
    else:
        raise ValueError(f"Team {team_id} did not play in this game")

    if scored > conceded:
        return WIN
    if scored < conceded:
        return LOSS
    return DRAW


def winner_of(home_team_id: int, away_team_id: int,
              home_score: int, away_score: int) -> Optional[int]:
    """Winning team id, or None for a draw."""
    if home_score > away_score:
        return home_team_id
    if away_score > home_score:
        return away_team_id
    return None


def leading_run(results: Sequence[Optional[T]]) -> tuple[Optional[T], int]:
    """
    The run formed by the most recent entry.

    Returns:
        (value, length), or (None, 0) when the sequence is empty or starts
        with None
    """
    if not results or results[0] is None:
        return None, 0

    first = results[0]
    count = 0
    for result in results:
        if result != first:
            break
        count += 1
    return first, count


def longest_run(results: Sequence[Optional[T]], value: T) -> int:
    """Longest block of consecutive ``value`` entries anywhere in the sequence."""
    longest = 0
    current = 0
    for result in results:
        if result == value:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def format_streak(result: Optional[str], count: int) -> str:
    """Compact streak label, e.g. "W3". Empty when there is no streak."""
    if not result or count <= 0:
        return ""
    return f"{result}{count}"
