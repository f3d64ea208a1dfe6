"""
Head-to-head record between two teams.

The pair is identified by its canonical key (lower id first). A summary
is always built from the games themselves; callers asking for the pair
in the other order get the same numbers with the sides swapped.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from engine.streaks import leading_run, winner_of
from exceptions import SameTeam


def canonical_pair(team_a: int, team_b: int) -> tuple[int, int]:
    """(low id, high id) for an unordered pair."""
    if team_a == team_b:
        raise SameTeam(f"Cannot compare team {team_a} with itself")
    return (team_a, team_b) if team_a < team_b else (team_b, team_a)


def pair_key(team_a: int, team_b: int) -> str:
    low, high = canonical_pair(team_a, team_b)
    return f"{low}-{high}"


@dataclass
class HeadToHeadSummary:
    """Aggregate record in canonical orientation (team1 has the lower id)."""
    team1_id: int
    team2_id: int
    total_games: int = 0
    team1_wins: int = 0
    team2_wins: int = 0
    draws: int = 0
    team1_goals: int = 0
    team2_goals: int = 0
    last_game_id: Optional[int] = None
    last_game_date: Optional[datetime] = None
    streak_team_id: Optional[int] = None
    streak_count: int = 0

    @property
    def pair_key(self) -> str:
        return f"{self.team1_id}-{self.team2_id}"

    def side(self, team_id: int) -> tuple[int, int]:
        """(wins, goals) for one of the two teams."""
        if team_id == self.team1_id:
            return self.team1_wins, self.team1_goals
        if team_id == self.team2_id:
            return self.team2_wins, self.team2_goals
        raise ValueError(f"Team {team_id} is not part of pair {self.pair_key}")


def summarize_pair(team_a: int, team_b: int, games: Iterable[Any]) -> HeadToHeadSummary:
    """
    Build the record for a pair.

    Args:
        games: Completed games between the two teams, most recent first

    The current streak is the run of most recent wins by one side. A draw
    ends a run and never starts one, so a drawn last game means no streak.
    """
    low, high = canonical_pair(team_a, team_b)
    summary = HeadToHeadSummary(team1_id=low, team2_id=high)
    winners: list[Optional[int]] = []

    for game in games:
        if summary.last_game_id is None:
            summary.last_game_id = game.id
            summary.last_game_date = game.played_at

        summary.total_games += 1
        if game.home_team_id == low:
            summary.team1_goals += game.home_score
            summary.team2_goals += game.away_score
        else:
            summary.team1_goals += game.away_score
            summary.team2_goals += game.home_score

        winner = winner_of(game.home_team_id, game.away_team_id,
                           game.home_score, game.away_score)
        if winner == low:
            summary.team1_wins += 1
        elif winner == high:
            summary.team2_wins += 1
        else:
            summary.draws += 1
        winners.append(winner)

    summary.streak_team_id, summary.streak_count = leading_run(winners)
    return summary
