"""
League standings calculations.

Pure functions over standings rows. A row is anything with the
CompetitionStanding counter attributes, which keeps these usable both on
ORM rows and on plain objects in tests.

Derived fields (points, goal difference) are always recomputed from the
counters in the same call that changes them, never incremented
separately.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from config import SCORING, ScoringSettings
from engine.streaks import LOSS, WIN, result_for


@dataclass(frozen=True)
class GameOutcome:
    """Per-side view of one completed game."""
    team_id: int
    result: str
    goals_for: int
    goals_against: int
    is_home: bool


def outcomes_for_game(home_team_id: int, away_team_id: int,
                      home_score: int, away_score: int) -> tuple[GameOutcome, GameOutcome]:
    """Split a game into the home outcome and the away outcome."""
    home = GameOutcome(
        team_id=home_team_id,
        result=result_for(home_team_id, home_team_id, away_team_id, home_score, away_score),
        goals_for=home_score,
        goals_against=away_score,
        is_home=True,
    )
    away = GameOutcome(
        team_id=away_team_id,
        result=result_for(away_team_id, home_team_id, away_team_id, home_score, away_score),
        goals_for=away_score,
        goals_against=home_score,
        is_home=False,
    )
    return home, away


def points_for(wins: int, draws: int, losses: int = 0,
               scoring: ScoringSettings = SCORING) -> int:
    """League points for a record."""
    return (wins * scoring.points_per_win
            + draws * scoring.points_per_draw
            + losses * scoring.points_per_loss)


def push_form(form: str, result: str, length: int = SCORING.form_length) -> str:
    """Prepend the newest result and keep at most ``length`` characters."""
    return (result + (form or ""))[:length]


def apply_outcome(row: Any, outcome: GameOutcome, scoring: ScoringSettings = SCORING) -> None:
    """
    Fold one game outcome into a standings row in place.

    Args:
        row: Standings row for ``outcome.team_id``
        outcome: The team's side of the game
    """
    row.games_played += 1
    row.goals_for += outcome.goals_for
    row.goals_against += outcome.goals_against

    side = "home" if outcome.is_home else "away"
    if outcome.result == WIN:
        row.wins += 1
        _bump(row, f"{side}_wins")
    elif outcome.result == LOSS:
        row.losses += 1
        _bump(row, f"{side}_losses")
    else:
        row.draws += 1
        _bump(row, f"{side}_draws")

    row.goal_difference = row.goals_for - row.goals_against
    row.points = points_for(row.wins, row.draws, row.losses, scoring)
    row.form = push_form(row.form, outcome.result, scoring.form_length)


def _bump(row: Any, attr: str) -> None:
    setattr(row, attr, (getattr(row, attr) or 0) + 1)


COUNTERS = (
    "games_played", "wins", "losses", "draws",
    "goals_for", "goals_against", "goal_difference", "points",
    "home_wins", "home_losses", "home_draws",
    "away_wins", "away_losses", "away_draws",
)


def reset_counters(row: Any) -> None:
    """Zero every counter and clear the form of a standings row."""
    for attr in COUNTERS:
        setattr(row, attr, 0)
    row.form = ""


def standing_sort_key(row: Any) -> tuple:
    """Points, goal difference, goals for (all descending), then team id."""
    return (-row.points, -row.goal_difference, -row.goals_for, row.team_id)


def rank_standings(rows: Iterable[Any]) -> list[Any]:
    """
    Sort rows into table order and write ``rank`` = 1-based position.

    Returns:
        The rows in rank order
    """
    ordered = sorted(rows, key=standing_sort_key)
    for position, row in enumerate(ordered, start=1):
        row.rank = position
    return ordered


def is_consistent(row: Any, scoring: ScoringSettings = SCORING) -> bool:
    """True when the derived fields agree with the counters."""
    return (
        row.points == points_for(row.wins, row.draws, row.losses, scoring)
        and row.goal_difference == row.goals_for - row.goals_against
        and row.games_played == row.wins + row.losses + row.draws
        and len(row.form or "") <= scoring.form_length
    )


__all__ = [
    "WIN",
    "LOSS",
    "GameOutcome",
    "outcomes_for_game",
    "points_for",
    "push_form",
    "apply_outcome",
    "reset_counters",
    "standing_sort_key",
    "rank_standings",
    "is_consistent",
]
