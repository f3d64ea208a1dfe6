"""
Team strength rating.

The rating is a heuristic strength index, not ELO: there is no
opponent-strength term.

    rating = base + win_rate * win_rate_weight + goal_diff_per_game * goal_diff_weight

With the defaults a team that wins every game by one goal rates 1250.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from config import RANKING, SCORING, RankingSettings, ScoringSettings
from engine.streaks import LOSS, WIN, format_streak, leading_run, longest_run, result_for


def compute_rating(games_played: int, wins: int, goals_for: int, goals_against: int,
                   settings: RankingSettings = RANKING) -> float:
    """
    Strength rating for a record.

    Returns exactly ``settings.base_rating`` for a team with no games.
    """
    if games_played <= 0:
        return float(settings.base_rating)

    win_rate = wins / games_played
    goal_diff_per_game = (goals_for - goals_against) / games_played
    rating = (settings.base_rating
              + win_rate * settings.win_rate_weight
              + goal_diff_per_game * settings.goal_diff_weight)
    return round(rating, settings.rating_precision)


@dataclass
class StreakSummary:
    """Streaks over the recent-games window."""
    current_type: Optional[str] = None
    current_count: int = 0
    longest_win_streak: int = 0

    @property
    def compact(self) -> str:
        return format_streak(self.current_type, self.current_count)


def summarize_streaks(results: list[str], window: int = RANKING.streak_window) -> StreakSummary:
    """
    Current and longest-win streaks from results ordered most recent first.

    Only the first ``window`` results are inspected, so the longest win
    streak is "within the recent window", not all-time.
    """
    recent = results[:window]
    current_type, current_count = leading_run(recent)
    return StreakSummary(
        current_type=current_type,
        current_count=current_count,
        longest_win_streak=longest_run(recent, WIN),
    )


@dataclass
class TeamRecord:
    """Aggregate record of one team over a set of completed games."""
    team_id: int
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    goals_for: int = 0
    goals_against: int = 0
    clean_sheets: int = 0
    home_wins: int = 0
    away_wins: int = 0
    # Most recent first
    results: list[str] = field(default_factory=list)

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def points(self, scoring: ScoringSettings = SCORING) -> int:
        return (self.wins * scoring.points_per_win
                + self.draws * scoring.points_per_draw
                + self.losses * scoring.points_per_loss)

    @property
    def win_percentage(self) -> float:
        if not self.games_played:
            return 0.0
        return round(self.wins / self.games_played * 100, 2)

    @property
    def avg_goals_per_game(self) -> float:
        if not self.games_played:
            return 0.0
        return round(self.goals_for / self.games_played, 2)

    @property
    def avg_goals_conceded(self) -> float:
        if not self.games_played:
            return 0.0
        return round(self.goals_against / self.games_played, 2)

    def rating(self, settings: RankingSettings = RANKING) -> float:
        return compute_rating(self.games_played, self.wins, self.goals_for,
                              self.goals_against, settings)

    def streaks(self, settings: RankingSettings = RANKING) -> StreakSummary:
        return summarize_streaks(self.results, settings.streak_window)


def summarize_games(team_id: int, games: Iterable[Any]) -> TeamRecord:
    """
    Aggregate completed games for one team.

    Args:
        team_id: Team to aggregate for
        games: Completed games involving the team, most recent first
    """
    record = TeamRecord(team_id=team_id)

    for game in games:
        result = result_for(team_id, game.home_team_id, game.away_team_id,
                            game.home_score, game.away_score)
        is_home = game.home_team_id == team_id
        scored = game.home_score if is_home else game.away_score
        conceded = game.away_score if is_home else game.home_score

        record.games_played += 1
        record.goals_for += scored
        record.goals_against += conceded
        if conceded == 0:
            record.clean_sheets += 1

        if result == WIN:
            record.wins += 1
            if is_home:
                record.home_wins += 1
            else:
                record.away_wins += 1
        elif result == LOSS:
            record.losses += 1
        else:
            record.draws += 1

        record.results.append(result)

    return record


def rank_records(records: Iterable[TeamRecord],
                 settings: RankingSettings = RANKING) -> list[tuple[int, TeamRecord]]:
    """
    Order records by rating (highest first), team id breaking ties.

    Returns:
        (overall_rank, record) pairs
    """
    ordered = sorted(records, key=lambda r: (-r.rating(settings), r.team_id))
    return list(enumerate(ordered, start=1))


__all__ = [
    "WIN",
    "LOSS",
    "compute_rating",
    "StreakSummary",
    "summarize_streaks",
    "TeamRecord",
    "summarize_games",
    "rank_records",
]
