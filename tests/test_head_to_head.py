"""
Tests for head-to-head records between two teams.
"""

from types import SimpleNamespace

import pytest

from engine.head_to_head import canonical_pair, pair_key, summarize_pair
from exceptions import SameTeam


def game(game_id, home, away, home_score, away_score):
    return SimpleNamespace(id=game_id, home_team_id=home, away_team_id=away,
                           home_score=home_score, away_score=away_score, played_at=None)


class TestPairSummary:
    """Tests for the in-memory pair record."""

    def test_canonical_pair(self):
        assert canonical_pair(9, 4) == (4, 9)
        assert canonical_pair(4, 9) == (4, 9)
        assert pair_key(9, 4) == "4-9"

    def test_same_team_rejected(self):
        with pytest.raises(SameTeam):
            canonical_pair(3, 3)

    def test_counts_in_canonical_orientation(self):
        # Most recent first
        games = [game(3, 9, 4, 2, 0), game(2, 4, 9, 1, 1), game(1, 4, 9, 3, 0)]

        summary = summarize_pair(9, 4, games)

        assert (summary.team1_id, summary.team2_id) == (4, 9)
        assert summary.total_games == 3
        assert (summary.team1_wins, summary.team2_wins, summary.draws) == (1, 1, 1)
        assert (summary.team1_goals, summary.team2_goals) == (4, 3)
        assert summary.last_game_id == 3
        assert (summary.streak_team_id, summary.streak_count) == (9, 1)

    def test_consecutive_wins_extend_streak(self):
        games = [game(3, 4, 9, 1, 0), game(2, 9, 4, 0, 2), game(1, 9, 4, 1, 0)]
        summary = summarize_pair(4, 9, games)
        assert (summary.streak_team_id, summary.streak_count) == (4, 2)

    def test_drawn_last_game_means_no_streak(self):
        games = [game(2, 4, 9, 1, 1), game(1, 4, 9, 3, 0)]
        summary = summarize_pair(4, 9, games)
        assert summary.streak_team_id is None
        assert summary.streak_count == 0

    def test_no_games(self):
        summary = summarize_pair(4, 9, [])
        assert summary.total_games == 0
        assert summary.last_game_id is None
        assert summary.streak_team_id is None


class TestHeadToHeadService:
    """Tests for head-to-head through the application."""

    @pytest.fixture(autouse=True)
    def setup(self, engine_app, seed):
        """A beats B 2-1, they draw 1-1, then B beats A 2-0."""
        self.app = engine_app
        self.seed = seed
        self.a, self.b, self.c = seed.teams(3)
        self.first = seed.play(self.a, self.b, 2, 1, day=0)
        self.second = seed.play(self.b, self.a, 1, 1, day=1)
        self.third = seed.play(self.b, self.a, 2, 0, day=2)
        seed.play(self.a, self.c, 5, 0, day=3)

    def test_record(self):
        result = self.app.get_head_to_head(self.a, self.b)

        assert result.ok, result.error
        record = result.data
        assert record["pair_key"] == f"{self.a}-{self.b}"
        assert record["total_games"] == 3
        assert record["draws"] == 1
        assert record["team1"] == {"team_id": self.a, "team_name": "Team 01", "wins": 1, "goals": 3}
        assert record["team2"] == {"team_id": self.b, "team_name": "Team 02", "wins": 1, "goals": 4}
        assert record["last_game_id"] == self.third
        assert record["current_streak"] == {"team_id": self.b, "count": 1}
        assert [g["id"] for g in record["recent_games"]] == [self.third, self.second, self.first]

    def test_reversed_order_swaps_sides(self):
        forward = self.app.get_head_to_head(self.a, self.b).data
        reverse = self.app.get_head_to_head(self.b, self.a).data

        assert reverse["pair_key"] == forward["pair_key"]
        assert reverse["team1"] == forward["team2"]
        assert reverse["team2"] == forward["team1"]
        assert reverse["total_games"] == forward["total_games"]
        assert reverse["current_streak"] == forward["current_streak"]

    def test_wins_and_draws_add_up(self):
        record = self.app.get_head_to_head(self.b, self.a).data
        assert record["team1"]["wins"] + record["team2"]["wins"] + record["draws"] == record["total_games"]

    def test_later_draw_clears_streak(self):
        self.seed.play(self.a, self.b, 0, 0, day=4)
        record = self.app.get_head_to_head(self.a, self.b).data
        assert record["current_streak"] is None

    def test_limit_caps_recent_games_only(self):
        record = self.app.get_head_to_head(self.a, self.b, limit=2).data
        assert [g["id"] for g in record["recent_games"]] == [self.third, self.second]
        assert record["total_games"] == 3

        assert self.app.get_head_to_head(self.a, self.b, limit=0).data["recent_games"] == []

    def test_recent_game_winner(self):
        record = self.app.get_head_to_head(self.a, self.b).data
        winners = [g["winner_team_id"] for g in record["recent_games"]]
        assert winners == [self.b, None, self.a]

    def test_pair_without_games(self):
        record = self.app.get_head_to_head(self.b, self.c).data
        assert record["total_games"] == 0
        assert record["current_streak"] is None
        assert record["recent_games"] == []

    def test_same_team(self):
        result = self.app.get_head_to_head(self.a, self.a)
        assert not result.ok
        assert result.error.code == "SameTeam"
        assert result.error.kind == "validation"

    def test_unknown_team(self):
        result = self.app.get_head_to_head(self.a, 999)
        assert not result.ok
        assert result.error.code == "TeamNotFound"

    def test_negative_limit(self):
        result = self.app.get_head_to_head(self.a, self.b, limit=-1)
        assert not result.ok
        assert result.error.kind == "validation"

    def test_cache_written_then_cleared_by_correction(self):
        self.app.get_head_to_head(self.b, self.a)
        assert self.app.games.cached_pairs() == [(self.a, self.b)]

        assert self.app.correct_score(self.third, 0, 2).ok
        assert self.app.games.cached_pairs() == []

        record = self.app.get_head_to_head(self.a, self.b).data
        assert record["team1"]["wins"] == 2
        assert record["current_streak"] == {"team_id": self.a, "count": 1}

    def test_correction_leaves_other_pairs_cached(self):
        self.app.get_head_to_head(self.a, self.b)
        self.app.get_head_to_head(self.a, self.c)

        self.app.correct_score(self.first, 1, 1)

        assert self.app.games.cached_pairs() == [(self.a, self.c)]
