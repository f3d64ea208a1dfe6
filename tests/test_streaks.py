"""
Tests for the shared streak algorithm.
"""

import pytest

from engine.streaks import (
    DRAW,
    LOSS,
    WIN,
    format_streak,
    leading_run,
    longest_run,
    result_for,
    winner_of,
)


class TestResultFor:
    """Tests for per-team results."""

    def test_home_and_away_views(self):
        assert result_for(1, 1, 2, 3, 1) == WIN
        assert result_for(2, 1, 2, 3, 1) == LOSS
        assert result_for(1, 1, 2, 2, 2) == DRAW
        assert result_for(2, 1, 2, 2, 2) == DRAW

    def test_team_not_in_game(self):
        with pytest.raises(ValueError):
            result_for(3, 1, 2, 1, 0)

    def test_winner_of(self):
        assert winner_of(1, 2, 3, 1) == 1
        assert winner_of(1, 2, 0, 1) == 2
        assert winner_of(1, 2, 1, 1) is None


class TestRuns:
    """Tests for run detection (most recent first)."""

    def test_leading_run(self):
        assert leading_run(["W", "W", "L", "W"]) == ("W", 2)
        assert leading_run(["L"]) == ("L", 1)

    def test_draws_form_their_own_run(self):
        """For team form a draw is a result type, so D2 is a valid streak."""
        assert leading_run(["D", "D", "W"]) == ("D", 2)

    def test_draw_breaks_a_win_run(self):
        assert leading_run(["W", "D", "W", "W"]) == ("W", 1)

    def test_empty_sequence(self):
        assert leading_run([]) == (None, 0)

    def test_none_never_starts_a_run(self):
        """Head-to-head encodes a draw as no winner: no streak at all."""
        assert leading_run([None, 5, 5]) == (None, 0)

    def test_none_ends_a_run(self):
        assert leading_run([5, 5, None, 5]) == (5, 2)

    def test_opposing_win_ends_a_run(self):
        assert leading_run([5, 7, 5]) == (5, 1)

    def test_longest_run(self):
        results = ["W", "L", "W", "W", "W", "D", "W", "W"]
        assert longest_run(results, "W") == 3
        assert longest_run(results, "L") == 1
        assert longest_run(results, "D") == 1
        assert longest_run([], "W") == 0

    def test_format_streak(self):
        assert format_streak("W", 3) == "W3"
        assert format_streak("D", 2) == "D2"
        assert format_streak(None, 0) == ""
        assert format_streak("L", 0) == ""
