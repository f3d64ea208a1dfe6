"""
Tests for the Tournament Bracket Engine

Tests bracket construction, round naming, bye and void resolution,
and winner advancement on the in-memory tree.
"""

import math
from types import SimpleNamespace

import pytest

from engine.tournament_bracket import BracketTree, round_count, round_name
from exceptions import (
    InsufficientTeams,
    InvalidWinner,
    MatchAlreadyDecided,
    MatchNotFound,
    MatchNotReady,
    ValidationError,
)
from models.bracket import BracketSlot


class TestBracketConstruction:
    """Tests for building the bracket skeleton."""

    def test_fewer_than_two_teams_rejected(self):
        """A bracket needs at least two teams."""
        with pytest.raises(InsufficientTeams):
            BracketTree.build([])
        with pytest.raises(InsufficientTeams):
            BracketTree.build([7])

    def test_duplicate_team_rejected(self):
        """The same team cannot be seeded twice."""
        with pytest.raises(ValidationError):
            BracketTree.build([1, 2, 2])

    def test_two_teams_is_a_single_final(self):
        """Two teams play one match, the Final."""
        tree = BracketTree.build([10, 20])

        assert tree.rounds == 1
        assert len(tree.nodes) == 1
        final = tree.final
        assert final.round_name == "Final"
        assert (final.home_team_id, final.away_team_id) == (10, 20)
        assert not final.is_complete

    @pytest.mark.parametrize("team_count", list(range(2, 34)))
    def test_round_and_decisive_match_counts(self, team_count):
        """ceil(log2 n) rounds and exactly n - 1 matches that must be played."""
        tree = BracketTree.build(list(range(1, team_count + 1)))

        assert tree.rounds == math.ceil(math.log2(team_count))
        assert len(tree.nodes) == 2 ** tree.rounds - 1
        assert len(tree.decisive_matches()) == team_count - 1

        if team_count & (team_count - 1) == 0:
            assert tree.byes() == []
            assert tree.voids() == []
        else:
            assert tree.byes() or tree.voids()

    def test_round_one_pairs_adjacent_seeds(self):
        """Round 1 match i takes teams 2i and 2i + 1."""
        tree = BracketTree.build([11, 12, 13, 14, 15, 16, 17, 18])
        first_round = tree.matches_by_round()[1]

        pairs = [(m.home_team_id, m.away_team_id) for m in first_round]
        assert pairs == [(11, 12), (13, 14), (15, 16), (17, 18)]

    def test_match_numbers_are_global_and_consecutive(self):
        """Match numbers run 1..size-1 across all rounds."""
        tree = BracketTree.build(list(range(1, 9)))
        numbers = [n.match_number for n in tree.ordered()]
        assert numbers == list(range(1, 8))

    def test_parents_and_slot_hints_fixed_at_build(self):
        """Match i feeds match i // 2 of the next round; even positions go home."""
        tree = BracketTree.build(list(range(1, 9)))
        rounds = tree.matches_by_round()

        for round_number in (1, 2):
            parents = rounds[round_number + 1]
            for position, node in enumerate(rounds[round_number]):
                assert node.parent_id == parents[position // 2].node_id
                expected = BracketSlot.HOME if position % 2 == 0 else BracketSlot.AWAY
                assert node.parent_slot == expected

        assert tree.final.parent_id is None


class TestRoundNames:
    """Tests for round naming by distance from the final."""

    def test_named_rounds(self):
        assert round_name(0, 1) == "Final"
        assert round_name(1, 2) == "Semi Finals"
        assert round_name(2, 4) == "Quarter Finals"

    def test_earlier_rounds_use_team_count(self):
        assert round_name(3, 8) == "Round of 16"
        assert round_name(4, 16) == "Round of 32"

    def test_names_in_32_team_bracket(self):
        """A 32-team bracket runs Round of 32 through Final."""
        tree = BracketTree.build(list(range(1, 33)))
        names = [nodes[0].round_name for _, nodes in sorted(tree.matches_by_round().items())]
        assert names == ["Round of 32", "Round of 16", "Quarter Finals", "Semi Finals", "Final"]

    def test_round_count(self):
        assert round_count(2) == 1
        assert round_count(5) == 3
        assert round_count(8) == 3
        assert round_count(9) == 4


class TestByes:
    """Tests for bye and void resolution."""

    def test_five_team_example(self):
        """[A,B,C,D,E]: 3 rounds, 7 matches, E gets the only round-1 bye."""
        a, b, c, d, e = 1, 2, 3, 4, 5
        tree = BracketTree.build([a, b, c, d, e])
        rounds = tree.matches_by_round()

        assert tree.rounds == 3
        assert len(tree.nodes) == 7
        assert len(rounds[1]) == 4
        assert len(rounds[2]) == 2
        assert len(rounds[3]) == 1

        pairs = [(m.home_team_id, m.away_team_id) for m in rounds[1]]
        assert pairs == [(a, b), (c, d), (e, None), (None, None)]

        round_one_byes = [m for m in rounds[1] if m.is_bye]
        assert len(round_one_byes) == 1
        assert round_one_byes[0].winner_team_id == e
        assert round_one_byes[0].is_complete

        # The (bye, bye) slot is void: complete with no winner
        void = rounds[1][3]
        assert void.is_void
        assert void.winner_team_id is None

    def test_bye_winner_has_no_loser(self):
        tree = BracketTree.build([1, 2, 3])
        bye = tree.matches_by_round()[1][1]
        assert bye.is_bye
        assert bye.loser_team_id is None

    def test_transitive_byes_carry_team_to_final(self):
        """With 9 teams, team 9 is carried through three byes into the Final."""
        tree = BracketTree.build(list(range(1, 10)))

        assert tree.final.away_team_id == 9
        assert [n.match_number for n in tree.byes()] == [5, 11, 14]
        assert [n.match_number for n in tree.voids()] == [6, 7, 8, 12]
        assert len(tree.decisive_matches()) == 8

    def test_bye_waits_for_its_feeder(self):
        """With 6 teams, the second semi becomes a bye once match 3 is decided."""
        tree = BracketTree.build([1, 2, 3, 4, 5, 6])
        semi = tree.nodes[6]
        assert not semi.is_complete
        assert len(tree.decisive_matches()) == 5

        result = tree.advance(3, 6)

        assert semi.is_bye
        assert semi.winner_team_id == 6
        assert tree.final.away_team_id == 6
        assert semi in result.auto_advanced

    def test_propagation_is_idempotent(self):
        """Running propagation again on a settled bracket changes nothing."""
        for team_count in (3, 5, 6, 9, 13, 17):
            tree = BracketTree.build(list(range(1, team_count + 1)))
            before = tree.snapshot()

            assert tree.propagate_byes() == []
            assert tree.snapshot() == before


class TestAdvancement:
    """Tests for recording winners."""

    def setup_method(self):
        """Five-team bracket: matches 1-4 round 1, 5-6 semis, 7 final."""
        self.tree = BracketTree.build([1, 2, 3, 4, 5])

    def test_winner_moves_into_fixed_slot(self):
        """Match 1 feeds the home slot of match 5, match 2 the away slot."""
        self.tree.advance(2, 4)
        semi = self.tree.nodes[5]
        assert semi.home_team_id is None
        assert semi.away_team_id == 4

        self.tree.advance(1, 1)
        assert semi.home_team_id == 1

    def test_loser_reported(self):
        result = self.tree.advance(1, 2)
        assert result.changed
        assert result.loser_team_id == 1

    def test_invalid_winner(self):
        with pytest.raises(InvalidWinner):
            self.tree.advance(1, 3)

    def test_unknown_match(self):
        with pytest.raises(MatchNotFound):
            self.tree.advance(99, 1)

    def test_match_not_ready(self):
        """A semi with only one team cannot be decided yet."""
        self.tree.advance(1, 1)
        with pytest.raises(MatchNotReady):
            self.tree.advance(5, 1)

    def test_same_winner_is_noop(self):
        self.tree.advance(1, 1)
        before = self.tree.snapshot()

        result = self.tree.advance(1, 1)

        assert not result.changed
        assert self.tree.snapshot() == before

    def test_changing_winner_rejected(self):
        self.tree.advance(1, 1)
        with pytest.raises(MatchAlreadyDecided):
            self.tree.advance(1, 2)

    def test_void_match_cannot_be_decided(self):
        """A void match has no teams, so nobody can win it."""
        with pytest.raises(InvalidWinner):
            self.tree.advance(4, 1)

    def test_outsider_on_completed_match_is_invalid_winner(self):
        """Team membership is checked before the match state."""
        self.tree.advance(1, 1)
        with pytest.raises(InvalidWinner):
            self.tree.advance(1, 3)
        with pytest.raises(InvalidWinner):
            self.tree.advance(3, 1)

    def test_bye_winner_resubmitted_is_noop(self):
        result = self.tree.advance(3, 5)
        assert not result.changed

    def test_full_run_to_final(self):
        """Every decisive match played leaves one champion."""
        self.tree.advance(1, 1)
        self.tree.advance(2, 4)
        self.tree.advance(5, 4)

        final = self.tree.final
        assert (final.home_team_id, final.away_team_id) == (4, 5)

        result = self.tree.advance(final.node_id, 5)
        assert final.is_complete
        assert final.winner_team_id == 5
        assert result.loser_team_id == 4


class TestFromMatches:
    """Tests for rebuilding the tree from stored rows."""

    def test_round_trip_through_rows(self):
        """Rows carry enough to rebuild feeders and state."""
        tree = BracketTree.build(list(range(1, 7)))
        rows = [
            SimpleNamespace(
                id=n.node_id,
                round_number=n.round_number,
                match_number=n.match_number,
                round_name=n.round_name,
                home_team_id=n.home_team_id,
                away_team_id=n.away_team_id,
                winner_team_id=n.winner_team_id,
                is_completed=n.is_complete,
                is_bye=n.is_bye,
                next_bracket_id=n.parent_id,
                next_slot=n.parent_slot,
            )
            for n in tree.ordered()
        ]

        rebuilt = BracketTree.from_matches(rows)

        assert rebuilt.snapshot() == tree.snapshot()
        for node_id, node in tree.nodes.items():
            assert rebuilt.nodes[node_id].home_feeder_id == node.home_feeder_id
            assert rebuilt.nodes[node_id].away_feeder_id == node.away_feeder_id
            assert rebuilt.nodes[node_id].position == node.position
