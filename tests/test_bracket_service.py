"""
Tests for bracket generation and results through the application.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from models.competition import CompetitionType


class TestGenerateBracket:
    """Tests for generating a stored bracket."""

    @pytest.fixture(autouse=True)
    def setup(self, engine_app, seed):
        self.app = engine_app
        self.seed = seed

    def test_five_team_bracket(self):
        """Seeds [A..E]: 3 rounds, 7 matches, E advances on a bye."""
        teams = self.seed.teams(5)
        competition_id = self.seed.competition(teams)

        result = self.app.generate_bracket(competition_id)

        assert result.ok, result.error
        bracket = result.data
        assert bracket["total_rounds"] == 3
        assert bracket["total_matches"] == 7
        assert [r["round_name"] for r in bracket["rounds"]] == ["Quarter Finals", "Semi Finals", "Final"]
        assert [len(r["matches"]) for r in bracket["rounds"]] == [4, 2, 1]

        first_round = bracket["rounds"][0]["matches"]
        assert (first_round[0]["home_team_id"], first_round[0]["away_team_id"]) == (teams[0], teams[1])
        assert (first_round[1]["home_team_id"], first_round[1]["away_team_id"]) == (teams[2], teams[3])

        bye = first_round[2]
        assert bye["is_bye"]
        assert bye["status"] == "completed"
        assert bye["winner_team_id"] == teams[4]
        assert [m["is_bye"] for m in first_round].count(True) == 1

    def test_forward_links_form_a_tree(self):
        teams = self.seed.teams(8)
        competition_id = self.seed.competition(teams)

        matches = self.seed.matches(self.app.generate_bracket(competition_id).data)
        by_id = {m["id"]: m for m in matches}

        roots = [m for m in matches if m["next_bracket_id"] is None]
        assert len(roots) == 1
        assert roots[0]["round_name"] == "Final"
        for match in matches:
            if match["next_bracket_id"] is not None:
                assert by_id[match["next_bracket_id"]]["round_number"] == match["round_number"] + 1

    def test_seed_order_with_unseeded_last(self):
        teams = self.seed.teams(4)
        competition_id = self.seed.competition([], CompetitionType.TOURNAMENT)
        self.app.enroll_team(competition_id, teams[3], seed=None)
        self.app.enroll_team(competition_id, teams[2], seed=1)
        self.app.enroll_team(competition_id, teams[0], seed=2)
        self.app.enroll_team(competition_id, teams[1], seed=None)

        first_round = self.app.generate_bracket(competition_id).data["rounds"][0]["matches"]

        assert (first_round[0]["home_team_id"], first_round[0]["away_team_id"]) == (teams[2], teams[0])
        # Unseeded teams follow by name: "Team 02" before "Team 04"
        assert (first_round[1]["home_team_id"], first_round[1]["away_team_id"]) == (teams[1], teams[3])

    def test_insufficient_teams(self):
        teams = self.seed.teams(1)
        competition_id = self.seed.competition(teams)

        result = self.app.generate_bracket(competition_id)

        assert not result.ok
        assert result.error.code == "InsufficientTeams"
        assert result.error.kind == "validation"

    def test_league_has_no_bracket(self):
        teams = self.seed.teams(4)
        competition_id = self.seed.competition(teams, CompetitionType.LEAGUE)

        result = self.app.generate_bracket(competition_id)

        assert not result.ok
        assert result.error.code == "NotATournament"

    def test_unknown_competition(self):
        result = self.app.generate_bracket(404)
        assert not result.ok
        assert result.error.kind == "not_found"

    def test_regeneration_must_be_explicit(self):
        teams = self.seed.teams(4)
        competition_id = self.seed.competition(teams)
        first = self.app.generate_bracket(competition_id)
        match_id = first.data["rounds"][0]["matches"][0]["id"]
        self.app.submit_match_result(competition_id, match_id, teams[1])

        again = self.app.generate_bracket(competition_id)
        assert not again.ok
        assert again.error.code == "BracketAlreadyExists"

        rebuilt = self.app.generate_bracket(competition_id, regenerate=True)
        assert rebuilt.ok
        assert rebuilt.data["total_matches"] == 3
        assert all(m["winner_team_id"] is None for m in self.seed.matches(rebuilt.data))
        entries = self.app.list_teams(competition_id).data
        assert not any(e["is_eliminated"] for e in entries)

    def test_get_bracket_matches_generated(self):
        teams = self.seed.teams(6)
        competition_id = self.seed.competition(teams)
        generated = self.app.generate_bracket(competition_id).data

        fetched = self.app.get_bracket(competition_id)

        assert fetched.ok
        assert fetched.data == generated


class TestSubmitMatchResult:
    """Tests for advancing winners and eliminating losers."""

    @pytest.fixture(autouse=True)
    def setup(self, engine_app, seed):
        self.app = engine_app
        self.seed = seed
        self.teams = seed.teams(4)
        self.competition_id = seed.competition(self.teams)
        bracket = engine_app.generate_bracket(self.competition_id).data
        self.semis = bracket["rounds"][0]["matches"]
        self.final = bracket["rounds"][1]["matches"][0]

    def entries(self) -> dict:
        return {e["team_id"]: e for e in self.app.list_teams(self.competition_id).data}

    def test_winner_advances_and_loser_eliminated(self):
        a, b = self.teams[0], self.teams[1]

        result = self.app.submit_match_result(self.competition_id, self.semis[0]["id"], b)

        assert result.ok, result.error
        assert result.data["winner_team_id"] == b
        assert result.data["status"] == "completed"

        final = self.seed.matches(self.app.get_bracket(self.competition_id).data)[2]
        assert final["home_team_id"] == b
        assert final["away_team_id"] is None

        entries = self.entries()
        assert entries[a]["is_eliminated"]
        assert entries[a]["elimination_round"] == 1
        assert not entries[b]["is_eliminated"]

    def test_exactly_one_team_eliminated_per_match(self):
        self.app.submit_match_result(self.competition_id, self.semis[1]["id"], self.teams[2])
        eliminated = [t for t, e in self.entries().items() if e["is_eliminated"]]
        assert eliminated == [self.teams[3]]

    def test_invalid_winner(self):
        result = self.app.submit_match_result(self.competition_id, self.semis[0]["id"], self.teams[2])
        assert not result.ok
        assert result.error.code == "InvalidWinner"
        assert result.error.kind == "conflict"

    def test_match_from_other_competition(self):
        result = self.app.submit_match_result(self.competition_id, 999, self.teams[0])
        assert not result.ok
        assert result.error.code == "MatchNotFound"

    def test_final_not_ready(self):
        self.app.submit_match_result(self.competition_id, self.semis[0]["id"], self.teams[0])
        result = self.app.submit_match_result(self.competition_id, self.final["id"], self.teams[0])
        assert not result.ok
        assert result.error.code == "MatchNotReady"
        assert result.error.kind == "state"

    def test_resubmitting_same_winner_is_noop(self):
        match_id = self.semis[0]["id"]
        self.app.submit_match_result(self.competition_id, match_id, self.teams[0])
        listener = MagicMock()
        self.app.event_bus.match_result_recorded.connect(listener)

        again = self.app.submit_match_result(self.competition_id, match_id, self.teams[0])

        assert again.ok
        listener.assert_not_called()

    def test_changing_winner_rejected(self):
        match_id = self.semis[0]["id"]
        self.app.submit_match_result(self.competition_id, match_id, self.teams[0])

        result = self.app.submit_match_result(self.competition_id, match_id, self.teams[1])

        assert not result.ok
        assert result.error.code == "MatchAlreadyDecided"
        assert self.entries()[self.teams[1]]["is_eliminated"]

    def test_outsider_on_decided_match_is_invalid_winner(self):
        match_id = self.semis[0]["id"]
        self.app.submit_match_result(self.competition_id, match_id, self.teams[0])

        result = self.app.submit_match_result(self.competition_id, match_id, self.teams[2])

        assert not result.ok
        assert result.error.code == "InvalidWinner"
        assert result.error.kind == "conflict"

    def test_outsider_on_bye_is_invalid_winner(self, seed):
        teams = seed.teams(3, prefix="Trio")
        competition_id = seed.competition(teams)
        bye = seed.matches(self.app.generate_bracket(competition_id).data)[1]
        assert bye["is_bye"]

        result = self.app.submit_match_result(competition_id, bye["id"], teams[0])

        assert result.error.code == "InvalidWinner"
        assert result.error.kind == "conflict"

    def test_game_reference_recorded(self):
        game_id = self.seed.play(self.teams[0], self.teams[1], 4, 2)
        result = self.app.submit_match_result(self.competition_id, self.semis[0]["id"],
                                              self.teams[0], game_id=game_id)
        assert result.data["game_id"] == game_id

    def test_unknown_game_reference(self):
        result = self.app.submit_match_result(self.competition_id, self.semis[0]["id"],
                                              self.teams[0], game_id=777)
        assert not result.ok
        assert result.error.code == "GameNotFound"

    def test_final_completes_tournament(self):
        a, c = self.teams[0], self.teams[2]
        completed = MagicMock()
        self.app.event_bus.tournament_completed.connect(completed)

        self.app.submit_match_result(self.competition_id, self.semis[0]["id"], a)
        self.app.submit_match_result(self.competition_id, self.semis[1]["id"], c)
        result = self.app.submit_match_result(self.competition_id, self.final["id"], c)

        assert result.ok
        competition = self.app.get_competition(self.competition_id).data
        assert competition["status"] == "completed"

        entries = self.entries()
        assert entries[c]["final_rank"] == 1
        assert entries[a]["final_rank"] == 2
        assert entries[a]["is_eliminated"]
        assert entries[a]["elimination_round"] == 2
        completed.assert_called_once_with(self.competition_id, c)

    def test_events_emitted(self):
        recorded = MagicMock()
        eliminated = MagicMock()
        self.app.event_bus.match_result_recorded.connect(recorded)
        self.app.event_bus.team_eliminated.connect(eliminated)

        self.app.submit_match_result(self.competition_id, self.semis[0]["id"], self.teams[0])

        recorded.assert_called_once_with({
            "competition_id": self.competition_id,
            "match_id": self.semis[0]["id"],
            "winner_team_id": self.teams[0],
            "loser_team_id": self.teams[1],
        })
        eliminated.assert_called_once_with(self.competition_id, self.teams[1], 1)

    def test_first_result_starts_competition(self):
        self.app.submit_match_result(self.competition_id, self.semis[0]["id"], self.teams[0])
        assert self.app.get_competition(self.competition_id).data["status"] == "in_progress"


class TestTransitiveByes:
    """Tests for byes that resolve after a result."""

    def test_result_next_to_empty_slot_advances_twice(self, engine_app, seed):
        """Six teams: the winner of match 3 goes straight to the Final."""
        teams = seed.teams(6)
        competition_id = seed.competition(teams)
        matches = seed.matches(engine_app.generate_bracket(competition_id).data)
        match_three = matches[2]

        engine_app.submit_match_result(competition_id, match_three["id"], teams[5])

        after = seed.matches(engine_app.get_bracket(competition_id).data)
        second_semi = after[5]
        final = after[6]
        assert second_semi["is_bye"]
        assert second_semi["winner_team_id"] == teams[5]
        assert final["away_team_id"] == teams[5]


class TestPlayThrough:
    """Tests for playing every match of a bracket to the end."""

    @pytest.mark.parametrize("team_count", range(2, 10))
    def test_one_champion_and_n_minus_one_eliminations(self, engine_app, seed, team_count):
        teams = seed.teams(team_count)
        competition_id = seed.competition(teams)
        generated = seed.matches(engine_app.generate_bracket(competition_id).data)
        bye_winners = {m["winner_team_id"] for m in generated if m["is_bye"]}

        entries = {e["team_id"]: e for e in engine_app.list_teams(competition_id).data}
        assert not any(entries[t]["is_eliminated"] for t in bye_winners)

        losers = {}
        while True:
            playable = [m for m in seed.matches(engine_app.get_bracket(competition_id).data)
                        if m["status"] != "completed"
                        and m["home_team_id"] is not None and m["away_team_id"] is not None]
            if not playable:
                break
            match = playable[0]
            result = engine_app.submit_match_result(competition_id, match["id"], match["home_team_id"])
            assert result.ok, result.error
            losers[match["away_team_id"]] = match["round_number"]

        assert len(losers) == team_count - 1

        entries = {e["team_id"]: e for e in engine_app.list_teams(competition_id).data}
        eliminated = {t: e["elimination_round"] for t, e in entries.items() if e["is_eliminated"]}
        assert eliminated == losers

        champions = [t for t, e in entries.items() if e["final_rank"] == 1]
        assert len(champions) == 1
        assert champions[0] not in eliminated
        assert engine_app.get_competition(competition_id).data["status"] == "completed"


class TestScheduleMatch:
    """Tests for scheduling bracket matches."""

    def test_schedule_pending_match(self, engine_app, seed):
        teams = seed.teams(2)
        competition_id = seed.competition(teams)
        final = seed.matches(engine_app.generate_bracket(competition_id).data)[0]
        when = datetime(2026, 4, 1, 19, 30)

        result = engine_app.schedule_match(competition_id, final["id"], when)

        assert result.ok, result.error
        assert result.data["status"] == "scheduled"
        assert result.data["scheduled_date"].startswith("2026-04-01T19:30")

        decided = engine_app.submit_match_result(competition_id, final["id"], teams[0])
        assert decided.data["status"] == "completed"

    def test_cannot_schedule_completed_match(self, engine_app, seed):
        teams = seed.teams(3)
        competition_id = seed.competition(teams)
        bye = seed.matches(engine_app.generate_bracket(competition_id).data)[1]

        result = engine_app.schedule_match(competition_id, bye["id"], datetime(2026, 4, 1))

        assert not result.ok
        assert result.error.code == "MatchAlreadyDecided"
