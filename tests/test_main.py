"""
Tests for the command line entry point.
"""

import json
from unittest.mock import MagicMock

import pytest

import main


class TestCommandLine:
    """Tests for building a competition from the command line."""

    @pytest.fixture(autouse=True)
    def setup(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(main, "init_config", MagicMock())
        self.database = f"sqlite:///{tmp_path / 'cli.db'}"
        self.capsys = capsys
        assert self.run("init-db")["ok"]

    def run(self, *argv, expect_ok=True) -> dict:
        code = main.main(["--database", self.database, *argv])
        result = json.loads(self.capsys.readouterr().out)
        assert (code == 0) == expect_ok
        assert result["ok"] == expect_ok
        return result

    def test_tournament_from_scratch(self):
        home = self.run("team", "add", "Dalto", "--abbreviation", "DAL")["data"]["id"]
        away = self.run("team", "add", "Ferro")["data"]["id"]
        season = self.run("season", "add", "2026", "--start", "2026-01-01")["data"]["id"]

        competition = self.run("competition", "create", "Spring Cup", "--type", "tournament",
                               "--start", "2026-03-01", "--season", str(season))["data"]
        assert competition["competition_type"] == "tournament"
        assert competition["season_id"] == season

        self.run("enroll", str(competition["id"]), str(home), "--seed", "1")
        self.run("enroll", str(competition["id"]), str(away), "--seed", "2")

        bracket = self.run("bracket", "generate", str(competition["id"]))["data"]
        final = bracket["rounds"][0]["matches"][0]
        assert (final["home_team_id"], final["away_team_id"]) == (home, away)

    def test_record_and_complete_game(self):
        home = self.run("team", "add", "Dalto")["data"]["id"]
        away = self.run("team", "add", "Ferro")["data"]["id"]

        game = self.run("game", "record", str(home), str(away))["data"]
        assert game["status"] == "scheduled"

        completed = self.run("game", "complete", str(game["id"]), "2", "1")["data"]
        assert completed["status"] == "completed"
        assert (completed["home_score"], completed["away_score"]) == (2, 1)

    def test_failure_exits_non_zero(self):
        result = self.run("enroll", "7", "7", expect_ok=False)
        assert result["error"]["kind"] == "not_found"
