"""
Shared fixtures: an application on a fresh in-memory database plus a
seeder for teams, competitions and games.
"""

from datetime import date, datetime, timedelta

import pytest

from app import CompetitionEngineApp
from models.competition import CompetitionType
from models.game import GameStatus

BASE_TIME = datetime(2026, 3, 1, 15, 0)


class Seeder:
    """Creates test data through the application's own operations."""

    def __init__(self, app: CompetitionEngineApp):
        self.app = app

    def teams(self, count: int, prefix: str = "Team") -> list[int]:
        """Register ``count`` teams and return their ids in creation order."""
        ids = []
        for i in range(1, count + 1):
            result = self.app.add_team(f"{prefix} {i:02d}")
            assert result.ok, result.error
            ids.append(result.data["id"])
        return ids

    def competition(self, team_ids: list[int],
                    competition_type: CompetitionType = CompetitionType.TOURNAMENT,
                    seeded: bool = True) -> int:
        """Create a competition and enroll the teams, seeded in list order."""
        result = self.app.create_competition(
            name=f"{competition_type.value.title()} Cup",
            competition_type=competition_type,
            start_date=date(2026, 3, 1),
        )
        assert result.ok, result.error
        competition_id = result.data["id"]

        for seed, team_id in enumerate(team_ids, start=1):
            enrolled = self.app.enroll_team(competition_id, team_id, seed=seed if seeded else None)
            assert enrolled.ok, enrolled.error
        return competition_id

    def play(self, home: int, away: int, home_score: int, away_score: int,
             day: int = 0, season_id=None, competition_id=None) -> int:
        """Record a completed game ``day`` days after the base time; returns its id."""
        result = self.app.record_game(
            home_team_id=home,
            away_team_id=away,
            home_score=home_score,
            away_score=away_score,
            status=GameStatus.COMPLETED,
            played_at=BASE_TIME + timedelta(days=day),
            season_id=season_id,
            competition_id=competition_id,
        )
        assert result.ok, result.error
        return result.data["id"]

    @staticmethod
    def matches(bracket: dict) -> list[dict]:
        """Flatten a serialized bracket into its matches, round by round."""
        return [m for bracket_round in bracket["rounds"] for m in bracket_round["matches"]]


@pytest.fixture
def engine_app():
    """A CompetitionEngineApp on its own in-memory SQLite database."""
    app = CompetitionEngineApp("sqlite://")
    app.init_db()
    yield app
    app.close()


@pytest.fixture
def seed(engine_app):
    return Seeder(engine_app)
