"""
Pydantic schemas for data validation and caller-facing responses.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.bracket import BracketMatchStatus
from models.competition import CompetitionStatus, CompetitionType
from models.game import GameStatus


# ============ Team Schemas ============

class TeamCreate(BaseModel):
    """Schema for registering a team."""
    name: str = Field(..., min_length=1, max_length=200)
    abbreviation: Optional[str] = Field(None, min_length=2, max_length=5)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class TeamResponse(BaseModel):
    """Schema for team response."""
    id: int
    name: str
    abbreviation: Optional[str]

    class Config:
        from_attributes = True


class SeasonCreate(BaseModel):
    """Schema for registering a season."""
    name: str = Field(..., min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = False


class SeasonResponse(BaseModel):
    """Schema for season response."""
    id: int
    name: str
    start_date: Optional[date]
    end_date: Optional[date]
    is_active: bool

    class Config:
        from_attributes = True


# ============ Competition Schemas ============

class CompetitionCreate(BaseModel):
    """Schema for creating a competition."""
    name: str = Field(..., min_length=1, max_length=255)
    competition_type: CompetitionType
    start_date: date
    end_date: Optional[date] = None
    season_id: Optional[int] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def end_after_start(self) -> "CompetitionCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class CompetitionResponse(BaseModel):
    """Schema for competition response."""
    id: int
    name: str
    competition_type: CompetitionType
    status: CompetitionStatus
    season_id: Optional[int]
    start_date: date
    end_date: Optional[date]
    description: Optional[str]

    class Config:
        from_attributes = True


class TeamEnroll(BaseModel):
    """Schema for entering a team into a competition."""
    team_id: int = Field(..., ge=1)
    seed: Optional[int] = Field(None, ge=1)
    group_name: Optional[str] = Field(None, max_length=50)


class CompetitionTeamResponse(BaseModel):
    """Schema for an enrolled team."""
    competition_id: int
    team_id: int
    team_name: Optional[str] = None
    seed: Optional[int]
    group_name: Optional[str]
    is_eliminated: bool
    elimination_round: Optional[int]
    final_rank: Optional[int]

    class Config:
        from_attributes = True


# ============ Game Schemas ============

class GameCreate(BaseModel):
    """Schema for recording a game from the results feed."""
    home_team_id: int = Field(..., ge=1)
    away_team_id: int = Field(..., ge=1)
    home_score: int = Field(default=0, ge=0)
    away_score: int = Field(default=0, ge=0)
    status: GameStatus = GameStatus.SCHEDULED
    played_at: Optional[datetime] = None
    season_id: Optional[int] = None
    competition_id: Optional[int] = None

    @model_validator(mode="after")
    def distinct_teams(self) -> "GameCreate":
        if self.home_team_id == self.away_team_id:
            raise ValueError("Home and away team must be different")
        return self


class GameScore(BaseModel):
    """Schema for a final or corrected score."""
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    played_at: Optional[datetime] = None


class GameResponse(BaseModel):
    """Schema for game response."""
    id: int
    home_team_id: int
    away_team_id: int
    home_score: int
    away_score: int
    status: GameStatus
    played_at: Optional[datetime]
    season_id: Optional[int]
    competition_id: Optional[int]

    class Config:
        from_attributes = True


# ============ Bracket Schemas ============

class MatchResultSubmit(BaseModel):
    """Schema for submitting a bracket match result."""
    winner_team_id: int = Field(..., ge=1)
    game_id: Optional[int] = Field(None, ge=1)


class MatchSchedule(BaseModel):
    """Schema for scheduling a bracket match."""
    scheduled_date: datetime
    game_id: Optional[int] = Field(None, ge=1)


class BracketMatchResponse(BaseModel):
    """Schema for one bracket match."""
    id: int
    competition_id: int
    round_number: int
    round_name: str
    match_number: int
    home_team_id: Optional[int]
    away_team_id: Optional[int]
    winner_team_id: Optional[int]
    next_bracket_id: Optional[int]
    game_id: Optional[int]
    scheduled_date: Optional[datetime]
    status: BracketMatchStatus
    is_bye: bool

    class Config:
        from_attributes = True


class BracketRound(BaseModel):
    """All matches of one round."""
    round_number: int
    round_name: str
    matches: list[BracketMatchResponse] = Field(default_factory=list)


class BracketResponse(BaseModel):
    """A full bracket grouped by round."""
    competition_id: int
    total_rounds: int
    total_matches: int
    rounds: list[BracketRound] = Field(default_factory=list)


# ============ Standings Schemas ============

class StandingResponse(BaseModel):
    """Schema for one row of a league table."""
    competition_id: int
    team_id: int
    rank: Optional[int]
    games_played: int
    wins: int
    losses: int
    draws: int
    goals_for: int
    goals_against: int
    goal_difference: int
    points: int
    form: str
    home_wins: int
    home_losses: int
    home_draws: int
    away_wins: int
    away_losses: int
    away_draws: int

    class Config:
        from_attributes = True


# ============ Ranking Schemas ============

class StreakInfo(BaseModel):
    """A run of identical results, e.g. three wins."""
    type: Optional[str] = None
    count: int = 0


class TeamRankingResponse(BaseModel):
    """Schema for a team's computed ranking."""
    team_id: int
    team_name: Optional[str] = None
    season_id: Optional[int] = None
    overall_rank: Optional[int] = None
    games_played: int
    wins: int
    losses: int
    draws: int
    goals_for: int
    goals_against: int
    goal_difference: int
    clean_sheets: int
    points: int
    rating: float
    win_percentage: float
    avg_goals_per_game: float
    avg_goals_conceded: float
    longest_win_streak: int
    current_streak: StreakInfo = Field(default_factory=StreakInfo)
    current_streak_display: str = ""


class TeamComparison(BaseModel):
    """One team's line in a side-by-side comparison."""
    team_id: int
    team_name: Optional[str] = None
    games_played: int
    wins: int
    losses: int
    draws: int
    goals_for: int
    goals_against: int
    goal_difference: int
    win_percentage: float
    avg_goals_per_game: float
    avg_goals_conceded: float
    home_wins: int
    away_wins: int
    rating: float


# ============ Head-to-Head Schemas ============

class TeamSide(BaseModel):
    """One side of a head-to-head record."""
    team_id: int
    team_name: Optional[str] = None
    wins: int
    goals: int


class HeadToHeadStreak(BaseModel):
    """Current run of consecutive wins in a pairing."""
    team_id: int
    count: int = Field(..., ge=1)


class RecentGame(BaseModel):
    """A game listed under a head-to-head record."""
    id: int
    home_team_id: int
    away_team_id: int
    home_score: int
    away_score: int
    played_at: Optional[datetime]
    winner_team_id: Optional[int] = None


class HeadToHeadResponse(BaseModel):
    """
    Head-to-head record, oriented so that team1 is the first team the
    caller asked about.
    """
    pair_key: str
    team1: TeamSide
    team2: TeamSide
    total_games: int
    draws: int
    last_game_id: Optional[int] = None
    last_game_date: Optional[datetime] = None
    current_streak: Optional[HeadToHeadStreak] = None
    recent_games: list[RecentGame] = Field(default_factory=list)


# ============ Operation Result ============

class ErrorDetail(BaseModel):
    """Structured error returned at the operation boundary."""
    kind: str
    code: str
    message: str


class OperationResult(BaseModel):
    """Outcome of an application operation: data on success, error otherwise."""
    ok: bool
    data: Any = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: str, code: str, message: str) -> "OperationResult":
        return cls(ok=False, error=ErrorDetail(kind=kind, code=code, message=message))
