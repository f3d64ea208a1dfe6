"""
Exceptions for the Competition Engine.

Every error raised by the engine and services inherits from
CompetitionEngineError. The ``kind`` attribute is what the application
facade reports back to callers, so one except clause at the operation
boundary is enough to turn any of these into a structured error.
"""


class CompetitionEngineError(Exception):
    """Base exception for all Competition Engine errors."""

    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or "")
        self.message = message or (self.__class__.__doc__ or "").strip()


# ============ Validation ============

class ValidationError(CompetitionEngineError):
    """Malformed input."""

    kind = "validation"


class InsufficientTeams(ValidationError):
    """At least 2 teams are needed to build a bracket."""


class NotATournament(ValidationError):
    """Brackets can only be generated for tournament competitions."""


class InvalidComparison(ValidationError):
    """Team comparison needs a bounded set of distinct teams."""


class SameTeam(ValidationError):
    """A team cannot be compared against itself."""


# ============ Not Found ============

class NotFoundError(CompetitionEngineError):
    """Referenced entity does not exist."""

    kind = "not_found"


class CompetitionNotFound(NotFoundError):
    """Competition not found."""


class TeamNotFound(NotFoundError):
    """Team not found."""


class MatchNotFound(NotFoundError):
    """Bracket match not found."""


class GameNotFound(NotFoundError):
    """Game not found."""


class UnknownTeam(NotFoundError):
    """Team is not enrolled in the competition."""


# ============ Conflict ============

class ConflictError(CompetitionEngineError):
    """Request conflicts with existing data."""

    kind = "conflict"


class InvalidWinner(ConflictError):
    """Winner must be one of the teams in the match."""


class DuplicateEnrollment(ConflictError):
    """Team is already in this competition."""


class BracketAlreadyExists(ConflictError):
    """A bracket already exists; regeneration must be requested explicitly."""


class StandingsAlreadyInitialized(ConflictError):
    """Standings already exist for this competition."""


class GameAlreadyApplied(ConflictError):
    """Game has already been applied to these standings."""


class ConstraintViolation(ConflictError):
    """The store rejected the write because it breaks a constraint."""


# ============ State ============

class StateError(CompetitionEngineError):
    """Operation is not valid in the current state."""

    kind = "state"


class GameNotCompleted(StateError):
    """Game must be completed to update standings."""


class MatchAlreadyDecided(StateError):
    """Bracket match already has a different winner."""


class MatchNotReady(StateError):
    """Bracket match does not have both teams yet."""


class StandingsNotInitialized(StateError):
    """Standings have not been initialized for this competition."""


# ============ Store ============

class StoreError(CompetitionEngineError):
    """The relational store could not be reached or timed out."""

    kind = "store"
