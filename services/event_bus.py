"""
Event Bus - Central signal hub for competition events.

Services emit here after their transaction commits; listeners (a UI, a
notifier, a test) connect to the signals they care about. Nothing in the
engine depends on anyone listening.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for the Competition Engine.

    One EventBus belongs to one application context; there is no
    process-wide instance.

    Usage:
        # In BracketService
        self.event_bus.emit_match_result(competition_id, match_id, winner_id, loser_id)

        # In a display
        event_bus.standings_updated.connect(self._on_standings_updated)
    """

    # ============ Bracket Events ============
    bracket_generated = Signal(int, int)        # competition_id, match count
    match_result_recorded = Signal(dict)        # {competition_id, match_id, winner_team_id, loser_team_id}
    match_scheduled = Signal(int, int)          # competition_id, match_id
    team_eliminated = Signal(int, int, int)     # competition_id, team_id, round_number
    tournament_completed = Signal(int, int)     # competition_id, champion team_id

    # ============ League Events ============
    standings_initialized = Signal(int)         # competition_id
    standings_updated = Signal(int, int)        # competition_id, game_id

    # ============ Analytics Events ============
    rankings_recalculated = Signal(int)         # number of teams ranked
    caches_invalidated = Signal(dict)           # {game_id, team_ids}

    # ============ System Events ============
    store_error = Signal(str)                   # Store error message
    system_message = Signal(str, str)           # (level, message) - e.g., ("info", "Bracket generated")

    def __init__(self):
        super().__init__()

    def emit_match_result(self, competition_id: int, match_id: int,
                          winner_team_id: int, loser_team_id) -> None:
        """Convenience method to emit a recorded bracket result."""
        self.match_result_recorded.emit({
            "competition_id": competition_id,
            "match_id": match_id,
            "winner_team_id": winner_team_id,
            "loser_team_id": loser_team_id,
        })

    def emit_message(self, level: str, message: str) -> None:
        """Emit a system message (info, warning, error)."""
        self.system_message.emit(level, message)
