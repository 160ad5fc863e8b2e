"""
Event emitter for broadcasting game events to listeners.
"""

import logging
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[str, Dict[str, Any]], None]


class EventEmitter:
    """Fans game events out to registered listeners, such as the web server."""
    
    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = Lock()
    
    def register_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)
    
    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit an event to every listener."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event_type, data)
            except Exception:
                # Don't let a broken listener break the game
                logger.exception("Error delivering %s event", event_type)
    
    def emit_game_start(self, players: List[Dict[str, Any]]) -> None:
        """Emit game start event."""
        self._emit("game_start", {
            "players": players
        })
    
    def emit_phase_change(self, phase: str, day: int) -> None:
        """Emit phase change event."""
        self._emit("phase_change", {
            "phase": phase,
            "day": day
        })
    
    def emit_vote(self, voter: int, target: Optional[int], day: int) -> None:
        """Emit vote event. target 0 is a vote for nobody, None a withdrawn vote."""
        self._emit("vote", {
            "voter": voter,
            "target": target,
            "day": day
        })
    
    def emit_death(self, player_number: int, name: str, role: str, killer: Optional[int], day: int) -> None:
        """Emit player death event."""
        self._emit("death", {
            "player_number": player_number,
            "name": name,
            "role": role,
            "killer": killer,
            "day": day
        })
    
    def emit_announcement(self, message: str, phase: Optional[str], day: int) -> None:
        """Emit public announcement event."""
        self._emit("announcement", {
            "message": message,
            "phase": phase,
            "day": day
        })
    
    def emit_game_over(self, winner: str, day: int) -> None:
        """Emit game over event."""
        self._emit("game_over", {
            "winner": winner,
            "day": day
        })
