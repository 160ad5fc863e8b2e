"""
Game configuration and constants.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..exceptions import ConfigurationError


# Game-mode flags accepted in `options`
VALID_OPTIONS = ("daystart", "dayless", "nightless")

# Side names accepted in `overturn_sides`
SIDE_NAMES = ("NONE", "VILLAGE", "MAFIA", "THE_JOKER")


# (seconds remaining, message) pairs posted while the day is running
DEFAULT_DAY_REMINDERS: List[Tuple[float, str]] = [
    (300, "5min remaining."),
    (150, "2min30s remaining."),
    (60, "1min remaining."),
] + [(n, str(n)) for n in range(10, 0, -1)]


@dataclass
class GameConfig:
    """Configuration for game parameters."""
    
    # Time limits (seconds)
    day_duration: float = 600
    night_duration: float = 420
    revenge_duration: float = 120
    day_reminders: List[Tuple[float, str]] = field(default_factory=lambda: list(DEFAULT_DAY_REMINDERS))
    
    # Game settings
    options: List[str] = field(default_factory=list)  # any of "daystart", "dayless", "nightless"
    setup: Optional[str] = None  # name of a setup in SETUPS (used if roles not specified)
    roles: Optional[List[str]] = field(default=None)  # explicit role names, one per player
    hide_numbers_first_night: bool = True
    overturn_sides: List[str] = field(default_factory=lambda: ["VILLAGE"])
    random_seed: Optional[int] = None
    
    # Chat settings
    day_channel: str = "mafia"
    mafia_channel: str = "mafia-secret"
    player_role: str = "Mafia Player"
    
    log_level: str = "INFO"
    
    def __post_init__(self):
        """Validate values and normalise the reminder table."""
        unknown = [o for o in self.options if o not in VALID_OPTIONS]
        if unknown:
            raise ConfigurationError(
                f"Unknown game option(s): {', '.join(unknown)}",
                {"valid_options": list(VALID_OPTIONS)}
            )
        for name in ("day_duration", "night_duration", "revenge_duration"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        for side in self.overturn_sides:
            if side not in SIDE_NAMES:
                raise ConfigurationError(f"Unknown side in overturn_sides: {side}")
        # YAML gives lists, not tuples
        self.day_reminders = [(float(seconds), str(text)) for seconds, text in self.day_reminders]
    
    def has_option(self, option: str) -> bool:
        """Check if a game-mode option is enabled."""
        return option in self.options


# Default configuration instance
default_config = GameConfig()
