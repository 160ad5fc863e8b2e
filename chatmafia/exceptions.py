"""
Exceptions raised at the configuration and setup boundary.

In-game mistakes (bad targets, wrong phase) are answered in chat, not raised.
"""


class MafiaError(Exception):
    """Base exception for all game errors."""
    
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)
    
    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(MafiaError):
    """Raised when configuration is invalid."""
    
    pass


class SetupError(MafiaError):
    """Raised when a game cannot be started with the given players and roles."""
    
    pass


class UnknownRoleError(SetupError):
    """Raised when a role or setup name is not in the role table."""
    
    pass


class GameStateError(MafiaError):
    """Raised when a lifecycle call does not fit the game's current state."""
    
    pass
