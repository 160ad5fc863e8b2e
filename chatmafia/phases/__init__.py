"""
Phase handlers for the day and night phases.
"""

from .day_phase import DayPhaseHandler
from .night_phase import NightPhaseHandler

__all__ = ['DayPhaseHandler', 'NightPhaseHandler']
