"""
Chat-mediated Mafia: phase state machine, role actions and a pluggable chat gateway.
"""

__version__ = "0.1.0"
