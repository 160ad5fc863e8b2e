"""
Web interface module for playing over Socket.IO.
"""

from .event_emitter import EventEmitter
from .game_server import ChatServer

__all__ = ['EventEmitter', 'ChatServer']
