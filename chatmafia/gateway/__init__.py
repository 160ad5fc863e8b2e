"""
Chat gateway: the boundary between the game and a chat platform.
"""

from .base import (
    ChatGateway, Collector, MessageCollector, ReactionCollector,
    Member, Message, Reaction, Permissions,
    EVERYONE, VIEW, NO_SEND, PARTIAL_SEND, FULL_SEND,
)
from .memory import InMemoryGateway

__all__ = [
    'ChatGateway', 'Collector', 'MessageCollector', 'ReactionCollector',
    'Member', 'Message', 'Reaction', 'Permissions',
    'EVERYONE', 'VIEW', 'NO_SEND', 'PARTIAL_SEND', 'FULL_SEND',
    'InMemoryGateway',
]
