"""
Chat gateway contract: messages, reactions, collectors and permissions.

The game never talks to a chat platform directly. It sends text, opens
collectors and edits permission overwrites through a ChatGateway; the
gateway feeds inbound messages and reactions back through dispatch_*.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

EVERYONE = "@everyone"


@dataclass(frozen=True)
class Member:
    """A chat participant."""
    id: str
    name: str
    bot: bool = False
    
    @property
    def mention(self) -> str:
        return f"<@{self.id}>"


@dataclass(eq=False)
class Message:
    """A message in a channel or DM."""
    id: int
    channel: str
    author: Optional[Member]
    content: str
    reactions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Reaction:
    """A reaction added to a message."""
    message: Message
    emoji: str
    user: Member


@dataclass(frozen=True)
class Permissions:
    """A permission overwrite. None leaves the flag untouched."""
    view: Optional[bool] = None
    send: Optional[bool] = None
    react: Optional[bool] = None
    attach: Optional[bool] = None


VIEW = Permissions(view=True)
NO_SEND = Permissions(send=False, react=False, attach=False)
PARTIAL_SEND = Permissions(send=True, react=True, attach=False)
FULL_SEND = Permissions(send=True, react=True, attach=True)

# A permission target is a member or a role name (EVERYONE included)
PermissionTarget = Union[Member, str]


class Collector:
    """Open-ended subscription to matching chat input."""
    
    def __init__(self, handler: Callable, predicate: Optional[Callable] = None):
        self.handler = handler
        self.predicate = predicate
        self.stopped = False
        self.stop_reason: Optional[str] = None
    
    def stop(self, reason: str = "stopped") -> None:
        """Stop collecting. A stopped collector never calls its handler again."""
        if not self.stopped:
            self.stopped = True
            self.stop_reason = reason
    
    def feed(self, item) -> None:
        if self.stopped:
            return
        if self.predicate is None or self.predicate(item):
            self.handler(item)


class MessageCollector(Collector):
    """Collects messages posted in one channel."""
    
    def __init__(self, channel: str, handler: Callable, predicate: Optional[Callable] = None):
        super().__init__(handler, predicate)
        self.channel = channel


class ReactionCollector(Collector):
    """Collects reactions added to one message."""
    
    def __init__(self, message: Message, handler: Callable, predicate: Optional[Callable] = None):
        super().__init__(handler, predicate)
        self.message = message


class ChatGateway(ABC):
    """
    Base class for chat platforms.
    
    Subclasses implement the transport (send/edit/react/permissions/roles);
    collector bookkeeping and dispatch are shared.
    """
    
    def __init__(self):
        self._message_collectors: List[MessageCollector] = []
        self._reaction_collectors: List[ReactionCollector] = []
        self._message_ids = itertools.count(1)
        # every inbound event and timer callback runs under this lock
        self.lock = threading.RLock()
    
    @abstractmethod
    def send(self, channel: str, content: str) -> Message:
        """Send a message to a channel and return it."""
        pass
    
    @abstractmethod
    def edit(self, message: Message, content: str) -> None:
        """Replace the text of a previously sent message."""
        pass
    
    @abstractmethod
    def react(self, message: Message, emoji: str) -> None:
        """Add a reaction to a message as the bot."""
        pass
    
    @abstractmethod
    def set_permissions(self, channel: str, target: PermissionTarget, permissions: Permissions) -> None:
        """Create or edit the permission overwrite of a role or member on a channel."""
        pass
    
    @abstractmethod
    def clear_permissions(self, channel: str, target: PermissionTarget) -> None:
        """Delete the permission overwrite of a role or member on a channel."""
        pass
    
    @abstractmethod
    def add_role(self, member: Member, role: str) -> None:
        pass
    
    @abstractmethod
    def remove_role(self, member: Member, role: str) -> None:
        pass
    
    def next_message_id(self) -> int:
        return next(self._message_ids)
    
    def dm_channel(self, member: Member) -> str:
        """Name of the direct-message channel with a member."""
        return f"dm:{member.id}"
    
    def send_dm(self, member: Member, content: str) -> Message:
        return self.send(self.dm_channel(member), content)
    
    def reply(self, message: Message, content: str) -> Message:
        """Answer a message in its own channel, mentioning its author."""
        if message.author is None:
            return self.send(message.channel, content)
        return self.send(message.channel, f"{message.author.mention} {content}")
    
    def create_message_collector(self, channel: str, handler: Callable[[Message], None],
                                 predicate: Optional[Callable[[Message], bool]] = None) -> MessageCollector:
        collector = MessageCollector(channel, handler, predicate)
        self._message_collectors.append(collector)
        return collector
    
    def create_reaction_collector(self, message: Message, handler: Callable[[Reaction], None],
                                  predicate: Optional[Callable[[Reaction], bool]] = None) -> ReactionCollector:
        collector = ReactionCollector(message, handler, predicate)
        self._reaction_collectors.append(collector)
        return collector
    
    def dispatch_message(self, message: Message) -> None:
        """Deliver an inbound message to every open collector on its channel."""
        if message.author is None or message.author.bot:
            return
        with self.lock:
            self._message_collectors = [c for c in self._message_collectors if not c.stopped]
            # handlers may open or stop collectors
            for collector in list(self._message_collectors):
                if collector.channel == message.channel:
                    collector.feed(message)
    
    def dispatch_reaction(self, reaction: Reaction) -> None:
        """Deliver an inbound reaction to every open collector on its message."""
        if reaction.user.bot:
            return
        with self.lock:
            self._reaction_collectors = [c for c in self._reaction_collectors if not c.stopped]
            for collector in list(self._reaction_collectors):
                if collector.message is reaction.message:
                    collector.feed(reaction)
    
    def open_collectors(self) -> List[Collector]:
        """Collectors that have not been stopped yet."""
        return [c for c in self._message_collectors + self._reaction_collectors if not c.stopped]
