"""
In-memory chat gateway.

Keeps every sent message, permission overwrite and member role in plain
Python structures. Tests drive games through it, and the web server builds
on it.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from .base import (
    ChatGateway, EVERYONE, Member, Message, PermissionTarget, Permissions, Reaction,
)


def _target_key(target: PermissionTarget) -> str:
    return target.id if isinstance(target, Member) else target


class InMemoryGateway(ChatGateway):
    """Gateway that records everything it is asked to do."""
    
    def __init__(self, bot_name: str = "Mafia Bot"):
        super().__init__()
        self.user = Member("bot", bot_name, bot=True)
        self.sent: List[Message] = []
        self.overwrites: Dict[Tuple[str, str], Permissions] = {}
        self.member_roles: Dict[str, Set[str]] = defaultdict(set)
    
    # Transport
    
    def send(self, channel: str, content: str) -> Message:
        message = Message(self.next_message_id(), channel, self.user, content)
        self.sent.append(message)
        return message
    
    def edit(self, message: Message, content: str) -> None:
        message.content = content
    
    def react(self, message: Message, emoji: str) -> None:
        message.reactions.append(emoji)
    
    def set_permissions(self, channel: str, target: PermissionTarget, permissions: Permissions) -> None:
        self.overwrites[(channel, _target_key(target))] = permissions
    
    def clear_permissions(self, channel: str, target: PermissionTarget) -> None:
        self.overwrites.pop((channel, _target_key(target)), None)
    
    def add_role(self, member: Member, role: str) -> None:
        self.member_roles[member.id].add(role)
    
    def remove_role(self, member: Member, role: str) -> None:
        self.member_roles[member.id].discard(role)
    
    # Inbound events
    
    def post(self, channel: str, author: Member, content: str) -> Message:
        """Simulate a member posting a message and deliver it to the collectors."""
        message = Message(self.next_message_id(), channel, author, content)
        self.sent.append(message)
        self.dispatch_message(message)
        return message
    
    def post_dm(self, author: Member, content: str) -> Message:
        return self.post(self.dm_channel(author), author, content)
    
    def add_reaction(self, message: Message, emoji: str, user: Member) -> None:
        """Simulate a member reacting to a message."""
        self.dispatch_reaction(Reaction(message, emoji, user))
    
    # Queries
    
    def messages(self, channel: str) -> List[str]:
        """Texts sent to a channel, oldest first."""
        return [m.content for m in self.sent if m.channel == channel]
    
    def dm_messages(self, member: Member) -> List[str]:
        return self.messages(self.dm_channel(member))
    
    def last_message(self, channel: str) -> Optional[Message]:
        for message in reversed(self.sent):
            if message.channel == channel:
                return message
        return None
    
    def permissions_for(self, channel: str, target: PermissionTarget) -> Optional[Permissions]:
        return self.overwrites.get((channel, _target_key(target)))
    
    def can_send(self, channel: str, member: Member) -> bool:
        """Resolve the send flag for a member: member overwrite, then roles, then everyone."""
        if channel.startswith("dm:"):
            return channel == self.dm_channel(member)
        return self._resolve(channel, member, "send")
    
    def can_view(self, channel: str, member: Member) -> bool:
        if channel.startswith("dm:"):
            return channel == self.dm_channel(member)
        return self._resolve(channel, member, "view")
    
    def _resolve(self, channel: str, member: Member, flag: str) -> bool:
        candidates = [self.overwrites.get((channel, member.id))]
        candidates += [self.overwrites.get((channel, role)) for role in sorted(self.member_roles[member.id])]
        candidates.append(self.overwrites.get((channel, EVERYONE)))
        for permissions in candidates:
            if permissions is not None and getattr(permissions, flag) is not None:
                return getattr(permissions, flag)
        return True
