"""
Parsers for the chat commands the game listens to.

Commands start with ';' and are case-insensitive. Parsers return None when a
message is not the command they look for, so collectors can ignore chatter.
"""

import re
from dataclasses import dataclass
from typing import Optional

CANCEL_EMOJI = "❌"
ACK_EMOJI = "✅"
KEYCAP = "\u20e3"
TEN_EMOJI = "🔟"


@dataclass(frozen=True)
class Command:
    """A parsed chat command."""
    name: str
    target: Optional[int] = None  # player number
    mention: Optional[str] = None  # member id from a <@id> mention
    item: Optional[str] = None


_LYNCH_RE = re.compile(r"^; *lynch$", re.IGNORECASE)
_LYNCH_MENTION_RE = re.compile(r"^; *lynch +<@!?([^>\s]+)>$", re.IGNORECASE)
_REMOVE_LYNCH_RE = re.compile(r"^; *removelynch$", re.IGNORECASE)
_LIST_LYNCH_RE = re.compile(r"^; *listlynch$", re.IGNORECASE)
_USE_RE = re.compile(r"^; *use +([a-zA-Z0-9]+)(?: +([0-9]+))?$", re.IGNORECASE)


def parse_day_command(content: str) -> Optional[Command]:
    """
    Parse a day channel command.
    
    `;lynch` votes for nobody (target 0), `;lynch @mention` votes for a member,
    `;removelynch` clears the vote and `;listlynch` asks for the tally.
    """
    content = content.strip()
    if _LYNCH_RE.match(content):
        return Command("lynch", target=0)
    match = _LYNCH_MENTION_RE.match(content)
    if match:
        return Command("lynch", mention=match.group(1))
    if _REMOVE_LYNCH_RE.match(content):
        return Command("removelynch")
    if _LIST_LYNCH_RE.match(content):
        return Command("listlynch")
    return None


def parse_action_command(content: str, verb: str) -> Optional[Command]:
    """
    Parse `;<verb> <number>` or a bare `;<verb>` (decline).
    
    Used for the mafia kill (`;kill`) and for roles that act in the mafia
    secret channel (`;clean 3`, `;hook 5`).
    """
    pattern = r"^; *" + re.escape(verb) + r"(?: +([0-9]+))?$"
    match = re.match(pattern, content.strip(), re.IGNORECASE)
    if not match:
        return None
    target = int(match.group(1)) if match.group(1) else None
    return Command(verb, target=target)


def parse_kill_command(content: str) -> Optional[Command]:
    return parse_action_command(content, "kill")


def parse_use_command(content: str) -> Optional[Command]:
    """Parse `;use <item> [number]` sent in DMs."""
    match = _USE_RE.match(content.strip())
    if not match:
        return None
    target = int(match.group(2)) if match.group(2) else None
    return Command("use", target=target, item=match.group(1))


def number_emoji(number: int) -> str:
    """Reaction emoji standing for a player number."""
    if number == 10:
        return TEN_EMOJI
    return f"{number}{KEYCAP}"


def emoji_number(emoji: str) -> Optional[int]:
    """Player number for a reaction emoji, or None if it is not a number."""
    if emoji == TEN_EMOJI:
        return 10
    if emoji.endswith(KEYCAP):
        digits = emoji[:-len(KEYCAP)].rstrip("\ufe0f")
        if digits.isdigit():
            return int(digits)
    return None
