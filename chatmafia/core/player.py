"""
Player class representing a game participant.
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from ..gateway.base import Collector, Member, Message
from .items import Inventory, Item
from .roles import Role, default_action
from .states import Side, State

if TYPE_CHECKING:
    from .game_engine import Game


@dataclass(eq=False)
class ActionState:
    """
    Scratch state of a targeted action for one night.
    
    Only the role's own action callbacks read it. It is replaced with a fresh
    instance before every night.
    """
    target: Optional["Player"] = None
    collector: Optional[Collector] = None
    prompt: Optional[Message] = None
    
    def close(self, reason: str) -> None:
        """Stop the target-selection collector, if one is open."""
        if self.collector is not None:
            self.collector.stop(reason)
            self.collector = None


@dataclass(eq=False)
class RoleMemory:
    """Role state that lasts for the whole game."""
    uses: int = 0  # resolved uses of the limited action
    prophecy: Optional["Player"] = None  # Oracle


@dataclass(eq=False)
class Player:
    """Represents a player in the game."""
    number: int
    name: str
    role: Role
    member: Member
    inventory: Inventory = field(default_factory=Inventory)
    
    # Reset every day
    dead: bool = False
    lynch_vote: Optional[int] = None  # None = no vote, 0 = nobody, else a player number
    
    # Reset every night
    protected: bool = False  # should not die tonight, set by Doc
    hooked: bool = False  # should not get a report tonight, set by Hooker
    
    # Night coordination
    action_pending: bool = False  # game waits for this player's choice
    action_report_pending: bool = False  # a report fires once reports are unblocked
    action: ActionState = field(default_factory=ActionState)
    memory: RoleMemory = field(default_factory=RoleMemory)
    
    killed_by: Optional["Player"] = None
    item_collector: Optional[Collector] = None
    
    def __str__(self) -> str:
        return self.name
    
    @property
    def mention(self) -> str:
        return self.member.mention
    
    @property
    def side(self) -> Side:
        return self.role.side
    
    @property
    def is_mafia(self) -> bool:
        """Check if player is mafia-aligned."""
        return self.role.side == Side.MAFIA
    
    def do_state(self, state: State, game: "Game") -> None:
        """Run this player's role callback for a state, or the default one."""
        handler = self.role.handler(state)
        if handler is not None:
            handler(self, game)
        else:
            default_action(state, self, game)
    
    def can_overturn(self) -> bool:
        return self.role.can_overturn or any(it.can_overturn for it in self.inventory)
    
    def reset_night(self) -> None:
        """Clear the per-night flags and scratch state."""
        self.hooked = False
        self.protected = False
        self.action_pending = False
        self.action_report_pending = False
        self.action.close("new night")
        self.action = ActionState()
    
    def receive(self, item: Item, game: "Game") -> None:
        self.inventory.add_item(item)
        game.tell(self, f"You have received a {item.name}.")
    
    def remove(self, item: Item, game: "Game") -> None:
        if not self.inventory.remove_item(item):
            return
        if len(self.inventory):
            game.tell(self, f"You have lost a {item.name}.\n{self.inventory.describe()}")
        else:
            game.tell(self, f"You have lost a {item.name}. Your inventory is empty.")
