"""
Inventory items players can use with `;use <item> [number]` in DMs.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .game_engine import Game
    from .player import Player

# (target, user, game); target is the user itself for items without a target
ItemUse = Callable[["Player", "Player", "Game"], None]


@dataclass(frozen=True, eq=False)
class Item:
    """An item definition. Players hold references to shared Item instances."""
    name: str
    help: str
    use: ItemUse
    night_use: bool = False  # usable at night instead of during the day
    no_target: bool = False
    stays_after_use: bool = False
    # holding this item lets the village win while outnumbered
    can_overturn: bool = False
    
    def usage(self) -> str:
        if self.no_target:
            return f"`;use {self.name.lower()}`"
        return f"`;use {self.name.lower()} <number>`"


class Inventory:
    """Items held by one player, in the order they were received."""
    
    def __init__(self, items: Optional[List[Item]] = None):
        self.items: List[Item] = list(items or [])
    
    def __len__(self) -> int:
        return len(self.items)
    
    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)
    
    def add_item(self, item: Item) -> None:
        self.items.append(item)
    
    def remove_item(self, item: Item) -> bool:
        """Remove one occurrence of item. Returns False if it was not held."""
        if item in self.items:
            self.items.remove(item)
            return True
        return False
    
    def find(self, name: str) -> Optional[Item]:
        """First held item with this name, case-insensitive."""
        name = name.lower()
        return next((it for it in self.items if it.name.lower() == name), None)
    
    def has_usable(self, night: bool) -> bool:
        return any(it.night_use == night for it in self.items)
    
    def describe(self) -> str:
        if not self.items:
            return "Your inventory is empty."
        lines = [f"\n{it.name}: {it.help} Use with {it.usage()}." for it in self.items]
        return "Your inventory:" + "".join(lines)


def make_gun(reveal_chance: float) -> ItemUse:
    """Gun effect: kill the target, naming the shooter with the given probability."""
    
    def shoot(target: "Player", player: "Player", game: "Game") -> None:
        if reveal_chance > 0 and game.rng.random() < reveal_chance:
            game.announce(f"{target.mention}, the {target.role.name}, was shot by {player.mention}.")
        else:
            game.announce(f"{target.mention}, the {target.role.name}, was shot.")
        game.kill(target, player)
    
    return shoot


GUN = Item(
    name="Gun",
    help="Shoot a player during the day. Whoever hears the shot may see who fired it.",
    use=make_gun(0.5),
    can_overturn=True,
)

DEPUTY_GUN = Item(
    name="Gun",
    help="Shoot a player during the day. Nobody will know you fired it.",
    use=make_gun(0.0),
    can_overturn=True,
)

ITEMS = {
    "Gun": GUN,
}
