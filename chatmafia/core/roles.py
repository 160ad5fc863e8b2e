"""
Role definitions and abilities for the Mafia game.

Roles are shared, immutable records. Everything a role does is a callback
in its `actions` table that receives the player and the game.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from ..exceptions import SetupError, UnknownRoleError
from .actions import automatic_report_action, targeted_action
from .items import DEPUTY_GUN, GUN
from .states import Side, State

if TYPE_CHECKING:
    from .game_engine import Game
    from .player import Player

RoleAction = Callable[["Player", "Game"], None]


@dataclass(frozen=True, eq=False)
class Role:
    """Represents a role that any number of players may hold."""
    name: str
    help: str
    side: Side
    # side seen by investigative roles, if different from the real one
    fake_side: Optional[Side] = None
    powerless: bool = False
    # lets the side win while outnumbered; the Gun item does this too
    can_overturn: bool = False
    macho: bool = False  # can't be protected
    vengeful: bool = False  # gets a revenge kill when lynched
    actions: Dict[State, RoleAction] = field(default_factory=dict)
    
    def __str__(self) -> str:
        return self.name
    
    @property
    def apparent_side(self) -> Side:
        """Side reported to investigative roles."""
        return self.side if self.fake_side is None else self.fake_side
    
    def handler(self, state: State) -> Optional[RoleAction]:
        """Callback for a state, or None when the role does nothing special."""
        return self.actions.get(state)


def default_action(state: State, player: "Player", game: "Game") -> None:
    """Behaviour for states a role has no callback for."""
    if state != State.GAME:
        return
    intro = f"You are number {player.number}, {player.role.name}. {player.role.help}"
    if player.is_mafia:
        game.tell_mafia(f"{player.mention} {intro}")
    else:
        game.tell(player, intro)


# Role callbacks

def _investigate_side(target: "Player", player: "Player", game: "Game") -> None:
    game.tell(player, f"{target.name} is sided with {target.role.apparent_side.name}.")


def _investigate_talent(target: "Player", player: "Player", game: "Game") -> None:
    has = "doesn't have" if target.role.powerless else "has"
    game.tell(player, f"{target.name} {has} a talent.")


def _protect(target: "Player", player: "Player", game: "Game") -> None:
    if not target.role.macho:
        target.protected = True


def _explode(player: "Player", game: "Game") -> None:
    killer = player.killed_by
    if killer is None or killer.dead:
        return
    if killer.protected and not killer.role.macho:
        return
    game.announce(f"{killer.mention}, the {killer.role.name}, exploded.")
    game.kill(killer, player)


def _prophesy(target: "Player", player: "Player", game: "Game") -> None:
    player.memory.prophecy = target


def _reveal_prophecy(player: "Player", game: "Game") -> None:
    target = player.memory.prophecy
    if target is None:
        game.announce("Oracle's prophecy: none.")
    else:
        game.announce(f"Oracle's prophecy: {target.name} is a {target.role.name}.")


def _dream(player: "Player", game: "Game") -> None:
    others = [p for p in game.alive_players() if p is not player]
    innocents = [p for p in others if p.role.apparent_side == Side.VILLAGE]
    mafia = [p for p in others if p.role.apparent_side == Side.MAFIA]
    if innocents and (not mafia or game.rng.random() < 0.5):
        dreamt = game.rng.choice(innocents)
        game.tell(player, f"{dreamt.name} is sided with the VILLAGE.")
        return
    if not mafia:
        game.tell(player, "You did not dream tonight.")
        return
    guilty = game.rng.choice(mafia)
    rest = [p for p in others if p is not guilty]
    names = game.rng.sample(rest, min(2, len(rest))) + [guilty]
    game.rng.shuffle(names)
    game.tell(player, ", ".join(p.name for p in names) + ". At least one of them is sided with the MAFIA.")


def _give_gun(target: "Player", player: "Player", game: "Game") -> None:
    target.receive(GUN, game)


def _deputy_start(player: "Player", game: "Game") -> None:
    default_action(State.GAME, player, game)
    player.receive(DEPUTY_GUN, game)


def _clean(target: "Player", player: "Player", game: "Game") -> None:
    if not game.kill_pending:
        return
    game.kill_pending = False
    game.killing = -1
    game.night_phase.close_kill_collector("janitor cleaned")
    game.announce(f"{target.mention} is missing!")
    game.tell_mafia(f"While cleaning up the mess, you learned that {target.name} is a {target.role.name}.")
    game.kill(target, player)


def _hook(target: "Player", player: "Player", game: "Game") -> None:
    target.hooked = True
    game.night_report_passed = True


def _hook_declined(player: "Player", game: "Game") -> None:
    game.night_report_passed = True


def _hooker_pre_night(player: "Player", game: "Game") -> None:
    game.night_report_passed = False


ROLES: Dict[str, Role] = {role.name: role for role in [
    Role(
        name="Blue",
        help="No powers.",
        side=Side.VILLAGE,
        powerless=True,
    ),
    Role(
        name="Cop",
        help="Every night, investigate a player to learn their side.",
        side=Side.VILLAGE,
        actions=targeted_action("investigate", _investigate_side, on_hooked=True),
    ),
    Role(
        name="MachoCop",
        help="Every night, investigate a player to learn their side. You can't be protected, such as by docs.",
        side=Side.VILLAGE,
        macho=True,
        actions=targeted_action("investigate", _investigate_side, on_hooked=True),
    ),
    Role(
        name="TalentScout",
        help="Every night, investigate a player to learn whether they have a talent.",
        side=Side.VILLAGE,
        actions=targeted_action("investigate", _investigate_talent, on_hooked=True),
    ),
    Role(
        name="Doc",
        help="Every night, choose a player to prevent from dying that night.",
        side=Side.VILLAGE,
        actions=targeted_action("protect", _protect),
    ),
    Role(
        name="MachoDoc",
        help="Every night, choose a player to prevent from dying that night. "
             "You can't be protected, such as by other docs.",
        side=Side.VILLAGE,
        macho=True,
        actions=targeted_action("protect", _protect),
    ),
    Role(
        name="Bomb",
        help="If shot or killed at night, your attacker dies too.",
        side=Side.VILLAGE,
        actions={State.DEAD: _explode},
    ),
    Role(
        name="Oracle",
        help="Every night, choose a player, and when you die, that player's role will be revealed.",
        side=Side.VILLAGE,
        actions={
            **targeted_action("prophesy about", _prophesy),
            State.DEAD: _reveal_prophecy,
        },
    ),
    Role(
        name="Dreamer",
        help="Every night, you receive a dream of either 1 innocent person, "
             "or 3 people, at least 1 of which is mafia-aligned.",
        side=Side.VILLAGE,
        actions=automatic_report_action(_dream, on_hooked=True),
    ),
    Role(
        name="Gunsmith",
        help="Every night, choose a player to give a gun to.",
        side=Side.VILLAGE,
        can_overturn=True,
        actions=targeted_action("give a gun to", _give_gun),
    ),
    # overturns through the gun it holds, not by itself
    Role(
        name="Deputy",
        help="You start with a single gun that won't reveal that you shot it.",
        side=Side.VILLAGE,
        actions={State.GAME: _deputy_start},
    ),
    Role(
        name="Vengeful",
        help="If you are lynched, you get 2 minutes to kill a player in revenge.",
        side=Side.VILLAGE,
        powerless=True,
        vengeful=True,
    ),
    Role(
        name="Vanilla",
        help="No powers.",
        side=Side.MAFIA,
        powerless=True,
    ),
    Role(
        name="Godfather",
        help="You appear as village-aligned to investigative roles.",
        side=Side.MAFIA,
        fake_side=Side.VILLAGE,
    ),
    Role(
        name="Janitor",
        help="Once per game, at night, choose a player to clean, and their role will only be revealed "
             "to the mafia.\nThis replaces `;kill`, so don't use that when you want to clean.",
        side=Side.MAFIA,
        actions=targeted_action("clean", _clean, via_secret_channel=True, deferred=True, max_uses=1),
    ),
    Role(
        name="Hooker",
        help="Every night, choose a village-aligned player, and their action will be prevented that night.",
        side=Side.MAFIA,
        actions={
            **targeted_action("hook", _hook, on_cancel=_hook_declined, via_secret_channel=True),
            State.PRE_NIGHT: _hooker_pre_night,
        },
    ),
]}


# Named role lists; a game needs exactly one member per role
SETUPS: Dict[str, List[str]] = {
    "basic": ["Cop", "Doc", "Blue", "Blue", "Vanilla", "Godfather"],
    "janitor": ["Cop", "Doc", "Blue", "Blue", "Blue", "Vanilla", "Janitor"],
    "hooker": ["Cop", "Doc", "Dreamer", "Blue", "Blue", "Hooker", "Vanilla"],
    "bomb": ["Bomb", "Cop", "Blue", "Blue", "Blue", "Vanilla", "Vanilla"],
    "guns": ["Gunsmith", "Deputy", "Blue", "Blue", "Blue", "Vanilla", "Godfather"],
    "vengeful": ["Vengeful", "Oracle", "Doc", "Blue", "Blue", "Vanilla", "Vanilla"],
}


def get_role(name: str) -> Role:
    """Look up a role by name, case-insensitive."""
    for role in ROLES.values():
        if role.name.lower() == name.lower():
            return role
    raise UnknownRoleError(f"Unknown role: {name}", {"known_roles": sorted(ROLES)})


def roles_for_setup(name: str) -> List[Role]:
    """Roles of a named setup, in setup order."""
    if name not in SETUPS:
        raise SetupError(f"Unknown setup: {name}", {"known_setups": sorted(SETUPS)})
    return [get_role(role_name) for role_name in SETUPS[name]]
