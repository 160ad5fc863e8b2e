"""
Core game components: states, roles, players, and rule enforcement.

The Game itself lives in chatmafia.core.game_engine; it is not re-exported
here because it pulls in the phase handlers, which import from this package.
"""

from .states import State, Side, DEATH_MESSAGES
from .items import Item, Inventory, GUN, DEPUTY_GUN
from .roles import Role, ROLES, SETUPS, get_role, roles_for_setup
from .player import Player
from .judge import Judge, Outcome
from .scheduler import Scheduler, ManualScheduler, ThreadingScheduler, Countdown

__all__ = [
    'State',
    'Side',
    'DEATH_MESSAGES',
    'Item',
    'Inventory',
    'GUN',
    'DEPUTY_GUN',
    'Role',
    'ROLES',
    'SETUPS',
    'get_role',
    'roles_for_setup',
    'Player',
    'Judge',
    'Outcome',
    'Scheduler',
    'ManualScheduler',
    'ThreadingScheduler',
    'Countdown',
]
