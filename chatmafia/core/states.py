"""
Game phases, sides and flavor text shared by the engine and the roles.
"""

from enum import Enum


class State(Enum):
    """Points of the game where things happen and roles get a callback."""
    GAME = "game"
    GAME_END = "game end"
    DAY = "day"
    DAY_END = "day end"
    PRE_NIGHT = "pre night"
    NIGHT = "night"
    NIGHT_REPORT = "night report"
    NIGHT_END = "night end"
    DEAD = "dead"


class Side(Enum):
    """Faction a role belongs to."""
    NONE = "none"
    VILLAGE = "village"
    MAFIA = "mafia"
    THE_JOKER = "the joker"


# %pr is replaced with the victim's mention and role
DEATH_MESSAGES = [
    "%pr's body was found in the river this morning.",
    "A waste collector found %pr's body in an alley dumpster this morning.",
    "%pr's body was found in a public toilet this morning.",
    "%pr's body was found in the site of a fire this morning.",
    "%pr's body was found under an old couch this morning.",
    "%pr was found sleeping peacefully this morning, but they never woke up.",
    "%pr's body was found washed up in the sea this morning.",
    "%pr's body was found disguised on a graffitied wall this morning.",
    "%pr's body was found drinking tea this morning.",
    "%pr's body was found drinking coffee this morning.",
    "%pr's body was found on a random roof this morning.",
    "%pr's body was found among trees and grass in a forest this morning.",
    "%pr's body fell from the sky this morning.",
    "%pr's body fell from space this morning.",
    "%pr's body was found in a chimney this morning.",
    "%pr's body was found in the sewers this morning.",
    "%pr's body was found very squished this morning.",
    "%pr's body was found blown up this morning.",
    "%pr's body was found in a briefcase this morning.",
    "%pr's body was found wearing a fancy red suit and sunglasses this morning.",
]
