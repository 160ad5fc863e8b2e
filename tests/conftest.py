"""
Pytest fixtures for Mafia game tests.
"""

import dataclasses
from typing import List

import pytest

from chatmafia.config.game_config import GameConfig
from chatmafia.core import ManualScheduler, get_role
from chatmafia.core.commands import CANCEL_EMOJI, number_emoji
from chatmafia.core.game_engine import Game
from chatmafia.gateway import InMemoryGateway, Member, Message


class Table:
    """
    A game seen from the players' side.
    
    Players are addressed by their number; everything goes through the
    in-memory gateway, the same way chat input would.
    """
    
    def __init__(self, game: Game, gateway: InMemoryGateway, scheduler: ManualScheduler):
        self.game = game
        self.gateway = gateway
        self.scheduler = scheduler
    
    def player(self, number: int):
        return self.game.all_players[number - 1]
    
    def member(self, number: int) -> Member:
        return self.player(number).member
    
    def say(self, number: int, content: str) -> Message:
        """Post in the day channel."""
        return self.gateway.post(self.game.config.day_channel, self.member(number), content)
    
    def whisper(self, number: int, content: str) -> Message:
        """Post in the mafia channel."""
        return self.gateway.post(self.game.config.mafia_channel, self.member(number), content)
    
    def dm(self, number: int, content: str) -> Message:
        return self.gateway.post_dm(self.member(number), content)
    
    def vote(self, voter: int, target: int) -> Message:
        return self.say(voter, f";lynch {self.member(target).mention}")
    
    def prompt(self, number: int) -> Message:
        """The target-selection prompt a player got tonight."""
        return self.player(number).action.prompt
    
    def choose(self, number: int, target: int) -> None:
        """React to the night prompt with a target's number."""
        self.gateway.add_reaction(self.prompt(number), number_emoji(target), self.member(number))
    
    def cancel(self, number: int) -> None:
        self.gateway.add_reaction(self.prompt(number), CANCEL_EMOJI, self.member(number))
    
    def dms(self, number: int) -> List[str]:
        return self.gateway.dm_messages(self.member(number))
    
    def public(self) -> List[str]:
        return self.gateway.messages(self.game.config.day_channel)
    
    def secret(self) -> List[str]:
        return self.gateway.messages(self.game.config.mafia_channel)


@pytest.fixture
def game_config():
    """Test game configuration."""
    return GameConfig(random_seed=1234)


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def scheduler():
    """Virtual clock; nothing fires until the test advances it."""
    return ManualScheduler()


@pytest.fixture
def members():
    return [Member(f"u{i}", f"Player{i}") for i in range(1, 11)]


@pytest.fixture
def make_game(gateway, scheduler, game_config, members):
    """
    Start a game with roles dealt in the given order (player 1 gets the first).
    
    Roles are given by name or as Role objects. Keyword arguments override
    config fields.
    """
    def _make(role_names: List, **overrides) -> Table:
        config = dataclasses.replace(game_config, **overrides) if overrides else game_config
        game = Game(gateway, scheduler, config)
        roles = [get_role(r) if isinstance(r, str) else r for r in role_names]
        game.start(members[:len(roles)], roles, shuffle=False)
        return Table(game, gateway, scheduler)
    
    return _make
