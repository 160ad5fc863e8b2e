"""
Tests for lynch tallies and win conditions.
"""

import pytest

from chatmafia.config.game_config import GameConfig
from chatmafia.core import GUN, Judge, Outcome, Player, get_role
from chatmafia.gateway import Member


def make_players(*role_names):
    """Alive players keyed by number, numbered from 1."""
    return {
        n: Player(number=n, name=f"Player{n}", role=get_role(name), member=Member(f"u{n}", f"Player{n}"))
        for n, name in enumerate(role_names, start=1)
    }


def cast(players, votes):
    """votes maps voter number -> target number (0 = nobody)."""
    for voter, target in votes.items():
        players[voter].lynch_vote = target
    return players


@pytest.fixture
def judge():
    return Judge(GameConfig())


def test_tie_for_most_votes_is_no_lynch(judge):
    players = cast(make_players(*["Blue"] * 5), {1: 2, 2: 3, 3: 2, 4: 3})
    assert judge.calculate_lynch(players) is None


def test_plurality_lynches(judge):
    players = cast(make_players(*["Blue"] * 5), {1: 2, 2: 4, 3: 2, 4: 2, 5: 0})
    assert judge.calculate_lynch(players) == 2


def test_nobody_winning_is_no_lynch(judge):
    players = cast(make_players(*["Blue"] * 5), {1: 0, 2: 0, 3: 0, 4: 2})
    assert judge.calculate_lynch(players) is None


def test_nobody_tied_with_target_is_no_lynch(judge):
    players = cast(make_players(*["Blue"] * 4), {1: 0, 2: 0, 3: 4, 4: 4})
    assert judge.calculate_lynch(players) is None


def test_missing_votes_are_ignored(judge):
    players = cast(make_players(*["Blue"] * 5), {1: 3})
    assert judge.calculate_lynch(players) == 3
    assert judge.calculate_lynch(make_players("Blue", "Blue")) is None


def test_list_lynch(judge):
    players = cast(make_players("Blue", "Blue", "Vanilla"), {1: 3, 2: 0})
    text = judge.list_lynch(players)
    assert "Player1 votes to lynch Player3" in text
    assert "Player2 votes to lynch nobody" in text
    assert "Player3 has not voted" in text
    assert text.endswith("**The consensus is to lynch nobody.**")
    
    players[3].lynch_vote = 3
    assert judge.list_lynch(players).endswith("**The consensus is to lynch Player3.**")


@pytest.mark.parametrize("roles, expected", [
    (["Blue", "Blue", "Blue", "Vanilla"], None),
    (["Blue", "Blue", "Vanilla", "Vanilla"], Outcome.MAFIA),
    (["Blue", "Vanilla", "Vanilla"], Outcome.MAFIA),
    (["Vanilla"], Outcome.MAFIA),
    (["Blue", "Cop"], Outcome.VILLAGE),
    ([], Outcome.TIE),
])
def test_evaluate_win(judge, roles, expected):
    assert judge.evaluate_win(make_players(*roles)) == expected


def test_overturn_role_delays_mafia_win(judge):
    # the gunsmith can still turn the game around at parity
    players = make_players("Gunsmith", "Blue", "Vanilla", "Vanilla")
    assert judge.evaluate_win(players) is None
    
    players = make_players("Vanilla", "Godfather")
    assert judge.evaluate_win(players) == Outcome.MAFIA


def test_gun_holder_can_overturn(judge):
    players = make_players("Blue", "Blue", "Vanilla", "Vanilla")
    assert judge.evaluate_win(players) == Outcome.MAFIA
    
    players[1].inventory.add_item(GUN)
    assert players[1].can_overturn()
    assert judge.evaluate_win(players) is None


def test_overturn_can_be_disabled():
    judge = Judge(GameConfig(overturn_sides=[]))
    players = make_players("Gunsmith", "Blue", "Vanilla", "Vanilla")
    assert judge.evaluate_win(players) == Outcome.MAFIA


def test_mafia_overturn_does_not_change_village_win():
    judge = Judge(GameConfig(overturn_sides=["VILLAGE", "MAFIA"]))
    assert judge.evaluate_win(make_players("Blue", "Blue")) == Outcome.VILLAGE


def test_pressure_notice(judge):
    assert "LYLO" in judge.pressure_notice(make_players("Blue", "Blue", "Blue", "Vanilla", "Vanilla"))
    assert "MYLO" in judge.pressure_notice(make_players("Blue", "Blue", "Blue", "Blue", "Vanilla", "Vanilla"))
    assert judge.pressure_notice(make_players(*["Blue"] * 6, "Vanilla")) is None
    # no pressure while the village can overturn
    assert judge.pressure_notice(make_players("Gunsmith", "Blue", "Blue", "Vanilla", "Vanilla")) is None
