"""
Tests for the shared night action templates.
"""

from unittest.mock import Mock

import pytest

from chatmafia.core import Role, Side, State
from chatmafia.core.actions import automatic_report_action, targeted_action


def make_role(name="Poker", side=Side.VILLAGE, **kwargs):
    actions = kwargs.pop("actions")
    return Role(name=name, help="Test role.", side=side, actions=actions, **kwargs)


@pytest.fixture
def poke():
    return Mock(), Mock()


def test_resolves_on_chosen_target(make_game, poke):
    on_resolve, on_hooked = poke
    poker = make_role(actions=targeted_action("poke", on_resolve, on_hooked=on_hooked))
    table = make_game([poker, "Blue", "Blue", "Blue", "Vanilla"])
    
    assert table.prompt(1).content.startswith("Select a player to poke tonight, or ❌ to do nothing. Targets:")
    table.choose(1, 3)
    assert "You chose to poke Player3." in table.prompt(1).content
    on_resolve.assert_not_called()  # waits for the kill
    
    table.whisper(5, ";kill 2")
    on_resolve.assert_called_once_with(table.player(3), table.player(1), table.game)
    on_hooked.assert_not_called()
    assert table.player(1).memory.uses == 1


def test_hook_replaces_resolution(make_game, poke):
    on_resolve, on_hooked = poke
    poker = make_role(actions=targeted_action("poke", on_resolve, on_hooked=on_hooked))
    table = make_game([poker, "Blue", "Blue", "Blue", "Hooker", "Vanilla"])
    
    table.whisper(5, ";hook 1")
    table.choose(1, 2)
    table.whisper(6, ";kill 3")
    
    on_hooked.assert_called_once_with(table.player(2), table.player(1), table.game)
    on_resolve.assert_not_called()


def test_hooked_without_handler_is_silent(make_game):
    on_resolve = Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve))
    table = make_game([poker, "Blue", "Blue", "Blue", "Hooker", "Vanilla"])
    
    table.whisper(5, ";hook 1")
    table.choose(1, 2)
    table.whisper(6, ";kill 3")
    
    on_resolve.assert_not_called()
    assert "You were hooked." not in table.dms(1)
    assert table.game.cur_state == State.DAY


def test_bad_reactions(make_game):
    table = make_game(["Cop", "Doc", "Blue", "Blue", "Vanilla", "Godfather"])
    
    table.choose(1, 1)
    table.choose(1, 9)
    table.gateway.add_reaction(table.prompt(1), "👍", table.member(1))
    # someone else reacting to the cop's prompt
    table.gateway.add_reaction(table.prompt(1), "2⃣", table.member(2))
    
    assert "You can't investigate yourself." in table.dms(1)
    assert "Invalid target." in table.dms(1)
    assert table.player(1).action_pending
    assert table.player(1).action.target is None


def test_cancel_calls_on_cancel(make_game):
    on_resolve, on_cancel = Mock(), Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve, on_cancel=on_cancel))
    table = make_game([poker, "Blue", "Blue", "Blue", "Vanilla"])
    
    table.cancel(1)
    assert "Action cancelled." in table.dms(1)
    assert not table.player(1).action_pending
    on_cancel.assert_called_once_with(table.player(1), table.game)
    
    # the prompt is closed now
    table.choose(1, 2)
    assert table.player(1).action.target is None
    table.whisper(5, ";kill 2")
    on_resolve.assert_not_called()


def test_choice_is_final(make_game):
    on_resolve = Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve))
    table = make_game([poker, "Blue", "Blue", "Blue", "Vanilla"])
    table.choose(1, 2)
    table.choose(1, 3)
    table.whisper(5, ";kill 4")
    on_resolve.assert_called_once_with(table.player(2), table.player(1), table.game)


def test_max_uses(make_game):
    on_resolve = Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve, max_uses=1))
    table = make_game([poker, "Blue", "Blue", "Blue", "Blue", "Vanilla"])
    
    assert "You have 1 use of this action left." in table.prompt(1).content
    table.choose(1, 2)
    table.whisper(6, ";kill 3")
    assert "This was your last use of this action." in table.dms(1)
    
    for voter in (1, 2, 4, 5, 6):
        table.say(voter, ";lynch")
    assert table.game.cur_state == State.NIGHT
    assert table.prompt(1) is None
    assert not table.player(1).action_pending


def test_deferred_action_does_not_block(make_game):
    on_resolve = Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve, deferred=True))
    table = make_game([poker, "Blue", "Blue", "Blue", "Vanilla"])
    
    assert table.prompt(1).content.startswith("Optionally, before anything else, select a player to poke tonight.")
    table.whisper(5, ";kill 2")
    assert table.game.cur_state == State.DAY
    on_resolve.assert_not_called()
    assert "The night is over. Action cancelled." not in table.dms(1)


def test_secret_channel_action(make_game):
    on_resolve = Mock()
    sneak = make_role("Sneak", Side.MAFIA, actions=targeted_action("sneak", on_resolve, via_secret_channel=True))
    table = make_game(["Blue", "Blue", "Blue", "Blue", "Blue", sneak])
    
    assert "<@u6> Select a player to sneak tonight with `;sneak <number>`, or `;sneak` to do nothing." in table.secret()
    table.whisper(6, ";sneak 6")
    table.whisper(6, ";sneak 8")
    table.whisper(6, ";sneak 2")
    
    secret = table.secret()
    assert "<@u6> You can't sneak yourself." in secret
    assert "<@u6> Invalid target." in secret
    assert "<@u6> You chose to sneak Player2." in secret
    # resolved at once, before the kill
    on_resolve.assert_called_once_with(table.player(2), table.player(6), table.game)
    assert table.game.cur_state == State.NIGHT


def test_secret_channel_timeout_notice(make_game):
    sneak = make_role("Sneak", Side.MAFIA, actions=targeted_action("sneak", Mock(), via_secret_channel=True))
    table = make_game(["Blue", "Blue", "Blue", "Blue", "Blue", sneak])
    table.whisper(6, ";kill 1")
    table.scheduler.advance(420)
    
    assert "<@u6> The night is over. Action cancelled." in table.secret()
    assert table.player(1).dead


def test_automatic_report(make_game):
    on_resolve = Mock()
    seer = make_role("Seer", actions=automatic_report_action(on_resolve, on_hooked=True))
    table = make_game([seer, "Blue", "Blue", "Blue", "Blue", "Hooker", "Vanilla"])
    
    table.whisper(7, ";kill 2")
    on_resolve.assert_not_called()  # hooker has not acted yet
    table.whisper(6, ";hook 1")
    
    on_resolve.assert_not_called()
    assert "You were hooked." in table.dms(1)
    assert table.game.cur_state == State.DAY


def close_report_gate(player, game):
    game.night_report_passed = False


BLOCKER = Role(name="Blocker", help="Test role.", side=Side.NONE, actions={State.PRE_NIGHT: close_report_gate})


def test_closed_report_gate_holds_night(make_game):
    on_resolve = Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve))
    table = make_game([poker, "Blue", "Blue", "Blue", BLOCKER, "Vanilla"])
    
    table.choose(1, 2)
    table.whisper(6, ";kill 3")
    on_resolve.assert_not_called()
    assert table.game.cur_state == State.NIGHT
    
    # the time limit delivers the report anyway
    table.scheduler.advance(420)
    on_resolve.assert_called_once_with(table.player(2), table.player(1), table.game)
    assert table.game.cur_state == State.DAY


def test_closed_gate_does_not_wait_for_kill_target(make_game):
    on_resolve = Mock()
    poker = make_role(actions=targeted_action("poke", on_resolve))
    table = make_game([poker, "Blue", "Blue", "Blue", BLOCKER, "Vanilla"])
    
    table.choose(1, 2)
    table.whisper(6, ";kill 1")
    
    assert table.game.cur_state == State.DAY
    assert table.player(1).dead
    on_resolve.assert_not_called()
