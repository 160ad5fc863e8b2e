"""
Tests for the event emitter.
"""

import logging
from unittest.mock import Mock

from chatmafia.web.event_emitter import EventEmitter


def test_listeners_receive_events():
    emitter = EventEmitter()
    first, second = Mock(), Mock()
    emitter.register_listener(first)
    emitter.register_listener(second)
    
    emitter.emit_vote(2, 0, 1)
    
    first.assert_called_once_with("vote", {"voter": 2, "target": 0, "day": 1})
    second.assert_called_once_with("vote", {"voter": 2, "target": 0, "day": 1})


def test_broken_listener_is_logged(caplog):
    emitter = EventEmitter()
    healthy = Mock()
    emitter.register_listener(Mock(side_effect=RuntimeError("boom")))
    emitter.register_listener(healthy)
    
    with caplog.at_level(logging.ERROR):
        emitter.emit_phase_change("night", 2)
    
    healthy.assert_called_once_with("phase_change", {"phase": "night", "day": 2})
    assert "Error delivering phase_change event" in caplog.text


def test_no_listeners():
    EventEmitter().emit_game_over("mafia", 3)
