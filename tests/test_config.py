"""
Tests for game configuration and the YAML loader.
"""

import logging

import pytest

from chatmafia.config import GameConfig, load_config, load_config_from_yaml
from chatmafia.exceptions import ConfigurationError


def test_defaults():
    config = GameConfig()
    assert config.day_duration == 600
    assert config.night_duration == 420
    assert config.revenge_duration == 120
    assert config.day_reminders[0] == (300.0, "5min remaining.")
    assert config.day_reminders[-1] == (1.0, "1")
    assert config.overturn_sides == ["VILLAGE"]
    assert not config.has_option("daystart")


def test_unknown_option_rejected():
    with pytest.raises(ConfigurationError) as exc_info:
        GameConfig(options=["daystart", "turbo"])
    assert "turbo" in str(exc_info.value)
    assert "valid_options" in exc_info.value.details


def test_non_positive_duration_rejected():
    with pytest.raises(ConfigurationError):
        GameConfig(night_duration=0)


def test_unknown_side_rejected():
    with pytest.raises(ConfigurationError):
        GameConfig(overturn_sides=["PIRATES"])


def test_load_yaml(tmp_path):
    path = tmp_path / "game.yaml"
    path.write_text(
        "setup: janitor\n"
        "options: [daystart]\n"
        "day_duration: 180\n"
        "day_reminders:\n"
        "  - [60, '1min remaining.']\n"
    )
    config = load_config_from_yaml(str(path))
    assert config.setup == "janitor"
    assert config.has_option("daystart")
    assert config.day_duration == 180
    assert config.day_reminders == [(60.0, "1min remaining.")]


def test_unknown_keys_warn(tmp_path, caplog):
    path = tmp_path / "game.yaml"
    path.write_text("agent_type: llm\nsetup: basic\n")
    with caplog.at_level(logging.WARNING):
        config = load_config_from_yaml(str(path))
    assert config.setup == "basic"
    assert "agent_type" in caplog.text


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config_from_yaml(str(path)) == GameConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config_from_yaml(str(tmp_path / "nope.yaml"))


def test_load_config_without_path():
    assert load_config() == GameConfig()


def test_invalid_value_in_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("options: [sideways]\n")
    with pytest.raises(ConfigurationError):
        load_config(str(path))
