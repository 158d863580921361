from __future__ import annotations

import pytest

from turn_games.protocol.errors import UnsupportedGameError
from turn_games.registry import _validate_plugin, load_plugins, require_plugin


def test_load_plugins_covers_closed_game_set():
    plugins = load_plugins()

    assert sorted(plugins) == ["rock-paper-scissors", "tic-tac-toe"]
    assert plugins["tic-tac-toe"].manifest()["supports_custom_id"] is True
    assert plugins["rock-paper-scissors"].manifest()["supports_custom_id"] is False


def test_manifest_is_a_copy():
    plugin = load_plugins()["tic-tac-toe"]
    plugin.manifest()["id"] = "changed"

    assert plugin.manifest()["id"] == "tic-tac-toe"


def test_require_plugin_rejects_unknown_game():
    with pytest.raises(UnsupportedGameError):
        require_plugin(load_plugins(), "chess")


def test_plugin_missing_a_rule_is_rejected():
    plugin = load_plugins()["tic-tac-toe"]
    plugin.rules = object()

    with pytest.raises(TypeError):
        _validate_plugin("tic-tac-toe", plugin)


def test_manifest_id_must_match():
    plugin = load_plugins()["tic-tac-toe"]

    with pytest.raises(ValueError):
        _validate_plugin("rock-paper-scissors", plugin)
