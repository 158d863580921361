"""Plugin loading for the closed set of supported games."""

from __future__ import annotations

import importlib
import random
from typing import Dict, Optional

from turn_games.plugins.base import Clock, utc_now
from turn_games.protocol.constants import GAME_TYPES
from turn_games.protocol.errors import UnsupportedGameError


# Game type -> plugin package under turn_games.plugins.
GAME_PLUGINS = {
    "tic-tac-toe": "tictactoe",
    "rock-paper-scissors": "rock_paper_scissors",
}

REQUIRED_RULE_METHODS = (
    "get_initial_state",
    "validate_move",
    "apply_move",
    "check_game_end",
    "get_valid_moves",
)

REQUIRED_AGENT_METHODS = (
    "choose_move",
    "describe",
)


def _validate_plugin(game_type: str, plugin: object) -> None:
    rules = getattr(plugin, "rules", None)
    agent = getattr(plugin, "agent", None)
    for method_name in REQUIRED_RULE_METHODS:
        if not callable(getattr(rules, method_name, None)):
            raise TypeError(f"{game_type}: rules missing required method: {method_name}")
    for method_name in REQUIRED_AGENT_METHODS:
        if not callable(getattr(agent, method_name, None)):
            raise TypeError(f"{game_type}: agent missing required method: {method_name}")

    manifest = plugin.manifest()
    if not isinstance(manifest, dict):
        raise TypeError("manifest() must return a dictionary")
    if manifest.get("id") != game_type or getattr(rules, "game_type", None) != game_type:
        raise ValueError(f"{game_type}: manifest id does not match plugin")


def load_plugins(clock: Clock = utc_now, rng: Optional[random.Random] = None) -> Dict[str, object]:
    """Instantiate every supported plugin; a broken plugin is an error, not a skip."""
    plugins: Dict[str, object] = {}
    for game_type, package in GAME_PLUGINS.items():
        module = importlib.import_module(f"turn_games.plugins.{package}")
        plugin = module.Plugin(clock=clock, rng=rng)
        _validate_plugin(game_type, plugin)
        plugins[game_type] = plugin
    return plugins


def require_plugin(plugins: Dict[str, object], game_type: str) -> object:
    plugin = plugins.get(game_type)
    if plugin is None or game_type not in GAME_TYPES:
        raise UnsupportedGameError(f"Unsupported game type: {game_type}")
    return plugin
