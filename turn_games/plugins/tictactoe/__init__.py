"""Tic-Tac-Toe plugin: 3x3 board, X moves first."""

from __future__ import annotations

import json
import random
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

from turn_games.plugins.base import Clock, utc_now
from turn_games.plugins.tictactoe.agent import TicTacToeAgent
from turn_games.plugins.tictactoe.game import TicTacToeRules


class Plugin:
    def __init__(self, clock: Clock = utc_now, rng: Optional[random.Random] = None) -> None:
        manifest_path = Path(__file__).with_name("plugin.json")
        self._manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        self.rules = TicTacToeRules(clock=clock)
        self.agent = TicTacToeAgent(self.rules, rng=rng)

    def manifest(self) -> Dict[str, Any]:
        return deepcopy(self._manifest)
