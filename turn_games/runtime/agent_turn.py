"""Automated player turns.

The agent reads the sanitized view, proposes a move, and the move is
submitted through the orchestrator exactly like a human move.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from turn_games.protocol.constants import AI_PLAYER_ID, DEFAULT_DIFFICULTY
from turn_games.protocol.errors import AgentError, NotYourTurnError
from turn_games.protocol.models import GameSession, Move, RPSMove, TicTacToeMove
from turn_games.registry import require_plugin
from turn_games.runtime.orchestrator import SessionOrchestrator


logger = logging.getLogger(__name__)


class AgentTurnResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_id: str
    game_type: str
    difficulty: str
    move: Move
    message: str
    session: GameSession


def describe_move(move: Any) -> str:
    if isinstance(move, TicTacToeMove):
        return f"AI made move at row {move.row + 1}, col {move.col + 1}"
    if isinstance(move, RPSMove):
        return f"AI chose {move.choice}"
    return f"AI played {move!r}"


class AgentTurn:
    def __init__(
        self,
        orchestrator: SessionOrchestrator,
        agent_timeout_seconds: float = 5.0,
        player_id: str = AI_PLAYER_ID,
    ):
        self.orchestrator = orchestrator
        self.agent_timeout_seconds = agent_timeout_seconds
        self.player_id = player_id

    async def play(self, game_type: str, game_id: str) -> AgentTurnResult:
        agent = require_plugin(self.orchestrator.plugins, game_type).agent
        view = await self.orchestrator.get_view(game_type, game_id)
        state = view.game_state

        if state.status != "playing":
            raise NotYourTurnError(f"Game is not in playing state. Current status: {state.status}")
        if state.current_player_id != self.player_id:
            raise NotYourTurnError(f"It's not AI's turn. Current player: {state.current_player_id}")

        difficulty = view.difficulty or DEFAULT_DIFFICULTY
        started = time.perf_counter()
        try:
            move = await asyncio.wait_for(
                asyncio.to_thread(agent.choose_move, state, difficulty),
                timeout=self.agent_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Agent timed out after %.1fs in %s game %s",
                self.agent_timeout_seconds,
                game_type,
                game_id,
            )
            raise AgentError(f"Agent did not choose a move within {self.agent_timeout_seconds:g} seconds") from exc
        logger.info(
            "Agent chose %s in %s game %s (difficulty=%s) in %.4fs",
            move.model_dump(),
            game_type,
            game_id,
            difficulty,
            time.perf_counter() - started,
        )

        session = await self.orchestrator.submit_move(game_type, game_id, self.player_id, move)
        message = describe_move(move)
        if session.game_state.status == "playing":
            message += ". Wait for the human player's move before playing again."
        return AgentTurnResult(
            game_id=game_id,
            game_type=game_type,
            difficulty=difficulty,
            move=move,
            message=message,
            session=session,
        )

    async def analyze(self, game_type: str, game_id: str) -> Dict[str, Any]:
        plugin = require_plugin(self.orchestrator.plugins, game_type)
        view = await self.orchestrator.get_view(game_type, game_id)
        state = view.game_state
        return {
            "game_id": game_id,
            "game_type": game_type,
            "status": state.status,
            "current_player": state.current_player_id,
            "winner": state.winner,
            "total_moves": len(view.history),
            "valid_moves": [move.model_dump() for move in plugin.rules.get_valid_moves(state, state.current_player_id)],
            "analysis": plugin.agent.describe(state),
        }
