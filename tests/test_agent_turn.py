from __future__ import annotations

import asyncio
import random
import time

import pytest

from turn_games.protocol.errors import AgentError, NotYourTurnError
from turn_games.protocol.models import TicTacToeMove
from turn_games.registry import load_plugins
from turn_games.runtime.agent_turn import AgentTurn, describe_move
from turn_games.runtime.orchestrator import SessionOrchestrator
from turn_games.runtime.session_store import MemorySessionStore


class SlowAgent:
    def choose_move(self, view, difficulty):
        time.sleep(0.3)
        return TicTacToeMove(row=0, col=0)

    def describe(self, view):
        return ""


class PeekingAgent:
    """Records the view it was handed."""

    def __init__(self, inner):
        self.inner = inner
        self.views = []

    def choose_move(self, view, difficulty):
        self.views.append(view)
        return self.inner.choose_move(view, difficulty)

    def describe(self, view):
        return self.inner.describe(view)


def make_turn(timeout=5.0):
    orchestrator = SessionOrchestrator(MemorySessionStore(), load_plugins(rng=random.Random(1)))
    return orchestrator, AgentTurn(orchestrator, agent_timeout_seconds=timeout)


def test_agent_plays_after_human():
    orchestrator, turn = make_turn()

    async def scenario():
        await orchestrator.create_game("tic-tac-toe", game_id="g1", difficulty="hard")
        await orchestrator.submit_move("tic-tac-toe", "g1", "player1", {"row": 0, "col": 0})
        return await turn.play("tic-tac-toe", "g1")

    result = asyncio.run(scenario())

    assert result.difficulty == "hard"
    assert result.session.game_state.current_player_id == "player1"
    assert [entry.player_id for entry in result.session.history] == ["player1", "ai"]
    assert result.message.startswith("AI made move at row")
    assert result.message.endswith("Wait for the human player's move before playing again.")


def test_agent_refuses_out_of_turn():
    orchestrator, turn = make_turn()

    async def scenario():
        await orchestrator.create_game("tic-tac-toe", game_id="g1")
        await turn.play("tic-tac-toe", "g1")

    with pytest.raises(NotYourTurnError):
        asyncio.run(scenario())


def test_agent_refuses_finished_game():
    orchestrator, turn = make_turn()

    async def scenario():
        await orchestrator.create_game("rock-paper-scissors", game_id="r1", options={"max_rounds": 1})
        await orchestrator.submit_move("rock-paper-scissors", "r1", "player1", {"choice": "rock"})
        result = await turn.play("rock-paper-scissors", "r1")
        assert result.session.game_state.status == "finished"
        await turn.play("rock-paper-scissors", "r1")

    with pytest.raises(NotYourTurnError):
        asyncio.run(scenario())


def test_rock_paper_scissors_agent_never_sees_pending_choice():
    orchestrator, turn = make_turn()
    plugin = orchestrator.plugins["rock-paper-scissors"]
    peeking = PeekingAgent(plugin.agent)
    plugin.agent = peeking

    async def scenario():
        await orchestrator.create_game("rock-paper-scissors", game_id="r1")
        await orchestrator.submit_move("rock-paper-scissors", "r1", "player1", {"choice": "rock"})
        return await turn.play("rock-paper-scissors", "r1")

    result = asyncio.run(scenario())

    assert peeking.views[0].rounds[0].player1_choice is None
    assert result.message.startswith("AI chose ")
    assert result.session.game_state.rounds[0].winner is not None


def test_slow_agent_times_out_without_writing():
    orchestrator, turn = make_turn(timeout=0.05)
    orchestrator.plugins["tic-tac-toe"].agent = SlowAgent()

    async def scenario():
        await orchestrator.create_game("tic-tac-toe", game_id="g1", options={"first_player_id": "ai"})
        with pytest.raises(AgentError):
            await turn.play("tic-tac-toe", "g1")
        return await orchestrator.get_session("tic-tac-toe", "g1")

    stored = asyncio.run(scenario())
    assert stored.history == []


def test_analyze_reports_position():
    orchestrator, turn = make_turn()

    async def scenario():
        await orchestrator.create_game("tic-tac-toe", game_id="g1")
        await orchestrator.submit_move("tic-tac-toe", "g1", "player1", {"row": 1, "col": 1})
        return await turn.analyze("tic-tac-toe", "g1")

    analysis = asyncio.run(scenario())

    assert analysis["status"] == "playing"
    assert analysis["current_player"] == "ai"
    assert analysis["total_moves"] == 1
    assert len(analysis["valid_moves"]) == 8
    assert "Center occupied: True" in analysis["analysis"]


def test_describe_move_is_one_based():
    assert describe_move(TicTacToeMove(row=0, col=2)) == "AI made move at row 1, col 3"
