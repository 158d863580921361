"""Polling-based turn synchronization for a stateless automated player."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict

from turn_games.protocol.constants import GAME_DISPLAY_NAMES, HUMAN_PLAYER_ID
from turn_games.protocol.models import GameSession, GameState


logger = logging.getLogger(__name__)

ViewReader = Callable[[str, str], Awaitable[GameSession]]


class WaitStatus(str, Enum):
    ALREADY_FINISHED = "already_finished"
    NOT_MY_TURN = "not_my_turn"
    MOVE_DETECTED = "move_detected"
    FINISHED_DURING_WAIT = "finished_during_wait"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class WaitOutcome(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_id: str
    game_type: str
    status: WaitStatus
    message: str
    game_state: GameState
    elapsed_seconds: Optional[float] = None
    polls: int = 0


class PollTimer:
    """Deadline, poll interval and cancellation signal for one wait loop."""

    def __init__(
        self,
        timeout_seconds: float,
        interval_seconds: float,
        cancel: Optional[asyncio.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interval_seconds = interval_seconds
        self.cancel = cancel or asyncio.Event()
        self._clock = clock
        self.started_at = clock()
        self.deadline = self.started_at + timeout_seconds

    def elapsed(self) -> float:
        return self._clock() - self.started_at

    def expired(self) -> bool:
        return self._clock() >= self.deadline

    async def wait(self) -> bool:
        """Sleep one interval. Returns False if cancellation arrived first."""
        if self.cancel.is_set():
            return False
        try:
            await asyncio.wait_for(self.cancel.wait(), timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            return True
        return False


class TurnSynchronizer:
    """Blocks until the human moves, the game ends, the deadline passes or the
    caller cancels. Reads only through the sanitized view and never writes."""

    def __init__(
        self,
        read_view: ViewReader,
        human_player_id: str = HUMAN_PLAYER_ID,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._read_view = read_view
        self.human_player_id = human_player_id
        self._clock = clock

    async def wait_for_move(
        self,
        game_type: str,
        game_id: str,
        timeout_seconds: float = 15.0,
        poll_interval_seconds: float = 3.0,
        cancel: Optional[asyncio.Event] = None,
    ) -> WaitOutcome:
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")

        view = await self._read_view(game_type, game_id)
        state = view.game_state

        def outcome(status: WaitStatus, message: str, elapsed: Optional[float] = None, polls: int = 0) -> WaitOutcome:
            logger.info("Wait on %s game %s ended: %s after %d poll(s)", game_type, game_id, status.value, polls)
            return WaitOutcome(
                game_id=game_id,
                game_type=game_type,
                status=status,
                message=message,
                game_state=state,
                elapsed_seconds=elapsed,
                polls=polls,
            )

        if state.status == "finished":
            return outcome(WaitStatus.ALREADY_FINISHED, f"Game is already finished. Winner: {state.winner or 'Draw'}")
        if state.current_player_id != self.human_player_id:
            return outcome(
                WaitStatus.NOT_MY_TURN,
                f"It's not the human player's turn. Current player: {state.current_player_id}",
            )

        baseline = state.updated_at
        timer = PollTimer(timeout_seconds, poll_interval_seconds, cancel=cancel, clock=self._clock)
        polls = 0
        while not timer.expired():
            if not await timer.wait():
                return outcome(WaitStatus.CANCELLED, "Wait cancelled by caller", timer.elapsed(), polls)

            view = await self._read_view(game_type, game_id)
            state = view.game_state
            polls += 1
            logger.debug("Poll %d on %s game %s: updated_at=%s", polls, game_type, game_id, state.updated_at)

            if state.updated_at != baseline:
                return outcome(WaitStatus.MOVE_DETECTED, "Human player made their move", timer.elapsed(), polls)
            if state.status == "finished":
                return outcome(
                    WaitStatus.FINISHED_DURING_WAIT,
                    f"Game finished during wait. Winner: {state.winner or 'Draw'}",
                    timer.elapsed(),
                    polls,
                )

        name = GAME_DISPLAY_NAMES.get(game_type, game_type)
        return outcome(
            WaitStatus.TIMED_OUT,
            f"Timed out waiting for human player move in {name} after {timeout_seconds:g} seconds",
            timer.elapsed(),
            polls,
        )
