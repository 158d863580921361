"""Plugin contract for turn-games.

A plugin pairs a rules engine with a move-selection agent. Rules engines are
pure: they receive a state, return a new state and never touch storage or
mutate their inputs. Agents only ever see the sanitized view of a game.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Type, TypeVar

from pydantic import BaseModel

from turn_games.protocol.models import GameResult, Player


Clock = Callable[[], datetime]

StateT = TypeVar("StateT")
MoveT = TypeVar("MoveT", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(clock: Clock, previous: datetime) -> datetime:
    """Clock reading that is strictly later than `previous`.

    Pollers detect moves by comparing `updated_at`, so two updates must never
    share a timestamp even on a coarse clock.
    """
    now = clock()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class GameRules(Protocol[StateT, MoveT]):
    game_type: str
    move_model: Type[MoveT]

    def get_initial_state(
        self,
        players: Sequence[Player],
        options: Optional[Dict[str, Any]] = None,
    ) -> StateT:
        ...

    def validate_move(self, state: StateT, move: Any, player_id: str) -> bool:
        ...

    def apply_move(self, state: StateT, move: MoveT, player_id: str) -> StateT:
        ...

    def check_game_end(self, state: StateT) -> Optional[GameResult]:
        ...

    def get_valid_moves(self, state: StateT, player_id: str) -> List[MoveT]:
        ...


class MoveSelector(Protocol[StateT, MoveT]):
    def choose_move(self, view: StateT, difficulty: str) -> MoveT:
        ...

    def describe(self, view: StateT) -> str:
        ...
