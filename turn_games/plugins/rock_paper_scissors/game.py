"""Deterministic Rock-Paper-Scissors rules plugin."""

from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, List, Optional, Sequence

from turn_games.plugins.base import Clock, next_timestamp, utc_now
from turn_games.protocol.constants import DRAW, MAX_ROUNDS_LIMIT, ROCK_PAPER_SCISSORS
from turn_games.protocol.errors import InvalidMoveError
from turn_games.protocol.models import GameResult, Player, Round, RPSMove, RPSState


CHOICES = ("rock", "paper", "scissors")
DEFAULT_MAX_ROUNDS = 3

# Each choice maps to the choice it beats.
BEATS = {
    "rock": "scissors",
    "scissors": "paper",
    "paper": "rock",
}
COUNTER = {beaten: winner for winner, beaten in BEATS.items()}


def round_winner(first_choice: str, second_choice: str) -> str:
    """Return "first", "second" or "draw" for one resolved pairing."""
    if first_choice == second_choice:
        return DRAW
    return "first" if BEATS[first_choice] == second_choice else "second"


class RockPaperScissorsRules:
    game_type = ROCK_PAPER_SCISSORS
    move_model = RPSMove

    def __init__(self, clock: Clock = utc_now, id_factory: Callable[[], str] = lambda: str(uuid.uuid4())):
        self._clock = clock
        self._id_factory = id_factory

    def get_initial_state(
        self,
        players: Sequence[Player],
        options: Optional[Dict[str, Any]] = None,
    ) -> RPSState:
        if len(players) != 2:
            raise ValueError("Rock-Paper-Scissors needs exactly two players")
        max_rounds = (options or {}).get("max_rounds")
        if max_rounds is None:
            max_rounds = DEFAULT_MAX_ROUNDS
        if isinstance(max_rounds, bool) or not isinstance(max_rounds, int):
            raise ValueError("max_rounds must be an integer")
        if not 1 <= max_rounds <= MAX_ROUNDS_LIMIT:
            raise ValueError(f"max_rounds must be an integer from 1 to {MAX_ROUNDS_LIMIT}")

        now = self._clock()
        return RPSState(
            id=self._id_factory(),
            players=list(players),
            current_player_id=players[0].id,
            status="playing",
            created_at=now,
            updated_at=now,
            rounds=[Round() for _ in range(max_rounds)],
            current_round=0,
            max_rounds=max_rounds,
            scores={player.id: 0 for player in players},
        )

    def validate_move(self, state: RPSState, move: Any, player_id: str) -> bool:
        if not isinstance(move, RPSMove) or move.choice not in CHOICES:
            return False
        if state.status != "playing":
            return False
        if state.current_round >= state.max_rounds:
            return False
        if state.current_player_id != player_id:
            return False
        return _own_choice(state, state.rounds[state.current_round], player_id) is None

    def apply_move(self, state: RPSState, move: RPSMove, player_id: str) -> RPSState:
        if not self.validate_move(state, move, player_id):
            raise InvalidMoveError("Invalid move")

        first_id, second_id = state.player_ids()[:2]
        rounds = [current.model_copy() for current in state.rounds]
        current = rounds[state.current_round]
        if player_id == first_id:
            current.player1_choice = move.choice
        else:
            current.player2_choice = move.choice

        scores = dict(state.scores)
        current_round = state.current_round
        if current.player1_choice is not None and current.player2_choice is not None:
            outcome = round_winner(current.player1_choice, current.player2_choice)
            if outcome == DRAW:
                current.winner = DRAW
            else:
                winner_id = first_id if outcome == "first" else second_id
                current.winner = winner_id
                scores[winner_id] = scores.get(winner_id, 0) + 1
            current_round += 1
            next_player = first_id
        else:
            next_player = state.other_player_id(player_id)

        return state.model_copy(
            update={
                "rounds": rounds,
                "current_round": current_round,
                "scores": scores,
                "current_player_id": next_player,
                "updated_at": next_timestamp(self._clock, state.updated_at),
            },
            deep=True,
        )

    def check_game_end(self, state: RPSState) -> Optional[GameResult]:
        if state.current_round < state.max_rounds:
            return None

        first_id, second_id = state.player_ids()[:2]
        first_score = state.scores.get(first_id, 0)
        second_score = state.scores.get(second_id, 0)
        if first_score > second_score:
            return GameResult(winner=first_id, reason=f"Won {first_score}-{second_score}")
        if second_score > first_score:
            return GameResult(winner=second_id, reason=f"Won {second_score}-{first_score}")
        return GameResult(winner=DRAW, reason=f"Tied {first_score}-{second_score}")

    def get_valid_moves(self, state: RPSState, player_id: str) -> List[RPSMove]:
        if state.status != "playing" or state.current_round >= state.max_rounds:
            return []
        if state.current_player_id != player_id:
            return []
        if _own_choice(state, state.rounds[state.current_round], player_id) is not None:
            return []
        return [RPSMove(choice=choice) for choice in CHOICES]


def _own_choice(state: RPSState, current: Round, player_id: str) -> Optional[str]:
    if player_id == state.players[0].id:
        return current.player1_choice
    return current.player2_choice
