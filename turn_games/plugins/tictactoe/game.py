"""Deterministic Tic-Tac-Toe rules plugin."""

from __future__ import annotations

import uuid
from copy import deepcopy
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from turn_games.plugins.base import Clock, next_timestamp, utc_now
from turn_games.protocol.constants import DRAW, TIC_TAC_TOE
from turn_games.protocol.errors import InvalidMoveError
from turn_games.protocol.models import Cell, GameResult, Player, TicTacToeMove, TicTacToeState


Board = List[List[Cell]]


class TicTacToeRules:
    game_type = TIC_TAC_TOE
    move_model = TicTacToeMove

    def __init__(self, clock: Clock = utc_now, id_factory: Callable[[], str] = lambda: str(uuid.uuid4())):
        self._clock = clock
        self._id_factory = id_factory

    def get_initial_state(
        self,
        players: Sequence[Player],
        options: Optional[Dict[str, Any]] = None,
    ) -> TicTacToeState:
        """X always moves first; `options["first_player_id"]` picks who holds X."""
        if len(players) != 2:
            raise ValueError("Tic-Tac-Toe needs exactly two players")
        options = options or {}
        first = options.get("first_player_id") or players[0].id
        ids = [player.id for player in players]
        if first not in ids:
            raise ValueError(f"first_player_id {first!r} is not a player")
        second = ids[1] if first == ids[0] else ids[0]

        now = self._clock()
        return TicTacToeState(
            id=self._id_factory(),
            players=list(players),
            current_player_id=first,
            status="playing",
            created_at=now,
            updated_at=now,
            board=[[None, None, None], [None, None, None], [None, None, None]],
            player_symbols={first: "X", second: "O"},
        )

    def validate_move(self, state: TicTacToeState, move: Any, player_id: str) -> bool:
        if not isinstance(move, TicTacToeMove):
            return False
        if state.status != "playing":
            return False
        if state.current_player_id != player_id:
            return False
        if move.row not in range(3) or move.col not in range(3):
            return False
        return state.board[move.row][move.col] is None

    def apply_move(self, state: TicTacToeState, move: TicTacToeMove, player_id: str) -> TicTacToeState:
        if not self.validate_move(state, move, player_id):
            raise InvalidMoveError("Invalid move")

        board = deepcopy(state.board)
        board[move.row][move.col] = state.player_symbols[player_id]
        return state.model_copy(
            update={
                "board": board,
                "current_player_id": state.other_player_id(player_id),
                "updated_at": next_timestamp(self._clock, state.updated_at),
            },
            deep=True,
        )

    def check_game_end(self, state: TicTacToeState) -> Optional[GameResult]:
        completed = next(_completed_lines(state.board), None)
        if completed is not None:
            symbol, reason = completed
            return GameResult(winner=_player_for_symbol(state, symbol), reason=reason)
        if _board_full(state.board):
            return GameResult(winner=DRAW, reason="Board is full")
        return None

    def get_valid_moves(self, state: TicTacToeState, player_id: str) -> List[TicTacToeMove]:
        if state.status != "playing" or state.current_player_id != player_id:
            return []
        return [TicTacToeMove(row=row, col=col) for row, col in empty_cells(state.board)]


def render_board(board: Board) -> str:
    return "\n-----------\n".join(
        "|".join(f" {cell} " if cell else "   " for cell in row) for row in board
    )


def lines(board: Board) -> Iterable[Tuple[List[Cell], str]]:
    for row_index, row in enumerate(board):
        yield row, f"Three in a row (row {row_index + 1})"
    for column_index in range(3):
        yield [board[row_index][column_index] for row_index in range(3)], f"Three in a column (column {column_index + 1})"
    yield [board[0][0], board[1][1], board[2][2]], "Three in a diagonal"
    yield [board[0][2], board[1][1], board[2][0]], "Three in a diagonal"


def _completed_lines(board: Board) -> Iterable[Tuple[str, str]]:
    for line, reason in lines(board):
        if line[0] is not None and line[0] == line[1] == line[2]:
            yield line[0], reason


def _player_for_symbol(state: TicTacToeState, symbol: str) -> str:
    for player_id, player_symbol in state.player_symbols.items():
        if player_symbol == symbol:
            return player_id
    raise ValueError(f"No player holds symbol {symbol!r}")


def _board_full(board: Board) -> bool:
    return all(cell is not None for row in board for cell in row)


def empty_cells(board: Board) -> List[Tuple[int, int]]:
    return [(row, col) for row in range(3) for col in range(3) if board[row][col] is None]
