"""Tic-Tac-Toe move selection for the automated player."""

from __future__ import annotations

import random
from functools import lru_cache
from typing import List, Optional, Tuple

from turn_games.plugins.tictactoe.game import Board, TicTacToeRules, empty_cells, lines, render_board
from turn_games.protocol.constants import AI_PLAYER_ID
from turn_games.protocol.errors import AgentError
from turn_games.protocol.models import TicTacToeMove, TicTacToeState


FlatBoard = Tuple[Optional[str], ...]

CENTER = (1, 1)
CORNERS = ((0, 0), (0, 2), (2, 0), (2, 2))


class TicTacToeAgent:
    """easy: random cell; medium: win, block, centre, corner; hard: minimax."""

    def __init__(self, rules: TicTacToeRules, player_id: str = AI_PLAYER_ID, rng: Optional[random.Random] = None):
        self.rules = rules
        self.player_id = player_id
        self.rng = rng or random.Random()

    def choose_move(self, view: TicTacToeState, difficulty: str) -> TicTacToeMove:
        valid_moves = self.rules.get_valid_moves(view, self.player_id)
        if not valid_moves:
            raise AgentError("No valid moves available")

        own = view.player_symbols[self.player_id]
        other = "O" if own == "X" else "X"

        if difficulty == "easy":
            return self.rng.choice(valid_moves)
        if difficulty == "hard":
            row, col = _best_minimax_move(_flatten(view.board), own, other)
            return TicTacToeMove(row=row, col=col)
        return self._medium_move(view.board, own, other, valid_moves)

    def _medium_move(
        self,
        board: Board,
        own: str,
        other: str,
        valid_moves: List[TicTacToeMove],
    ) -> TicTacToeMove:
        for token in (own, other):
            winning = _find_winning_move(board, token)
            if winning is not None:
                return TicTacToeMove(row=winning[0], col=winning[1])

        if board[CENTER[0]][CENTER[1]] is None:
            return TicTacToeMove(row=CENTER[0], col=CENTER[1])

        corners = [move for move in valid_moves if (move.row, move.col) in CORNERS]
        if corners:
            return self.rng.choice(corners)
        return self.rng.choice(valid_moves)

    def describe(self, view: TicTacToeState) -> str:
        own = view.player_symbols.get(self.player_id)
        other = "O" if own == "X" else "X"
        filled = sum(1 for row in view.board for cell in row if cell is not None)
        analysis = [
            f"Game Status: {view.status}",
            f"Current Player: {view.current_player_id}",
            f"Board filled: {filled}/9 cells",
        ]

        if view.status == "playing":
            own_win = _find_winning_move(view.board, own)
            other_win = _find_winning_move(view.board, other)
            if own_win is not None:
                analysis.append(f"AI can win with move: ({own_win[0]}, {own_win[1]})")
            if other_win is not None:
                analysis.append(f"Player can win with move: ({other_win[0]}, {other_win[1]})")

        corners_taken = sum(1 for row, col in CORNERS if view.board[row][col] is not None)
        analysis.append(f"Center occupied: {view.board[1][1] is not None}")
        analysis.append(f"Corners occupied: {corners_taken}/4")
        analysis.append("")
        analysis.append(render_board(view.board))
        return "\n".join(analysis)


def _find_winning_move(board: Board, token: str) -> Optional[Tuple[int, int]]:
    for row, col in empty_cells(board):
        probe = [list(cells) for cells in board]
        probe[row][col] = token
        if any(all(cell == token for cell in line) for line, _ in lines(probe)):
            return (row, col)
    return None


def _flatten(board: Board) -> FlatBoard:
    return tuple(cell for row in board for cell in row)


_FLAT_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


def _flat_winner(board: FlatBoard) -> Optional[str]:
    for a, b, c in _FLAT_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


@lru_cache(maxsize=None)
def _minimax(board: FlatBoard, own: str, other: str, own_turn: bool, depth: int) -> int:
    # Faster wins and slower losses score higher.
    winner = _flat_winner(board)
    if winner == own:
        return 10 - depth
    if winner == other:
        return depth - 10
    if all(cell is not None for cell in board):
        return 0

    token = own if own_turn else other
    scores = []
    for index, cell in enumerate(board):
        if cell is None:
            child = board[:index] + (token,) + board[index + 1:]
            scores.append(_minimax(child, own, other, not own_turn, depth + 1))
    return max(scores) if own_turn else min(scores)


def _best_minimax_move(board: FlatBoard, own: str, other: str) -> Tuple[int, int]:
    best_index = -1
    best_score = -100
    for index, cell in enumerate(board):
        if cell is None:
            child = board[:index] + (own,) + board[index + 1:]
            score = _minimax(child, own, other, False, 1)
            if score > best_score:
                best_score = score
                best_index = index
    return divmod(best_index, 3)
