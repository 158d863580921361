from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from turn_games.plugins.tictactoe.game import TicTacToeRules, lines
from turn_games.protocol.errors import InvalidMoveError
from turn_games.protocol.models import Player, TicTacToeMove


START = datetime(2024, 1, 1, tzinfo=timezone.utc)

PLAYERS = [
    Player(id="player1", name="Alice", is_ai=False),
    Player(id="ai", name="AI", is_ai=True),
]

WINNING_LINES = [
    [(0, 0), (0, 1), (0, 2)],
    [(1, 0), (1, 1), (1, 2)],
    [(2, 0), (2, 1), (2, 2)],
    [(0, 0), (1, 0), (2, 0)],
    [(0, 1), (1, 1), (2, 1)],
    [(0, 2), (1, 2), (2, 2)],
    [(0, 0), (1, 1), (2, 2)],
    [(0, 2), (1, 1), (2, 0)],
]


def frozen_clock():
    return START


def make_rules(clock=frozen_clock):
    return TicTacToeRules(clock=clock, id_factory=lambda: "game-1")


def play(rules, state, moves):
    for row, col in moves:
        state = rules.apply_move(state, TicTacToeMove(row=row, col=col), state.current_player_id)
    return state


def test_initial_state():
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS)

    assert state.id == "game-1"
    assert state.status == "playing"
    assert state.winner is None
    assert state.current_player_id == "player1"
    assert state.player_symbols == {"player1": "X", "ai": "O"}
    assert state.board == [[None] * 3 for _ in range(3)]
    assert state.created_at == state.updated_at == START


def test_first_player_option_gets_x():
    state = make_rules().get_initial_state(PLAYERS, {"first_player_id": "ai"})

    assert state.current_player_id == "ai"
    assert state.player_symbols == {"ai": "X", "player1": "O"}


def test_unknown_first_player_rejected():
    with pytest.raises(ValueError):
        make_rules().get_initial_state(PLAYERS, {"first_player_id": "player2"})


def test_turn_alternation():
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS)
    seen = [state.current_player_id]
    for row, col in [(0, 0), (1, 1), (2, 2), (0, 2), (2, 0)]:
        state = play(rules, state, [(row, col)])
        seen.append(state.current_player_id)

    assert seen == ["player1", "ai", "player1", "ai", "player1", "ai"]


def test_apply_move_places_symbol_and_leaves_input_untouched():
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS)
    before = state.model_dump()

    after = rules.apply_move(state, TicTacToeMove(row=1, col=2), "player1")

    assert after.board[1][2] == "X"
    assert state.model_dump() == before


def test_updated_at_strictly_increases_on_frozen_clock():
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS)
    after = play(rules, state, [(0, 0), (0, 1)])

    assert after.updated_at > state.updated_at
    assert after.updated_at - state.updated_at == timedelta(microseconds=2)


@pytest.mark.parametrize(
    "move, player_id",
    [
        (TicTacToeMove(row=0, col=0), "ai"),
        (TicTacToeMove(row=3, col=0), "player1"),
        (TicTacToeMove(row=0, col=-1), "player1"),
    ],
)
def test_validate_move_rejects(move, player_id):
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS)

    assert rules.validate_move(state, move, player_id) is False


def test_occupied_cell_rejected():
    rules = make_rules()
    state = play(rules, rules.get_initial_state(PLAYERS), [(1, 1)])

    assert rules.validate_move(state, TicTacToeMove(row=1, col=1), "ai") is False


def test_finished_game_rejects_moves():
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS).model_copy(update={"status": "finished", "winner": "draw"})

    assert rules.validate_move(state, TicTacToeMove(row=0, col=0), "player1") is False
    assert rules.get_valid_moves(state, "player1") == []


def test_apply_invalid_move_raises():
    rules = make_rules()
    state = rules.get_initial_state(PLAYERS)

    with pytest.raises(InvalidMoveError):
        rules.apply_move(state, TicTacToeMove(row=0, col=0), "ai")


def test_there_are_eight_lines():
    board = [[None] * 3 for _ in range(3)]
    assert len(list(lines(board))) == 8


@pytest.mark.parametrize("cells", WINNING_LINES)
@pytest.mark.parametrize("symbol, expected", [("X", "player1"), ("O", "ai")])
def test_every_line_wins(cells, symbol, expected):
    rules = make_rules()
    board = [[None] * 3 for _ in range(3)]
    for row, col in cells:
        board[row][col] = symbol
    state = rules.get_initial_state(PLAYERS).model_copy(update={"board": board})

    result = rules.check_game_end(state)

    assert result is not None
    assert result.winner == expected


def test_win_reason_names_the_line():
    rules = make_rules()
    state = play(rules, rules.get_initial_state(PLAYERS), [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)])

    result = rules.check_game_end(state)

    assert result.winner == "player1"
    assert result.reason == "Three in a row (row 1)"


def test_draw_on_full_board():
    rules = make_rules()
    board = [
        ["X", "O", "X"],
        ["X", "O", "O"],
        ["O", "X", "X"],
    ]
    state = rules.get_initial_state(PLAYERS).model_copy(update={"board": board})

    result = rules.check_game_end(state)

    assert result.winner == "draw"
    assert result.reason == "Board is full"


def test_game_in_progress_has_no_result():
    rules = make_rules()
    state = play(rules, rules.get_initial_state(PLAYERS), [(0, 0), (1, 1)])

    assert rules.check_game_end(state) is None


def test_valid_moves_are_empty_cells_for_current_player_only():
    rules = make_rules()
    state = play(rules, rules.get_initial_state(PLAYERS), [(0, 0)])

    moves = rules.get_valid_moves(state, "ai")

    assert len(moves) == 8
    assert TicTacToeMove(row=0, col=0) not in moves
    assert rules.get_valid_moves(state, "player1") == []
