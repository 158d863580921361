from __future__ import annotations

from datetime import datetime, timezone

from turn_games.plugins.rock_paper_scissors.game import RockPaperScissorsRules
from turn_games.plugins.tictactoe.game import TicTacToeRules
from turn_games.protocol.models import GameMove, GameSession, Player, RPSMove, TicTacToeMove
from turn_games.runtime.sanitizer import sanitize_session, sanitize_sessions


START = datetime(2024, 1, 1, tzinfo=timezone.utc)

PLAYERS = [
    Player(id="player1", name="Alice", is_ai=False),
    Player(id="ai", name="AI", is_ai=True),
]


def rps_session(choices):
    """Apply alternating choices starting with player1 and record them in history."""
    rules = RockPaperScissorsRules(clock=lambda: START, id_factory=lambda: "r1")
    state = rules.get_initial_state(PLAYERS)
    history = []
    for choice in choices:
        player_id = state.current_player_id
        move = RPSMove(choice=choice)
        state = rules.apply_move(state, move, player_id)
        history.append(GameMove(player_id=player_id, move=move, timestamp=START))
    return GameSession(game_state=state, game_type="rock-paper-scissors", history=history, difficulty="medium")


def test_open_round_is_blanked_and_resolved_rounds_kept():
    session = rps_session(["rock", "scissors", "paper"])

    view = sanitize_session(session)

    resolved, open_round = view.game_state.rounds[0], view.game_state.rounds[1]
    assert resolved == session.game_state.rounds[0]
    assert resolved.winner == "player1"
    assert open_round.player1_choice is None
    assert open_round.player2_choice is None
    assert open_round.winner is None


def test_history_of_open_round_is_dropped():
    session = rps_session(["rock", "scissors", "paper"])

    view = sanitize_session(session)

    assert len(session.history) == 3
    assert [entry.move.choice for entry in view.history] == ["rock", "scissors"]


def test_canonical_session_is_not_modified():
    session = rps_session(["rock"])
    before = session.model_dump()

    sanitize_session(session)

    assert session.model_dump() == before
    assert session.game_state.rounds[0].player1_choice == "rock"


def test_fully_resolved_session_passes_through():
    session = rps_session(["rock", "paper"])

    assert sanitize_session(session) == session


def test_tic_tac_toe_is_a_passthrough_copy():
    rules = TicTacToeRules(clock=lambda: START, id_factory=lambda: "t1")
    state = rules.apply_move(rules.get_initial_state(PLAYERS), TicTacToeMove(row=0, col=0), "player1")
    session = GameSession(game_state=state, game_type="tic-tac-toe")

    view = sanitize_session(session)
    view.game_state.board[2][2] = "O"

    assert view.game_state.board[0][0] == "X"
    assert session.game_state.board[2][2] is None


def test_sanitize_sessions_maps_each_session():
    sessions = [rps_session(["rock"]), rps_session(["rock", "rock"])]

    views = sanitize_sessions(sessions)

    assert views[0].game_state.rounds[0].player1_choice is None
    assert views[1].game_state.rounds[0].winner == "draw"
