"""Agent-visible views of canonical sessions.

Every read the automated player can reach goes through `sanitize_session`;
the persistence path never does. The stored record is the same either way,
only the view differs.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from turn_games.protocol.constants import ROCK_PAPER_SCISSORS, TIC_TAC_TOE
from turn_games.protocol.models import GameSession, Round


Redactor = Callable[[GameSession], GameSession]


def _tic_tac_toe_view(session: GameSession) -> GameSession:
    # Both sides always see the whole board.
    return session.model_copy(deep=True)


def _rock_paper_scissors_view(session: GameSession) -> GameSession:
    """Blank every round without a winner and drop its history entries.

    A half-played round would otherwise tell the agent what the opponent has
    already committed to. Resolved rounds pass through untouched.
    """
    state = session.game_state
    rounds = [item.model_copy() if item.winner is not None else Round() for item in state.rounds]
    resolved = sum(1 for item in state.rounds if item.winner is not None)
    moves_per_round = len(state.players)

    view = session.model_copy(deep=True)
    view.game_state = view.game_state.model_copy(update={"rounds": rounds})
    view.history = view.history[: resolved * moves_per_round]
    return view


REDACTORS: Dict[str, Redactor] = {
    TIC_TAC_TOE: _tic_tac_toe_view,
    ROCK_PAPER_SCISSORS: _rock_paper_scissors_view,
}


def sanitize_session(session: GameSession) -> GameSession:
    return REDACTORS[session.game_type](session)


def sanitize_sessions(sessions: Iterable[GameSession]) -> List[GameSession]:
    return [sanitize_session(session) for session in sessions]
