"""Protocol models: game records, request payloads and the response envelope."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

from turn_games.protocol.constants import (
    DEFAULT_PLAYER_NAME,
    MAX_ROUNDS_LIMIT,
    Choice,
    Difficulty,
    GameStatus,
    GameType,
    PlayerId,
    Symbol,
)


Winner = Union[PlayerId, Literal["draw"]]
Cell = Optional[Symbol]


class Player(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: PlayerId
    name: StrictStr
    is_ai: StrictBool


class BaseGameState(BaseModel):
    """Fields every game variant carries.

    `winner` is present exactly when `status` is `finished`, and
    `current_player_id` always names one of `players`.
    """

    model_config = ConfigDict(extra="forbid")

    id: StrictStr
    players: List[Player]
    current_player_id: PlayerId
    status: GameStatus
    winner: Optional[Winner] = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _check_invariants(self) -> "BaseGameState":
        ids = [player.id for player in self.players]
        if len(set(ids)) != len(ids):
            raise ValueError("player ids must be unique")
        if self.current_player_id not in ids:
            raise ValueError(f"current_player_id {self.current_player_id!r} is not a player")
        if (self.winner is not None) != (self.status == "finished"):
            raise ValueError("winner must be set if and only if status is 'finished'")
        return self

    def player_ids(self) -> List[str]:
        return [player.id for player in self.players]

    def other_player_id(self, player_id: str) -> str:
        for player in self.players:
            if player.id != player_id:
                return player.id
        return self.players[0].id


class TicTacToeState(BaseGameState):
    game_type: Literal["tic-tac-toe"] = "tic-tac-toe"
    board: List[List[Cell]]
    player_symbols: Dict[PlayerId, Symbol]

    @field_validator("board")
    @classmethod
    def _board_is_3x3(cls, value: List[List[Cell]]) -> List[List[Cell]]:
        if len(value) != 3 or any(len(row) != 3 for row in value):
            raise ValueError("board must be 3x3")
        return value

    @field_validator("player_symbols")
    @classmethod
    def _symbols_are_bijective(cls, value: Dict[str, str]) -> Dict[str, str]:
        if len(value) != 2 or set(value.values()) != {"X", "O"}:
            raise ValueError("player_symbols must map two players onto X and O")
        return value

    @model_validator(mode="after")
    def _check_move_counts(self) -> "TicTacToeState":
        # X always moves first.
        cells = [cell for row in self.board for cell in row]
        if cells.count("X") - cells.count("O") not in (0, 1):
            raise ValueError("board must hold as many X as O, or one more X")
        return self


class Round(BaseModel):
    model_config = ConfigDict(extra="forbid")

    player1_choice: Optional[Choice] = None
    player2_choice: Optional[Choice] = None
    winner: Optional[Winner] = None

    @model_validator(mode="after")
    def _winner_only_when_resolved(self) -> "Round":
        resolved = self.player1_choice is not None and self.player2_choice is not None
        if (self.winner is not None) != resolved:
            raise ValueError("round winner must be set if and only if both choices are set")
        return self


class RPSState(BaseGameState):
    game_type: Literal["rock-paper-scissors"] = "rock-paper-scissors"
    rounds: List[Round]
    current_round: StrictInt = 0
    max_rounds: StrictInt = Field(default=3, ge=1, le=MAX_ROUNDS_LIMIT)
    scores: Dict[PlayerId, StrictInt]

    @model_validator(mode="after")
    def _check_rounds(self) -> "RPSState":
        if len(self.rounds) != self.max_rounds:
            raise ValueError("rounds must have exactly max_rounds entries")
        if not 0 <= self.current_round <= self.max_rounds:
            raise ValueError("current_round is out of range")
        return self


GameState = Annotated[Union[TicTacToeState, RPSState], Field(discriminator="game_type")]


class TicTacToeMove(BaseModel):
    model_config = ConfigDict(extra="forbid")

    row: StrictInt
    col: StrictInt


class RPSMove(BaseModel):
    model_config = ConfigDict(extra="forbid")

    choice: StrictStr


Move = Union[TicTacToeMove, RPSMove]


class GameMove(BaseModel):
    model_config = ConfigDict(extra="forbid")

    player_id: PlayerId
    move: Move
    timestamp: datetime


class GameResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    winner: Optional[Winner] = None
    reason: StrictStr


class GameSession(BaseModel):
    """One persisted game: canonical state, append-only history and metadata."""

    model_config = ConfigDict(extra="forbid")

    game_state: GameState
    game_type: GameType
    history: List[GameMove] = Field(default_factory=list)
    difficulty: Optional[Difficulty] = None

    @model_validator(mode="after")
    def _type_matches_state(self) -> "GameSession":
        if self.game_state.game_type != self.game_type:
            raise ValueError("game_type does not match game_state")
        return self

    @property
    def game_id(self) -> str:
        return self.game_state.id


# --- Request payloads ---


class CreateGameRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_type: GameType
    player_name: StrictStr = DEFAULT_PLAYER_NAME
    game_id: Optional[StrictStr] = None
    difficulty: Optional[Difficulty] = None
    options: Dict[str, Any] = Field(default_factory=dict)


class MoveRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_type: GameType
    game_id: StrictStr
    player_id: PlayerId
    move: Dict[str, Any]


class GameRef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_type: GameType
    game_id: StrictStr


class ListRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_type: GameType


class ValidMovesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_type: GameType
    game_id: StrictStr
    player_id: PlayerId


class WaitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    game_type: GameType
    game_id: StrictStr
    timeout_seconds: Optional[float] = Field(default=None, ge=0)
    poll_interval_seconds: Optional[float] = Field(default=None, gt=0)


class Request(BaseModel):
    """Incoming dispatcher request; `args` is validated per command."""

    model_config = ConfigDict(extra="forbid")

    command: StrictStr
    args: Dict[str, Any] = Field(default_factory=dict)


class Response(BaseModel):
    """Stable response envelope used by the dispatcher and CLI."""

    model_config = ConfigDict(extra="forbid")

    ok: StrictBool
    code: StrictStr
    message: StrictStr
    data: Dict[str, Any] = Field(default_factory=dict)
    game_over: StrictBool = False
    winner: Optional[StrictStr] = None
    game_id: Optional[StrictStr] = None
