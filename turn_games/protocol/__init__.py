from turn_games.protocol.constants import AI_PLAYER_ID, GAME_TYPES, HUMAN_PLAYER_ID
from turn_games.protocol.errors import (
    AGENT_ERROR,
    CONFLICT,
    INTERNAL_ERROR,
    INVALID_ARGS,
    INVALID_MOVE,
    NOT_FOUND,
    NOT_YOUR_TURN,
    OK,
    STORAGE_ERROR,
    UNKNOWN_COMMAND,
    UNSUPPORTED_GAME,
)
from turn_games.protocol.models import GameSession, Request, Response

__all__ = [
    "AGENT_ERROR",
    "AI_PLAYER_ID",
    "CONFLICT",
    "GAME_TYPES",
    "GameSession",
    "HUMAN_PLAYER_ID",
    "INTERNAL_ERROR",
    "INVALID_ARGS",
    "INVALID_MOVE",
    "NOT_FOUND",
    "NOT_YOUR_TURN",
    "OK",
    "Request",
    "Response",
    "STORAGE_ERROR",
    "UNKNOWN_COMMAND",
    "UNSUPPORTED_GAME",
]
