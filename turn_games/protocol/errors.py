"""Stable error codes and the exceptions that carry them."""

from __future__ import annotations


OK = "OK"
NOT_FOUND = "NOT_FOUND"
INVALID_MOVE = "INVALID_MOVE"
INVALID_ARGS = "INVALID_ARGS"
UNSUPPORTED_GAME = "UNSUPPORTED_GAME"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
CONFLICT = "CONFLICT"
STORAGE_ERROR = "STORAGE_ERROR"
AGENT_ERROR = "AGENT_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"
UNKNOWN_COMMAND = "UNKNOWN_COMMAND"


class GameError(Exception):
    code = INTERNAL_ERROR


class NotFoundError(GameError):
    code = NOT_FOUND


class InvalidMoveError(GameError):
    code = INVALID_MOVE


class MalformedInputError(GameError):
    """Payload could not be parsed; it never reached move validation."""

    code = INVALID_ARGS


class UnsupportedGameError(GameError):
    code = UNSUPPORTED_GAME


class NotYourTurnError(GameError):
    code = NOT_YOUR_TURN


class ConflictError(GameError):
    code = CONFLICT


class StorageError(GameError):
    code = STORAGE_ERROR


class AgentError(GameError):
    code = AGENT_ERROR
