"""Closed value sets shared by every layer."""

from __future__ import annotations

from typing import Literal, Tuple


GameType = Literal["tic-tac-toe", "rock-paper-scissors"]
Difficulty = Literal["easy", "medium", "hard"]
PlayerId = Literal["player1", "player2", "ai"]
GameStatus = Literal["waiting", "playing", "finished"]
Symbol = Literal["X", "O"]
Choice = Literal["rock", "paper", "scissors"]

TIC_TAC_TOE: GameType = "tic-tac-toe"
ROCK_PAPER_SCISSORS: GameType = "rock-paper-scissors"
GAME_TYPES: Tuple[str, ...] = (TIC_TAC_TOE, ROCK_PAPER_SCISSORS)

DIFFICULTIES: Tuple[str, ...] = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY: Difficulty = "medium"

HUMAN_PLAYER_ID: PlayerId = "player1"
AI_PLAYER_ID: PlayerId = "ai"
DEFAULT_PLAYER_NAME = "Player"
DEFAULT_AI_NAME = "AI"

DRAW = "draw"

# Upper bound on Rock-Paper-Scissors rounds a caller may request.
MAX_ROUNDS_LIMIT = 9

GAME_DISPLAY_NAMES = {
    TIC_TAC_TOE: "Tic-Tac-Toe",
    ROCK_PAPER_SCISSORS: "Rock Paper Scissors",
}
