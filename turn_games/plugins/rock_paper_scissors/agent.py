"""Rock-Paper-Scissors choice selection for the automated player.

Only resolved rounds are used as evidence; the view handed to the agent has
the open round blanked anyway.
"""

from __future__ import annotations

import random
from collections import Counter
from typing import List, Optional

from turn_games.plugins.rock_paper_scissors.game import CHOICES, COUNTER, RockPaperScissorsRules
from turn_games.protocol.constants import AI_PLAYER_ID, DRAW
from turn_games.protocol.errors import AgentError
from turn_games.protocol.models import RPSMove, RPSState


STRATEGIES = {
    "easy": "random",
    "medium": "adaptive",
    "hard": "pattern",
}


class RockPaperScissorsAgent:
    def __init__(
        self,
        rules: RockPaperScissorsRules,
        player_id: str = AI_PLAYER_ID,
        rng: Optional[random.Random] = None,
    ):
        self.rules = rules
        self.player_id = player_id
        self.rng = rng or random.Random()

    def choose_move(self, view: RPSState, difficulty: str) -> RPSMove:
        if not self.rules.get_valid_moves(view, self.player_id):
            raise AgentError("No valid moves available")

        history = self.opponent_history(view)
        strategy = STRATEGIES.get(difficulty, "adaptive")
        if strategy == "random":
            choice = self._random_choice()
        elif strategy == "pattern":
            choice = self._pattern_choice(history)
        else:
            choice = self._adaptive_choice(history)
        return RPSMove(choice=choice)

    def opponent_history(self, view: RPSState) -> List[str]:
        """Opponent choices from resolved rounds, oldest first."""
        opponent_is_first = view.players[0].id != self.player_id
        history = []
        for resolved in view.rounds:
            if resolved.winner is None:
                continue
            choice = resolved.player1_choice if opponent_is_first else resolved.player2_choice
            if choice is not None:
                history.append(choice)
        return history

    def _random_choice(self) -> str:
        return self.rng.choice(CHOICES)

    def _adaptive_choice(self, history: List[str]) -> str:
        if not history:
            return self._random_choice()
        counts = Counter(history)
        most_frequent = max(CHOICES, key=lambda choice: counts[choice])
        return COUNTER[most_frequent]

    def _pattern_choice(self, history: List[str]) -> str:
        if len(history) < 2:
            return self._adaptive_choice(history)

        last, second_last = history[-1], history[-2]
        if len(history) >= 3:
            third_last = history[-3]
            # A-B-A: expect B next.
            if third_last == last and third_last != second_last:
                return COUNTER[second_last]
        if last == second_last:
            # A-A: expect a switch away from A.
            predicted = self.rng.choice([choice for choice in CHOICES if choice != last])
            return COUNTER[predicted]
        return self._adaptive_choice(history)

    def describe(self, view: RPSState) -> str:
        first, second = view.players[0], view.players[1]
        analysis = [
            f"Game Status: {view.status}",
            f"Current Round: {min(view.current_round + 1, view.max_rounds)}/{view.max_rounds}",
            f"Score: {first.name} {view.scores.get(first.id, 0)} - {view.scores.get(second.id, 0)} {second.name}",
        ]

        resolved = [(index, item) for index, item in enumerate(view.rounds) if item.winner is not None]
        if resolved:
            analysis.append("")
            analysis.append("Round History:")
            names = {player.id: player.name for player in view.players}
            for index, item in resolved:
                winner = "Draw" if item.winner == DRAW else names.get(item.winner, item.winner)
                analysis.append(
                    f"Round {index + 1}: {item.player1_choice or '?'} vs {item.player2_choice or '?'} - Winner: {winner}"
                )

        history = self.opponent_history(view)
        if history:
            counts = Counter(history)
            analysis.append("")
            analysis.append("Opponent Patterns:")
            for choice in CHOICES:
                share = counts[choice] / len(history) * 100
                analysis.append(f"{choice.capitalize()}: {counts[choice]} times ({share:.1f}%)")
        return "\n".join(analysis)
