import random
from functools import lru_cache
from typing import List, Optional, Tuple

from .tic_tac_toe import Move, TicTacToe, TicTacToeState


class PerfectTicTacToePlayer:
    """Minimax-based player that never loses."""

    def __init__(self, game: Optional[TicTacToe] = None, perspective_player: str = "O",
                 rng: Optional[random.Random] = None):
        self.game = game or TicTacToe()
        self.perspective = perspective_player
        self.rng = rng or random.Random()
        # States are hashable, so the cache can key on them directly.
        self._minimax = lru_cache(maxsize=None)(self._minimax_uncached)

    def _minimax_uncached(self, state: TicTacToeState) -> int:
        outcome = self.game.getGameOutcome(state)
        if outcome == self.perspective:
            return 1
        if outcome == "Draw":
            return 0
        if outcome is not None:
            return -1

        scores = [self._minimax(self.game.applyAction(state, a))
                  for a in self.game.getLegalActions(state)]
        if state.current_player == self.perspective:
            return max(scores)
        return min(scores)

    def bestActions(self, state: TicTacToeState) -> List[Move]:
        best_score = -float("inf")
        best_actions: List[Move] = []
        for action in self.game.getLegalActions(state):
            score = self._minimax(self.game.applyAction(state, action))
            if score > best_score:
                best_score = score
                best_actions = [action]
            elif score == best_score:
                best_actions.append(action)
        return best_actions

    def search(self, state: TicTacToeState) -> Move:
        return self.rng.choice(self.bestActions(state))

    def moveProbabilities(self, state: TicTacToeState) -> List[Tuple[Move, float]]:
        best = self.bestActions(state)
        return [(a, 1.0 / len(best)) for a in best]
