import random
from typing import List, Optional, Tuple

from .tic_tac_toe import Move, TicTacToe, TicTacToeState


class RandomPlayer:
    """Picks uniformly among the legal moves."""

    def __init__(self, game: Optional[TicTacToe] = None, rng: Optional[random.Random] = None):
        self.game = game or TicTacToe()
        self.rng = rng or random.Random()

    def search(self, state: TicTacToeState) -> Move:
        actions = self.game.getLegalActions(state)
        if not actions:
            raise ValueError(f"No legal moves in terminal state {state!r}")
        return self.rng.choice(actions)

    def moveProbabilities(self, state: TicTacToeState) -> List[Tuple[Move, float]]:
        actions = self.game.getLegalActions(state)
        return [(a, 1.0 / len(actions)) for a in actions]


class HumanPlayer:
    """Reads moves from the terminal as ``row col`` (0-based)."""

    def __init__(self, game: Optional[TicTacToe] = None, input_func=input):
        self.game = game or TicTacToe()
        self.input_func = input_func

    def search(self, state: TicTacToeState) -> Move:
        legal = self.game.getLegalActions(state)
        while True:
            print(state)
            raw = self.input_func(f"{state.current_player} to move, enter 'row col': ")
            try:
                r, c = (int(tok) for tok in raw.replace(",", " ").split())
            except ValueError:
                print("Please enter two numbers, e.g. '1 2'.")
                continue
            if (r, c) in legal:
                return r, c
            print(f"({r}, {c}) is not a legal move.")
