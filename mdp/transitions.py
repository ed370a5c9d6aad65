"""Tic-Tac-Toe as an MDP seen from one player's side of the board.

The agent's move and the opponent's reply are folded into a single
transition: from a state where the agent is to move, an action leads to a
distribution over the states where the agent moves again (or the game is
over).  The opponent is therefore part of the environment dynamics.
"""
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Tuple

from simple_games.players import RandomPlayer
from simple_games.tic_tac_toe import Move, TicTacToe, TicTacToeState

from .errors import IllegalMoveError, InvalidStateError


@dataclass(frozen=True)
class Rewards:
    win: float = 10.0
    loss: float = -10.0
    living: float = 0.0
    draw: float = 0.0


@dataclass(frozen=True, slots=True)
class Outcome:
    """One ``(s, a, r, s')`` sample."""

    state: Hashable
    action: Hashable
    reward: float
    next_state: Hashable


@dataclass(frozen=True, slots=True)
class TransitionProb:
    prob: float
    outcome: Outcome


class TicTacToeMDP:
    """Transition model over the states where ``agent`` is to move.

    ``opponent`` must provide ``moveProbabilities(state)`` returning
    ``[(action, prob), ...]``.  The default is a uniformly random opponent.
    """

    def __init__(self, game: Optional[TicTacToe] = None, rewards: Optional[Rewards] = None,
                 opponent=None, agent: str = "X"):
        self.game = game or TicTacToe()
        self.rewards = rewards or Rewards()
        self.agent = agent
        self.opponent = opponent or RandomPlayer(self.game)
        self._states: List[TicTacToeState] = self.game.generateAllValidStates(agent)
        self._state_set = frozenset(self._states)
        self._cache: Dict[Tuple[TicTacToeState, Move], Tuple[TransitionProb, ...]] = {}

    def getStates(self) -> List[TicTacToeState]:
        return list(self._states)

    def isValidState(self, state) -> bool:
        return state in self._state_set

    def isTerminal(self, state: TicTacToeState) -> bool:
        return self.game.isTerminal(state)

    def getLegalActions(self, state: TicTacToeState) -> List[Move]:
        return self.game.getLegalActions(state)

    def getReward(self, state: TicTacToeState) -> float:
        """Reward for arriving in ``state``."""
        outcome = self.game.getGameOutcome(state)
        if outcome is None:
            return self.rewards.living
        if outcome == "Draw":
            return self.rewards.draw
        if outcome == self.agent:
            return self.rewards.win
        return self.rewards.loss

    def getTransitions(self, state: TicTacToeState, action: Move) -> Tuple[TransitionProb, ...]:
        cached = self._cache.get((state, action))
        if cached is not None:
            return cached

        if state not in self._state_set:
            raise InvalidStateError(f"Unknown state {state!r}")
        if self.game.isTerminal(state):
            raise IllegalMoveError(f"No transitions from terminal state {state!r}")
        if not self.game.isLegalAction(state, action):
            raise IllegalMoveError(f"Illegal action {action!r} in state {state!r}")

        after = self.game.applyAction(state, action)
        if self.game.isTerminal(after):
            transitions = (TransitionProb(1.0, Outcome(state, action, self.getReward(after), after)),)
        else:
            result = []
            for reply, prob in self.opponent.moveProbabilities(after):
                if prob <= 0.0:
                    continue
                next_state = self.game.applyAction(after, reply)
                result.append(TransitionProb(prob, Outcome(state, action, self.getReward(next_state), next_state)))
            transitions = tuple(result)

        self._cache[(state, action)] = transitions
        return transitions
