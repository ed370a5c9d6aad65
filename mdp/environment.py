import random
from typing import Optional

from simple_games.tic_tac_toe import Move, TicTacToeState

from .errors import IllegalMoveError
from .transitions import Outcome, TicTacToeMDP


class TicTacToeEnvironment:
    """Step/reset interface that samples a :class:`TicTacToeMDP`.

    Each ``step`` draws one outcome of ``mdp.getTransitions(state, action)``
    by probability, so the agent's move and the opponent's reply come from
    the model's own opponent and rewards.

    ``agent_first`` chooses who opens after a reset; ``None`` draws it at
    random.  ``start_state`` (agent to move) replaces the empty board.
    """

    def __init__(self, opponent=None, mdp: Optional[TicTacToeMDP] = None,
                 agent_first: Optional[bool] = True,
                 start_state: Optional[TicTacToeState] = None,
                 seed: Optional[int] = None):
        if mdp is None:
            mdp = TicTacToeMDP(opponent=opponent)
        elif opponent is not None and opponent is not mdp.opponent:
            raise ValueError("opponent must be the MDP's opponent when both are given")
        self.rng = random.Random(seed)
        self.mdp = mdp
        self.game = mdp.game
        self.agent = mdp.agent
        self.opponent = mdp.opponent
        self.agent_first = agent_first
        if start_state is not None and not start_state.isTerminal() \
                and start_state.current_player != self.agent:
            raise ValueError(f"start_state must have {self.agent} to move, got {start_state!r}")
        self.start_state = start_state
        self.state = self.reset()

    def _opponent_move(self, state: TicTacToeState) -> Move:
        moves = self.opponent.moveProbabilities(state)
        [action] = self.rng.choices([a for a, _ in moves], weights=[p for _, p in moves])
        return action

    def reset(self) -> TicTacToeState:
        if self.start_state is not None:
            self.state = self.start_state
            return self.state

        agent_first = self.agent_first
        if agent_first is None:
            agent_first = self.rng.random() < 0.5
        if agent_first:
            self.state = self.game.getInitialState(self.agent)
        else:
            opening = self.game.getInitialState(self.game.getOpponent(self.agent))
            self.state = self.game.applyAction(opening, self._opponent_move(opening))
        return self.state

    def getCurrentState(self) -> TicTacToeState:
        return self.state

    def isTerminal(self) -> bool:
        return self.game.isTerminal(self.state)

    def step(self, action: Move) -> Outcome:
        state = self.state
        if self.game.isTerminal(state):
            raise IllegalMoveError(f"Game is already over in {state!r}")
        if not self.game.isLegalAction(state, action):
            raise IllegalMoveError(f"Illegal action {action!r} in state {state!r}")

        transitions = self.mdp.getTransitions(state, action)
        [chosen] = self.rng.choices(transitions, weights=[t.prob for t in transitions])
        self.state = chosen.outcome.next_state
        return chosen.outcome
