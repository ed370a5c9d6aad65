from collections import deque
from dataclasses import dataclass
from typing import Dict, Hashable

import numpy as np

from simple_games.tic_tac_toe import TicTacToe

from .policy import Policy, PolicyPlayer


@dataclass
class MatchStats:
    wins: int = 0
    draws: int = 0
    losses: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.draws + self.losses

    def __str__(self):
        return f"{self.wins} wins, {self.draws} draws, {self.losses} losses"


def play_game(game: TicTacToe, player_x, player_o, first_player: str = "X") -> str:
    """Play one game between two ``search(state)`` players; return the outcome."""
    state = game.getInitialState(first_player)
    while not game.isTerminal(state):
        if game.getCurrentPlayer(state) == "X":
            action = player_x.search(state)
        else:
            action = player_o.search(state)
        state = game.applyAction(state, action)
    return game.getGameOutcome(state)


def evaluate_policy(policy: Policy, opponent, games: int, agent: str = "X",
                    agent_first: bool = True, game: TicTacToe = None) -> MatchStats:
    """Play ``games`` games of ``policy`` against ``opponent`` and count results."""
    game = game or TicTacToe()
    me = PolicyPlayer(policy)
    other = game.getOpponent(agent)
    first = agent if agent_first else other
    stats = MatchStats()
    for _ in range(games):
        if agent == "X":
            outcome = play_game(game, me, opponent, first)
        else:
            outcome = play_game(game, opponent, me, first)
        if outcome == agent:
            stats.wins += 1
        elif outcome == "Draw":
            stats.draws += 1
        else:
            stats.losses += 1
    return stats


def exact_policy_values(mdp, policy: Policy, discount: float, root) -> Dict[Hashable, float]:
    """Exact values of the states reachable from ``root`` when following ``policy``.

    Builds the transition matrix P and expected reward vector R of the
    reachable non-terminal states and solves (I - gamma P) V = R.
    Terminal states get value 0.
    """
    order = []
    index: Dict[Hashable, int] = {}
    terminals = set()
    queue = deque([root])
    seen = {root}
    while queue:
        state = queue.popleft()
        if mdp.isTerminal(state):
            terminals.add(state)
            continue
        index[state] = len(order)
        order.append(state)
        for t in mdp.getTransitions(state, policy.getAction(state)):
            nxt = t.outcome.next_state
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)

    n = len(order)
    P = np.zeros((n, n))
    R = np.zeros(n)
    for i, state in enumerate(order):
        for t in mdp.getTransitions(state, policy.getAction(state)):
            R[i] += t.prob * t.outcome.reward
            j = index.get(t.outcome.next_state)
            if j is not None:
                P[i, j] += t.prob

    V = np.linalg.solve(np.eye(n) - discount * P, R) if n else np.zeros(0)
    values = {state: float(V[i]) for i, state in enumerate(order)}
    values.update({state: 0.0 for state in terminals})
    return values
