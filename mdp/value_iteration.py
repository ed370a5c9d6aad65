"""Value Iteration.

Each sweep applies the Bellman optimality backup

    V(s) <- max_a  sum_{s'} P(s'|s,a) [R(s,a,s') + gamma V(s')]

to every non-terminal state, reading only the previous sweep's values.
A policy is then read off with one step of expectimax.
"""
import logging
from typing import Hashable, Optional, Tuple

from .errors import InconsistentStateError
from .policy import Policy
from .tables import ValueTable

logger = logging.getLogger(__name__)


def expected_return(mdp, state, action, values: ValueTable, discount: float) -> float:
    """Expected one-step return of ``action`` in ``state`` under ``values``."""
    total = 0.0
    for t in mdp.getTransitions(state, action):
        total += t.prob * (t.outcome.reward + discount * values[t.outcome.next_state])
    return total


def greedy_action(mdp, state, values: ValueTable, discount: float) -> Tuple[Hashable, float]:
    """Best action and its expected return; ties go to the first legal action."""
    best_action, best_value = None, -float("inf")
    for action in mdp.getLegalActions(state):
        q = expected_return(mdp, state, action, values, discount)
        if q > best_value:
            best_action, best_value = action, q
    if best_action is None:
        raise InconsistentStateError(f"Non-terminal state {state!r} has no legal actions")
    return best_action, best_value


def check_discount(discount: float) -> None:
    if not 0.0 <= discount <= 1.0:
        raise ValueError(f"Discount factor must be in [0, 1], got: {discount}")


class ValueIterationSolver:
    """Synchronous value iteration over every enumerated state.

    Runs ``sweeps`` sweeps; with ``theta`` set it stops early once no value
    moves by more than ``theta`` in a sweep.
    """

    def __init__(self, mdp, *, discount: float = 0.9, sweeps: int = 10,
                 theta: Optional[float] = None):
        check_discount(discount)
        if sweeps < 0:
            raise ValueError(f"Number of sweeps must be non-negative, got: {sweeps}")
        if theta is not None and theta < 0:
            raise ValueError(f"Convergence threshold must be non-negative, got: {theta}")

        self.mdp = mdp
        self.discount = discount
        self.sweeps = sweeps
        self.theta = theta
        self.values = ValueTable(mdp.getStates(), mdp.isTerminal)
        self.sweeps_done = 0
        self.last_delta = float("inf")
        self.policy = Policy()

    def q_value(self, state, action) -> float:
        return expected_return(self.mdp, state, action, self.values, self.discount)

    def iterate(self) -> int:
        """Run the sweeps; return how many were performed."""
        for _ in range(self.sweeps):
            updated = {}
            for state in self.values.states():
                if self.mdp.isTerminal(state):
                    continue
                _, updated[state] = greedy_action(self.mdp, state, self.values, self.discount)
            self.last_delta = self.values.commit(updated)
            self.sweeps_done += 1
            logger.debug("Sweep %d: max change %.6g", self.sweeps_done, self.last_delta)
            if self.theta is not None and self.last_delta <= self.theta:
                break
        logger.info("Value iteration: %d sweeps over %d states, last change %.6g",
                    self.sweeps_done, len(self.values), self.last_delta)
        return self.sweeps_done

    def extractPolicy(self) -> Policy:
        policy = Policy()
        for state in self.values.states():
            if self.mdp.isTerminal(state):
                continue
            action, _ = greedy_action(self.mdp, state, self.values, self.discount)
            policy.setAction(state, action)
        return policy

    def train(self) -> Policy:
        self.iterate()
        self.policy = self.extractPolicy()
        return self.policy
