"""Policy Iteration: evaluate the current policy, improve it greedily, repeat."""
import logging
import random
from typing import Dict, Hashable, Optional

from .errors import ConvergenceError, InconsistentStateError
from .policy import Policy
from .tables import ValueTable
from .value_iteration import check_discount, expected_return, greedy_action

logger = logging.getLogger(__name__)

TIE_TOLERANCE = 1e-9


class PolicyIterationSolver:

    def __init__(self, mdp, *, discount: float = 0.9, delta: float = 1e-6,
                 seed: Optional[int] = None, max_iterations: int = 100,
                 max_evaluation_sweeps: int = 10000):
        check_discount(discount)
        if delta < 0:
            raise ValueError(f"Convergence threshold must be non-negative, got: {delta}")
        if max_iterations < 1 or max_evaluation_sweeps < 1:
            raise ValueError("Iteration caps must be positive")

        self.mdp = mdp
        self.discount = discount
        self.delta = delta
        self.max_iterations = max_iterations
        self.max_evaluation_sweeps = max_evaluation_sweeps
        self.rng = random.Random(seed)
        self.policyValues = ValueTable(mdp.getStates(), mdp.isTerminal)
        self.curPolicy: Dict[Hashable, Hashable] = {}
        self.iterations = 0
        self.policy = Policy()
        self.initRandomPolicy()

    def initRandomPolicy(self) -> None:
        for state in self.policyValues.states():
            if self.mdp.isTerminal(state):
                continue
            actions = self.mdp.getLegalActions(state)
            if not actions:
                raise InconsistentStateError(f"Non-terminal state {state!r} has no legal actions")
            self.curPolicy[state] = self.rng.choice(actions)

    def evaluatePolicy(self) -> int:
        """Sweep until no value moves by more than ``delta``; return the sweep count."""
        for sweep in range(1, self.max_evaluation_sweeps + 1):
            updated = {}
            for state, action in self.curPolicy.items():
                updated[state] = expected_return(self.mdp, state, action,
                                                 self.policyValues, self.discount)
            change = self.policyValues.commit(updated)
            if change <= self.delta:
                logger.debug("Policy evaluation converged after %d sweeps", sweep)
                return sweep
        raise ConvergenceError(
            f"Policy evaluation did not converge within {self.max_evaluation_sweeps} sweeps")

    def improvePolicy(self) -> bool:
        """Greedy one-step improvement; returns True if any action changed."""
        changed = 0
        for state, current in self.curPolicy.items():
            best, best_value = greedy_action(self.mdp, state, self.policyValues, self.discount)
            if best == current:
                continue
            current_value = expected_return(self.mdp, state, current,
                                            self.policyValues, self.discount)
            if best_value > current_value + TIE_TOLERANCE:
                self.curPolicy[state] = best
                changed += 1
        logger.debug("Policy improvement changed %d states", changed)
        return changed > 0

    def train(self) -> Policy:
        while True:
            if self.iterations >= self.max_iterations:
                raise ConvergenceError(
                    f"Policy iteration did not stabilise within {self.max_iterations} passes")
            sweeps = self.evaluatePolicy()
            self.iterations += 1
            stable = not self.improvePolicy()
            logger.info("Policy iteration pass %d: %d evaluation sweeps%s",
                        self.iterations, sweeps, ", policy stable" if stable else "")
            if stable:
                break
        self.policy = Policy(self.curPolicy)
        return self.policy
