"""Tabular Q-Learning against an environment.

The learner never looks at transition probabilities; it only sees the
``(s, a, r, s')`` samples returned by ``env.step`` and applies

    Q(s,a) <- (1 - alpha) Q(s,a) + alpha (r + gamma max_a' Q(s',a'))

with the max term taken as 0 when ``s'`` is terminal.
"""
import logging
import random
from typing import Optional

from .environment import TicTacToeEnvironment
from .policy import Policy
from .tables import QTable
from .transitions import TicTacToeMDP
from .value_iteration import check_discount

logger = logging.getLogger(__name__)


class QLearningSolver:

    def __init__(self, env=None, *, learning_rate: float = 0.1, epsilon: float = 0.1,
                 num_episodes: int = 50000, discount: float = 0.9,
                 seed: Optional[int] = None, mdp: Optional[TicTacToeMDP] = None,
                 log_every: int = 10000):
        check_discount(discount)
        if not 0.0 <= learning_rate <= 1.0:
            raise ValueError(f"Learning rate must be in [0, 1], got: {learning_rate}")
        if not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"Exploration rate must be in [0, 1], got: {epsilon}")
        if num_episodes < 0:
            raise ValueError(f"Number of episodes must be non-negative, got: {num_episodes}")

        self.alpha = learning_rate
        self.epsilon = epsilon
        self.num_episodes = num_episodes
        self.discount = discount
        self.log_every = log_every
        self.rng = random.Random(seed)

        if env is None:
            mdp = mdp or TicTacToeMDP()
            env = TicTacToeEnvironment(mdp=mdp, seed=self.rng.getrandbits(32))
        self.env = env
        self.mdp = mdp or env.mdp
        self.qTable = QTable(self.mdp.getStates(), self.mdp.getLegalActions, self.mdp.isTerminal)
        self.episodes_done = 0
        self.policy = Policy()

    def pickEpsilonGreedyMove(self, state):
        actions = self.qTable.actions(state)
        if self.rng.random() < self.epsilon:
            return self.rng.choice(actions)
        return self.qTable.bestAction(state)

    def update(self, outcome) -> float:
        """Apply the TD update for one sample and return the new Q-value."""
        current = self.qTable.getQValue(outcome.state, outcome.action)
        future = self.qTable.maxQValue(outcome.next_state,
                                       is_terminal=self.mdp.isTerminal(outcome.next_state))
        target = outcome.reward + self.discount * future
        new_value = (1 - self.alpha) * current + self.alpha * target
        self.qTable.setQValue(outcome.state, outcome.action, new_value)
        return new_value

    def run_episode(self) -> float:
        """Play one episode from the environment's current state; return its total reward."""
        total = 0.0
        while not self.env.isTerminal():
            state = self.env.getCurrentState()
            if self.mdp.isTerminal(state):
                break
            outcome = self.env.step(self.pickEpsilonGreedyMove(state))
            self.update(outcome)
            total += outcome.reward
        return total

    def train(self) -> Policy:
        returns = 0.0
        for i in range(1, self.num_episodes + 1):
            returns += self.run_episode()
            self.env.reset()
            self.episodes_done += 1
            if self.log_every and i % self.log_every == 0:
                logger.info("Episode %d/%d: mean return %.3f over last %d episodes",
                            i, self.num_episodes, returns / self.log_every, self.log_every)
                returns = 0.0
        self.policy = self.extractPolicy()
        return self.policy

    def extractPolicy(self) -> Policy:
        policy = Policy()
        for state in self.qTable.states():
            policy.setAction(state, self.qTable.bestAction(state))
        return policy
