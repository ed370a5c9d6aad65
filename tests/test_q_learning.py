import random
import unittest

from mdp.environment import TicTacToeEnvironment
from mdp.evaluation import evaluate_policy, exact_policy_values
from mdp.q_learning import QLearningSolver
from mdp.transitions import Outcome, TicTacToeMDP
from simple_games.perfect_tic_tac_toe import PerfectTicTacToePlayer
from simple_games.players import RandomPlayer
from simple_games.tic_tac_toe import TicTacToeState
from synthetic_mdp import TwoStateMDP


class StuckEnvironment:
    """Reports a live game while sitting in a terminal state."""

    def isTerminal(self):
        return False

    def getCurrentState(self):
        return "T"

    def step(self, action):
        raise AssertionError("step should not be called")

    def reset(self):
        return "T"


class TestQLearningUpdate(unittest.TestCase):
    def setUp(self):
        self.solver = QLearningSolver(StuckEnvironment(), mdp=TwoStateMDP(),
                                      learning_rate=0.5, discount=0.9, seed=0)

    def test_td_update(self):
        self.solver.qTable.setQValue("B", "finish", 4.0)
        self.assertAlmostEqual(self.solver.update(Outcome("A", "go", 0.0, "B")), 1.8)
        self.assertAlmostEqual(self.solver.qTable.getQValue("A", "go"), 1.8)

    def test_terminal_successor_contributes_nothing(self):
        self.solver.qTable.setQValue("B", "finish", 4.0)
        self.assertAlmostEqual(self.solver.update(Outcome("B", "finish", 10.0, "T")), 7.0)

    def test_terminal_state_inside_episode_is_skipped(self):
        self.assertEqual(self.solver.run_episode(), 0.0)

    def test_greedy_when_epsilon_is_zero(self):
        self.solver.epsilon = 0.0
        self.solver.qTable.setQValue("A", "go", 2.0)
        for _ in range(10):
            self.assertEqual(self.solver.pickEpsilonGreedyMove("A"), "go")

    def test_bad_parameters(self):
        with self.assertRaises(ValueError):
            QLearningSolver(StuckEnvironment(), mdp=TwoStateMDP(), learning_rate=1.5)
        with self.assertRaises(ValueError):
            QLearningSolver(StuckEnvironment(), mdp=TwoStateMDP(), epsilon=-0.1)


class TestQLearningTicTacToe(unittest.TestCase):
    def test_seeded_runs_are_reproducible(self):
        a = QLearningSolver(num_episodes=300, seed=9)
        b = QLearningSolver(num_episodes=300, seed=9)
        self.assertEqual(a.train(), b.train())
        root = TicTacToeState.empty("X")
        for action in a.qTable.actions(root):
            self.assertEqual(a.qTable.getQValue(root, action), b.qTable.getQValue(root, action))

    def test_policy_covers_q_table(self):
        solver = QLearningSolver(num_episodes=50, seed=0)
        policy = solver.train()
        self.assertEqual(len(policy), len(solver.qTable.states()))
        self.assertEqual(solver.episodes_done, 50)
        # the environment is left ready for another episode
        self.assertFalse(solver.env.isTerminal())

    def test_learns_winning_move(self):
        start = TicTacToeState.fromString("--- OO- -XX", "X")
        mdp = TicTacToeMDP()
        env = TicTacToeEnvironment(mdp=mdp, start_state=start, seed=2)
        solver = QLearningSolver(env, mdp=mdp, num_episodes=5000, seed=2)
        policy = solver.train()
        self.assertEqual(policy.getAction(start), (2, 0))

    def test_default_environment_uses_the_given_model(self):
        mdp = TicTacToeMDP(opponent=PerfectTicTacToePlayer(perspective_player="O"))
        solver = QLearningSolver(mdp=mdp, num_episodes=0, seed=0)
        self.assertIs(solver.env.mdp, mdp)
        self.assertIs(solver.env.opponent, mdp.opponent)


class TestQLearningLongRun(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        solver = QLearningSolver(learning_rate=0.1, epsilon=0.1, num_episodes=50000, seed=0)
        cls.policy = solver.train()

    def test_beats_random_opponent(self):
        opponent = RandomPlayer(rng=random.Random(1))
        stats = evaluate_policy(self.policy, opponent, games=500)
        self.assertLess(stats.losses, 50, str(stats))
        self.assertGreater(stats.wins, 300, str(stats))

    def test_never_loses_to_perfect_opponent(self):
        mdp = TicTacToeMDP(opponent=PerfectTicTacToePlayer(perspective_player="O"))
        values = exact_policy_values(mdp, self.policy, 0.9, TicTacToeState.empty("X"))
        losses = [s for s in values if s.isTerminal() and s.outcome == "O"]
        self.assertEqual(losses, [])
        self.assertGreaterEqual(values[TicTacToeState.empty("X")], 0.0)


if __name__ == "__main__":
    unittest.main()
