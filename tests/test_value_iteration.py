import random
import unittest

import numpy as np

from mdp.errors import InconsistentStateError
from mdp.evaluation import evaluate_policy, exact_policy_values
from mdp.transitions import Rewards, TicTacToeMDP
from mdp.value_iteration import ValueIterationSolver
from simple_games.perfect_tic_tac_toe import PerfectTicTacToePlayer
from simple_games.tic_tac_toe import TicTacToeState
from synthetic_mdp import TwoStateMDP

CORNERS_AND_CENTRE = {(0, 0), (0, 2), (2, 0), (2, 2), (1, 1)}


class TestValueIterationSynthetic(unittest.TestCase):
    def test_converges_to_analytic_optimum(self):
        # optimal policy: stay in A, finish in B
        P = np.array([[1.0, 0.0], [0.5, 0.0]])
        R = np.array([1.0, 5.0])
        v_a, v_b = np.linalg.solve(np.eye(2) - 0.9 * P, R)

        solver = ValueIterationSolver(TwoStateMDP(), discount=0.9, sweeps=1000, theta=1e-10)
        policy = solver.train()
        self.assertAlmostEqual(solver.values["A"], v_a, delta=1e-6)
        self.assertAlmostEqual(solver.values["B"], v_b, delta=1e-6)
        self.assertAlmostEqual(solver.values["A"], 10.0, delta=1e-6)
        self.assertEqual(solver.values["T"], 0.0)
        self.assertEqual(policy.getAction("A"), "stay")
        self.assertLess(solver.sweeps_done, 1000)

    def test_sweeps_are_synchronous(self):
        solver = ValueIterationSolver(TwoStateMDP(), discount=0.9, sweeps=1)
        solver.iterate()
        # B reads the old V(A) = 0, not the freshly computed V(A) = 1
        self.assertEqual(solver.values["A"], 1.0)
        self.assertEqual(solver.values["B"], 5.0)

    def test_fixed_sweep_count(self):
        solver = ValueIterationSolver(TwoStateMDP(), discount=0.9, sweeps=3)
        self.assertEqual(solver.iterate(), 3)

    def test_state_without_actions_fails(self):
        class Broken(TwoStateMDP):
            def getLegalActions(self, state):
                return [] if state == "B" else super().getLegalActions(state)

        with self.assertRaises(InconsistentStateError):
            ValueIterationSolver(Broken(), sweeps=1).iterate()

    def test_bad_parameters(self):
        with self.assertRaises(ValueError):
            ValueIterationSolver(TwoStateMDP(), discount=1.5)
        with self.assertRaises(ValueError):
            ValueIterationSolver(TwoStateMDP(), sweeps=-1)


class TestValueIterationTicTacToe(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.mdp = TicTacToeMDP(rewards=Rewards(win=10, loss=-10, living=-0.1, draw=0))
        cls.solver = ValueIterationSolver(cls.mdp, discount=0.9, sweeps=10)
        cls.policy = cls.solver.train()

    def test_policy_covers_all_non_terminal_states(self):
        non_terminal = [s for s in self.mdp.getStates() if not s.isTerminal()]
        self.assertEqual(len(self.policy), len(non_terminal))
        for s in non_terminal:
            self.assertIn(self.policy.getAction(s), self.mdp.getLegalActions(s))

    def test_terminal_values_are_zero(self):
        for state, value in self.solver.values.items():
            if state.isTerminal():
                self.assertEqual(value, 0.0)

    def test_extraction_is_idempotent(self):
        first = self.solver.extractPolicy()
        second = self.solver.extractPolicy()
        self.assertEqual(first, second)
        self.assertEqual(first, self.policy)

    def test_first_move_is_corner_or_centre(self):
        action = self.policy.getAction(TicTacToeState.empty("X"))
        self.assertIn(action, CORNERS_AND_CENTRE)

    def test_takes_immediate_win(self):
        state = TicTacToeState.fromString("--- OO- -XX", "X")
        self.assertEqual(self.policy.getAction(state), (2, 0))

    def test_value_table_matches_policy_value(self):
        root = TicTacToeState.empty("X")
        exact = exact_policy_values(self.mdp, self.policy, 0.9, root)
        self.assertAlmostEqual(exact[root], self.solver.values[root], places=6)

    def test_q_value_of_winning_move(self):
        state = TicTacToeState.fromString("--- OO- -XX", "X")
        self.assertEqual(self.solver.q_value(state, (2, 0)), 10.0)


class TestValueIterationAgainstPerfectOpponent(unittest.TestCase):
    def test_never_loses(self):
        mdp = TicTacToeMDP(opponent=PerfectTicTacToePlayer(perspective_player="O"))
        policy = ValueIterationSolver(mdp, discount=0.9).train()
        for agent_first in (True, False):
            opponent = PerfectTicTacToePlayer(perspective_player="O", rng=random.Random(5))
            stats = evaluate_policy(policy, opponent, games=20, agent_first=agent_first)
            self.assertEqual(stats.losses, 0, f"lost with agent_first={agent_first}")


if __name__ == "__main__":
    unittest.main()
