#!/usr/bin/env python3
"""Train a Tic-Tac-Toe policy with Value Iteration, Policy Iteration or Q-Learning.

The agent plays X against a uniformly random O.  After training the policy
can be saved as JSON, evaluated over a number of games against a random
opponent, or played interactively on the terminal.

Solver keyword arguments can be read from a JSON file with ``--config``,
e.g. ``{"sweeps": 20}`` or ``{"learning_rate": 0.2, "epsilon": 0.05}``;
explicit command-line flags take precedence.
"""
from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path

from mdp.evaluation import evaluate_policy, play_game
from mdp.policy import PolicyPlayer
from mdp.policy_iteration import PolicyIterationSolver
from mdp.q_learning import QLearningSolver
from mdp.transitions import Rewards, TicTacToeMDP
from mdp.value_iteration import ValueIterationSolver
from simple_games.players import HumanPlayer, RandomPlayer
from simple_games.tic_tac_toe import TicTacToe

logger = logging.getLogger("ttt_mdp")

SOLVERS = {
    "value": ValueIterationSolver,
    "policy": PolicyIterationSolver,
    "qlearning": QLearningSolver,
}


def load_config(path: str | None) -> dict:
    if path is None:
        return {}
    with Path(path).open() as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return cfg


def build_solver(args: argparse.Namespace):
    rewards = Rewards(win=args.win, loss=args.loss, living=args.living, draw=args.draw)
    mdp = TicTacToeMDP(rewards=rewards)
    kwargs = load_config(args.config)
    if args.discount is not None:
        kwargs["discount"] = args.discount
    if args.solver == "value":
        ignored = [flag for flag, value in (("--seed", args.seed), ("--episodes", args.episodes))
                   if value is not None]
        if ignored:
            logger.warning("Ignoring %s for the value solver", ", ".join(ignored))
        return ValueIterationSolver(mdp, **kwargs)
    if args.seed is not None:
        kwargs["seed"] = args.seed
    if args.solver == "policy":
        if args.episodes is not None:
            logger.warning("Ignoring --episodes for the policy solver")
        return PolicyIterationSolver(mdp, **kwargs)
    if args.episodes is not None:
        kwargs["num_episodes"] = args.episodes
    return QLearningSolver(mdp=mdp, **kwargs)


def parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Solve Tic-Tac-Toe as an MDP.")
    p.add_argument("--solver", choices=sorted(SOLVERS), default="value")
    p.add_argument("--config", help="JSON file with solver keyword arguments")
    p.add_argument("--discount", type=float)
    p.add_argument("--win", type=float, default=10.0)
    p.add_argument("--loss", type=float, default=-10.0)
    p.add_argument("--living", type=float, default=0.0)
    p.add_argument("--draw", type=float, default=0.0)
    p.add_argument("--seed", type=int)
    p.add_argument("--episodes", type=int, help="Q-Learning episodes")
    p.add_argument("--save-policy", help="write the trained policy to this JSON file")
    p.add_argument("--games", type=int, default=0,
                   help="evaluate against a random opponent for this many games")
    p.add_argument("--play", action="store_true", help="play against the trained policy")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv=None) -> int:
    args = parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    solver = build_solver(args)
    logger.info("Training %s solver", args.solver)
    policy = solver.train()
    logger.info("Policy covers %d states", len(policy))

    if args.save_policy:
        policy.save(args.save_policy)
        logger.info("Saved policy to %s", args.save_policy)

    game = TicTacToe()
    if args.games:
        opponent = RandomPlayer(game, rng=random.Random(args.seed))
        stats = evaluate_policy(policy, opponent, args.games, game=game)
        logger.info("Against a random opponent: %s", stats)

    if args.play:
        outcome = play_game(game, PolicyPlayer(policy), HumanPlayer(game))
        print("Draw!" if outcome == "Draw" else f"{outcome} wins!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
