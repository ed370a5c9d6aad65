import json
from ast import literal_eval
from typing import Dict, Hashable, List, Optional, Tuple

from simple_games.tic_tac_toe import TicTacToeState

from .errors import PolicyNotReadyError


class Policy:
    """Mapping from non-terminal state to the chosen action."""

    def __init__(self, mapping: Optional[Dict[Hashable, Hashable]] = None):
        self._policy: Dict[Hashable, Hashable] = dict(mapping or {})

    def getAction(self, state):
        try:
            return self._policy[state]
        except KeyError:
            raise PolicyNotReadyError(f"No action assigned to state {state!r}") from None

    def setAction(self, state, action) -> None:
        self._policy[state] = action

    def items(self):
        return self._policy.items()

    def __contains__(self, state) -> bool:
        return state in self._policy

    def __len__(self) -> int:
        return len(self._policy)

    def __eq__(self, other):
        if not isinstance(other, Policy):
            return NotImplemented
        return self._policy == other._policy

    def __repr__(self):
        return f"Policy({len(self._policy)} states)"

    # -----------------------------------------------------------------
    # Persistence ------------------------------------------------------
    # -----------------------------------------------------------------
    def save(self, path: str) -> None:
        """Write a Tic-Tac-Toe policy as JSON keyed by ``repr(state.key())``."""
        with open(path, "w") as f:
            json.dump({repr(s.key()): list(a) for s, a in self._policy.items()}, f)

    @classmethod
    def load(cls, path: str) -> "Policy":
        with open(path, "r") as f:
            raw = json.load(f)
        mapping = {}
        for k, v in raw.items():
            board, player = literal_eval(k)
            mapping[TicTacToeState(board, player)] = tuple(v)
        return cls(mapping)


class PolicyPlayer:
    """Plays a fixed policy; deterministic, so its reply distribution has one entry."""

    def __init__(self, policy: Policy):
        self.policy = policy

    def search(self, state):
        return self.policy.getAction(state)

    def moveProbabilities(self, state) -> List[Tuple[Hashable, float]]:
        return [(self.policy.getAction(state), 1.0)]
