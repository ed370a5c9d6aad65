from typing import Dict, Hashable, Iterable, Iterator, List, Mapping, Tuple

from .errors import InvalidStateError


class ValueTable:
    """State -> value over a fixed set of states.

    Sweeps read from the table and write into a separate buffer; ``commit``
    installs the whole buffer at once.  Terminal states are pinned at 0.
    """

    def __init__(self, states: Iterable[Hashable], is_terminal, initial: float = 0.0):
        self._is_terminal = is_terminal
        self._values: Dict[Hashable, float] = {}
        for s in states:
            self._values[s] = 0.0 if is_terminal(s) else float(initial)

    def __getitem__(self, state) -> float:
        try:
            return self._values[state]
        except KeyError:
            raise InvalidStateError(f"No value for unknown state {state!r}") from None

    def __contains__(self, state) -> bool:
        return state in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._values)

    def states(self) -> List[Hashable]:
        return list(self._values)

    def items(self):
        return self._values.items()

    def snapshot(self) -> Dict[Hashable, float]:
        return dict(self._values)

    def commit(self, updates: Mapping[Hashable, float]) -> float:
        """Install ``updates`` and return the largest absolute change."""
        for state in updates:
            if state not in self._values:
                raise InvalidStateError(f"No value for unknown state {state!r}")
        max_change = 0.0
        for state, value in updates.items():
            if self._is_terminal(state):
                value = 0.0
            max_change = max(max_change, abs(value - self._values[state]))
            self._values[state] = value
        return max_change


class QTable:
    """(state, action) -> value over every legal pair of the non-terminal states."""

    def __init__(self, states: Iterable[Hashable], legal_actions, is_terminal, initial: float = 0.0):
        self._actions: Dict[Hashable, Tuple[Hashable, ...]] = {}
        self._values: Dict[Tuple[Hashable, Hashable], float] = {}
        for s in states:
            if is_terminal(s):
                continue
            actions = tuple(legal_actions(s))
            self._actions[s] = actions
            for a in actions:
                self._values[(s, a)] = float(initial)

    def _check(self, state, action) -> None:
        if (state, action) not in self._values:
            raise InvalidStateError(f"No Q-value for ({state!r}, {action!r})")

    def getQValue(self, state, action) -> float:
        self._check(state, action)
        return self._values[(state, action)]

    def setQValue(self, state, action, value: float) -> None:
        self._check(state, action)
        self._values[(state, action)] = value

    def actions(self, state) -> Tuple[Hashable, ...]:
        try:
            return self._actions[state]
        except KeyError:
            raise InvalidStateError(f"No Q-values for unknown state {state!r}") from None

    def states(self) -> List[Hashable]:
        return list(self._actions)

    def maxQValue(self, state, is_terminal: bool = False) -> float:
        """Largest Q-value in ``state``; 0 for a terminal state."""
        if is_terminal:
            return 0.0
        return max(self._values[(state, a)] for a in self.actions(state))

    def bestAction(self, state):
        """Highest-valued action, first in enumeration order on ties."""
        best_action, best_value = None, -float("inf")
        for a in self.actions(state):
            value = self._values[(state, a)]
            if value > best_value:
                best_action, best_value = a, value
        return best_action

    def __contains__(self, pair) -> bool:
        return pair in self._values

    def __len__(self) -> int:
        return len(self._values)
