class MDPError(Exception):
    """Base class for solver and model errors."""


class InvalidStateError(MDPError, KeyError):
    """A state (or state-action pair) outside the enumerated state set."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class IllegalMoveError(MDPError, ValueError):
    """An action that is not legal in the given state, or a terminal state."""


class PolicyNotReadyError(MDPError, LookupError):
    """No action is assigned to the queried state."""


class ConvergenceError(MDPError, RuntimeError):
    """An iterative procedure hit its iteration cap."""


class InconsistentStateError(MDPError, RuntimeError):
    """A non-terminal state with no legal action."""
