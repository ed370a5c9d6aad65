from typing import Dict, List, Optional, Tuple

Move = Tuple[int, int]
Board = Tuple[Tuple[Optional[str], ...], ...]

WIN_LINES: List[List[Move]] = (
    [[(r, c) for c in range(3)] for r in range(3)]
    + [[(r, c) for r in range(3)] for c in range(3)]
    + [[(i, i) for i in range(3)], [(i, 2 - i) for i in range(3)]]
)


def _outcome(board: Board) -> Optional[str]:
    for line in WIN_LINES:
        r0, c0 = line[0]
        first = board[r0][c0]
        if first is None:
            continue
        if all(board[r][c] == first for r, c in line[1:]):
            return first
    if all(cell is not None for row in board for cell in row):
        return "Draw"
    return None


class TicTacToeState:
    """Immutable board plus the player to move.

    Two states with the same cells and the same player to move compare
    equal and hash alike, so they can key value and Q tables.  The hash and
    the game outcome are computed once at construction.
    """

    __slots__ = ("board", "current_player", "outcome", "_hash")

    def __init__(self, board, current_player: str = "X"):
        board = tuple(tuple(row) for row in board)
        if len(board) != 3 or any(len(row) != 3 for row in board):
            raise ValueError(f"Expected a 3x3 board, got {board!r}")
        object.__setattr__(self, "board", board)
        object.__setattr__(self, "current_player", current_player)
        object.__setattr__(self, "outcome", _outcome(board))
        object.__setattr__(self, "_hash", hash((board, current_player)))

    def __setattr__(self, name, value):
        raise AttributeError("TicTacToeState is immutable")

    def __hash__(self):
        return self._hash

    def __eq__(self, other):
        if not isinstance(other, TicTacToeState):
            return NotImplemented
        return self.current_player == other.current_player and self.board == other.board

    def __repr__(self):
        return f"TicTacToeState({self.board!r}, {self.current_player!r})"

    def __str__(self):
        symbols = [[cell if cell is not None else " " for cell in row] for row in self.board]
        rows = [" {} | {} | {} ".format(*row) for row in symbols]
        return "\n---+---+---\n".join(rows)

    @classmethod
    def empty(cls, first_player: str = "X") -> "TicTacToeState":
        return cls(((None,) * 3,) * 3, first_player)

    @classmethod
    def fromString(cls, text: str, current_player: str = "X") -> "TicTacToeState":
        """Build a state from nine characters, ``-`` or ``.`` for empty cells."""
        cells = [ch for ch in text if not ch.isspace()]
        if len(cells) != 9:
            raise ValueError(f"Expected 9 cells, got {len(cells)} in {text!r}")
        values = [None if ch in "-." else ch.upper() for ch in cells]
        return cls([values[0:3], values[3:6], values[6:9]], current_player)

    def key(self):
        return self.board, self.current_player

    def isTerminal(self) -> bool:
        return self.outcome is not None


class TicTacToe:
    """Tic-Tac-Toe rules over immutable :class:`TicTacToeState` values."""

    def getInitialState(self, first_player: str = "X") -> TicTacToeState:
        return TicTacToeState.empty(first_player)

    def getCurrentPlayer(self, state: TicTacToeState) -> str:
        return state.current_player

    def getOpponent(self, player: str) -> str:
        return "O" if player == "X" else "X"

    def getLegalActions(self, state: TicTacToeState) -> List[Move]:
        if state.isTerminal():
            return []
        return [(r, c) for r in range(3) for c in range(3) if state.board[r][c] is None]

    def isLegalAction(self, state: TicTacToeState, action) -> bool:
        if state.isTerminal() or not isinstance(action, tuple) or len(action) != 2:
            return False
        r, c = action
        return 0 <= r < 3 and 0 <= c < 3 and state.board[r][c] is None

    def applyAction(self, state: TicTacToeState, action: Move) -> TicTacToeState:
        if not self.isLegalAction(state, action):
            raise ValueError(f"Illegal action {action!r} in state {state!r}")
        r, c = action
        rows = [list(row) for row in state.board]
        rows[r][c] = state.current_player
        return TicTacToeState(rows, self.getOpponent(state.current_player))

    def getGameOutcome(self, state: TicTacToeState) -> Optional[str]:
        return state.outcome

    def isTerminal(self, state: TicTacToeState) -> bool:
        return state.isTerminal()

    def generateAllValidStates(self, player: str = "X") -> List[TicTacToeState]:
        """Every reachable state where ``player`` moves next or the game is over.

        Games opened by either side are included.  The order is a depth-first
        walk with actions in row-major order, so it is stable across runs.
        """
        seen: Dict[TicTacToeState, None] = {}
        found: Dict[TicTacToeState, None] = {}
        stack = [self.getInitialState(self.getOpponent(player)), self.getInitialState(player)]
        while stack:
            state = stack.pop()
            if state in seen:
                continue
            seen[state] = None
            if state.isTerminal() or state.current_player == player:
                found[state] = None
            for action in reversed(self.getLegalActions(state)):
                stack.append(self.applyAction(state, action))
        return list(found)
