"""
Game basics: board representation, rules, legal moves and state enumeration.
Notes:
- A board is a tuple of 9 cells: 0=empty, 1=X, 2=O. X always starts.
- A State pairs the board with the player to move; both take part in equality.
- Moves are enumerated in ascending cell order. The solvers' tie-break relies on it.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from functools import cached_property
from typing import List, Tuple

EMPTY = 0
X = 1
O = 2

WIN_PATTERNS = [
    [0, 1, 2], [3, 4, 5], [6, 7, 8],
    [0, 3, 6], [1, 4, 7], [2, 5, 8],
    [0, 4, 8], [2, 4, 6]
]


def other(player: int) -> int:
    return O if player == X else X


def get_winner(board) -> int:
    for a, b, c in WIN_PATTERNS:
        v = board[a]
        if v != EMPTY and v == board[b] and v == board[c]:
            return v
    return 0


def is_draw(board) -> bool:
    return EMPTY not in board and get_winner(board) == 0


def is_valid_board(board) -> bool:
    x_count, o_count = board.count(X), board.count(O)
    if not (x_count == o_count or x_count == o_count + 1):
        return False
    w = get_winner(board)
    if w == X and x_count != o_count + 1:
        return False
    if w == O and x_count != o_count:
        return False
    x_lines = sum(1 for pat in WIN_PATTERNS if all(board[i] == X for i in pat))
    o_lines = sum(1 for pat in WIN_PATTERNS if all(board[i] == O for i in pat))
    return not (x_lines and o_lines)


@dataclass(frozen=True)
class Move:
    cell: int
    player: int

    def __str__(self) -> str:
        return f"{'X' if self.player == X else 'O'}@{self.cell}"


@dataclass(frozen=True)
class State:
    board: Tuple[int, ...]
    to_move: int

    @classmethod
    def initial(cls) -> "State":
        return cls(tuple([EMPTY] * 9), X)

    @property
    def key(self) -> str:
        return ''.join(str(cell) for cell in self.board)

    @cached_property
    def winner(self) -> int:
        return get_winner(self.board)

    @cached_property
    def is_terminal(self) -> bool:
        return self.winner != 0 or EMPTY not in self.board

    def is_legal(self, move: Move) -> bool:
        return (
            not self.is_terminal
            and move.player == self.to_move
            and 0 <= move.cell < 9
            and self.board[move.cell] == EMPTY
        )

    def apply(self, move: Move) -> "State":
        """Return the successor state. The caller checks legality."""
        lst = list(self.board)
        lst[move.cell] = move.player
        return State(tuple(lst), other(move.player))

    def __str__(self) -> str:
        marks = {EMPTY: '.', X: 'X', O: 'O'}
        rows = [''.join(marks[c] for c in self.board[i:i + 3]) for i in (0, 3, 6)]
        return '/'.join(rows)


def get_possible_moves(state: State) -> List[Move]:
    if state.is_terminal:
        return []
    return [Move(i, state.to_move) for i, v in enumerate(state.board) if v == EMPTY]


def is_terminal(state: State) -> bool:
    return state.is_terminal


def all_reachable_states() -> List[State]:
    """Breadth-first enumeration of every state reachable from the empty board."""
    start = State.initial()
    order: List[State] = []
    q = deque([start])
    seen = {start}
    while q:
        s = q.popleft()
        order.append(s)
        for mv in get_possible_moves(s):
            child = s.apply(mv)
            if child not in seen:
                seen.add(child)
                q.append(child)
    return order


def generate_all_valid_games(player: int) -> List[State]:
    """All reachable states where ``player`` is to move, plus every terminal state."""
    if player not in (X, O):
        raise ValueError(f"Unknown player marker: {player}")
    return [s for s in all_reachable_states() if s.is_terminal or s.to_move == player]


def parse_board(raw: str) -> State:
    """Parse a 9-character 0/1/2 board string into a reachable State."""
    raw = raw.strip()
    if len(raw) != 9 or any(c not in "012" for c in raw):
        raise ValueError("Invalid board string. Must be 9 chars of 0/1/2.")
    board = tuple(int(c) for c in raw)
    if not is_valid_board(board):
        raise ValueError(f"Board is not a valid reachable state: {raw}")
    to_move = X if board.count(X) == board.count(O) else O
    return State(board, to_move)
