"""
Opponent strategies used by the environment to answer the agent's moves.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

import numpy as np

from .errors import IllegalActionError
from .game import Move, State, get_possible_moves


class Opponent(Protocol):
    def choose(self, state: State, rng: np.random.Generator) -> Move:
        ...


class RandomOpponent:
    """Uniform over legal replies; the opponent the MDP model assumes."""

    def choose(self, state: State, rng: np.random.Generator) -> Move:
        moves = get_possible_moves(state)
        if not moves:
            raise IllegalActionError(f"Opponent asked to move in terminal state {state}")
        return moves[int(rng.integers(len(moves)))]

    def __repr__(self) -> str:
        return "RandomOpponent()"


class FixedOpponent:
    """Deterministic: plays the first free cell of a preference order."""

    def __init__(self, preference: Optional[Sequence[int]] = None):
        self.preference = tuple(preference) if preference is not None else tuple(range(9))
        if sorted(self.preference) != list(range(9)):
            raise ValueError(f"Preference must be a permutation of 0..8, got {self.preference}")

    def choose(self, state: State, rng: np.random.Generator) -> Move:
        for cell in self.preference:
            mv = Move(cell, state.to_move)
            if state.is_legal(mv):
                return mv
        raise IllegalActionError(f"Opponent asked to move in terminal state {state}")

    def __repr__(self) -> str:
        return f"FixedOpponent(preference={list(self.preference)})"
