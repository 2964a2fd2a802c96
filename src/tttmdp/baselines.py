"""
Baseline solvers to compare trained policies against.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .game import X, generate_all_valid_games, get_possible_moves
from .policy import Policy


class RandomSolver:
    """Fixes one uniformly random legal move per decision point."""

    def __init__(self, agent: int = X, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.agent = agent
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def train(self) -> Policy:
        actions = {}
        for state in generate_all_valid_games(self.agent):
            moves = get_possible_moves(state)
            if moves:
                actions[state] = moves[int(self.rng.integers(len(moves)))]
        return Policy(actions)
