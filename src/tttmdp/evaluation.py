"""
Play a fixed policy against an opponent and tally the results.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

import numpy as np

from .environment import TTTEnvironment
from .game import X, other
from .mdp import RewardConfig
from .opponents import Opponent, RandomOpponent
from .policy import Policy


@dataclass
class MatchStats:
    games: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    total_return: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.games if self.games else 0.0

    @property
    def draw_rate(self) -> float:
        return self.draws / self.games if self.games else 0.0

    @property
    def loss_rate(self) -> float:
        return self.losses / self.games if self.games else 0.0

    @property
    def mean_return(self) -> float:
        return self.total_return / self.games if self.games else 0.0

    def as_dict(self) -> Dict[str, float]:
        d: Dict[str, float] = asdict(self)
        d.update(win_rate=self.win_rate, draw_rate=self.draw_rate,
                 loss_rate=self.loss_rate, mean_return=self.mean_return)
        return d


def play_policy(
    policy: Policy,
    games: int,
    rng: np.random.Generator,
    opponent: Optional[Opponent] = None,
    rewards: Optional[RewardConfig] = None,
    agent: int = X,
) -> MatchStats:
    """Play ``games`` games with ``policy`` as the agent. Missing entries raise UnknownStateError."""
    env = TTTEnvironment(opponent or RandomOpponent(), rng=rng, rewards=rewards, agent=agent)
    stats = MatchStats()
    for _ in range(games):
        state = env.current_state()
        while not state.is_terminal:
            result = env.execute_move(policy.action(state))
            if not result.is_applied:
                raise RuntimeError(f"Policy chose an illegal move: {result.reason}")
            stats.total_return += result.outcome.reward
            state = result.outcome.s_prime
        w = state.winner
        if w == agent:
            stats.wins += 1
        elif w == other(agent):
            stats.losses += 1
        else:
            stats.draws += 1
        stats.games += 1
        env.reset()
    return stats
