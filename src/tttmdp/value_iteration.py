"""
Value iteration over the agent's decision points.

Update order: values are updated in place, state by state, in enumeration
order (Gauss-Seidel). A state later in a round therefore reads values that
were already refreshed earlier in the same round; this is not synchronous
value iteration. On this finite-depth game both reach the same fixed point,
in at most as many rounds as the agent has moves (5 for X).

Termination is a fixed number of rounds, not a convergence threshold.
Terminal states are never updated and keep their initial 0.0.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from .game import X, generate_all_valid_games, get_possible_moves
from .mdp import TTTMDP, RewardConfig
from .policy import Policy, expected_return, policy_from_values
from .tables import ValueTable


@dataclass
class ValueIterationConfig:
    discount: float = 0.9
    iterations: int = 10
    rewards: RewardConfig = field(default_factory=RewardConfig)
    agent: int = X

    def __post_init__(self):
        if not 0.0 <= self.discount <= 1.0:
            raise ValueError(f"discount must be in [0, 1]: {self.discount}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0: {self.iterations}")


class ValueIterationSolver:
    def __init__(self, config: ValueIterationConfig | None = None, mdp: TTTMDP | None = None):
        self.config = config or ValueIterationConfig()
        self.mdp = mdp or TTTMDP(self.config.rewards, agent=self.config.agent)
        self.values = ValueTable(generate_all_valid_games(self.config.agent))
        self.rounds_run = 0
        self.last_delta = 0.0

    def iterate(self) -> None:
        """Run ``config.iterations`` rounds of Bellman optimality backups."""
        gamma = self.config.discount
        for i in range(self.config.iterations):
            delta = 0.0
            for state in self.values:
                if state.is_terminal:
                    continue
                best = -math.inf
                for mv in get_possible_moves(state):
                    q = expected_return(self.mdp, self.values, state, mv, gamma)
                    if q > best:
                        best = q
                delta = max(delta, abs(best - self.values[state]))
                self.values[state] = best
            self.rounds_run += 1
            self.last_delta = delta
            logging.debug("value iteration round %d: max delta=%.6g", i + 1, delta)
        logging.info(
            "Value iteration: %d states, %d rounds, last delta=%.6g",
            len(self.values), self.config.iterations, self.last_delta,
        )

    def extract_policy(self) -> Policy:
        return policy_from_values(self.values, self.mdp, self.config.discount)

    def train(self) -> Policy:
        self.iterate()
        return self.extract_policy()
