"""
Tabular Q-learning with an epsilon-greedy behaviour policy.

Update rule (bootstrapped TD(0)):
    Q(s,a) <- (1 - alpha) * Q(s,a) + alpha * target
    target  = r                                  if s' is terminal
            = r + gamma * max_a' Q(s', a')       otherwise

All randomness (exploration and, when the solver builds its own
environment, the opponent's replies) is drawn from one numpy Generator.

A move the environment reports as illegal is skipped without an update and
selection is retried. Retries are unbounded unless
``QLearningConfig.max_illegal_retries`` sets a per-decision limit.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

import numpy as np

from .environment import StepResult, TTTEnvironment
from .errors import IllegalActionError
from .game import X, Move, State, generate_all_valid_games, get_possible_moves
from .mdp import RewardConfig
from .opponents import Opponent
from .policy import Policy, greedy_move, policy_from_q_table
from .tables import QTable


class Environment(Protocol):
    def current_state(self) -> State:
        ...

    def execute_move(self, move: Move) -> StepResult:
        ...

    def reset(self) -> State:
        ...


@dataclass
class QLearningConfig:
    alpha: float = 0.1
    discount: float = 0.9
    epsilon: float = 0.1
    episodes: int = 60000
    seed: Optional[int] = None
    rewards: RewardConfig = field(default_factory=RewardConfig)
    agent: int = X
    log_every: int = 10000
    max_illegal_retries: Optional[int] = None

    def __post_init__(self):
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1]: {self.alpha}")
        if not 0.0 <= self.discount <= 1.0:
            raise ValueError(f"discount must be in [0, 1]: {self.discount}")
        if not 0.0 <= self.epsilon <= 1.0:
            raise ValueError(f"epsilon must be in [0, 1]: {self.epsilon}")
        if self.episodes < 0:
            raise ValueError(f"episodes must be >= 0: {self.episodes}")
        if self.max_illegal_retries is not None and self.max_illegal_retries < 0:
            raise ValueError(f"max_illegal_retries must be >= 0: {self.max_illegal_retries}")


class QLearningSolver:
    def __init__(
        self,
        config: QLearningConfig | None = None,
        env: Optional[Environment] = None,
        rng: Optional[np.random.Generator] = None,
        opponent: Optional[Opponent] = None,
    ):
        self.config = config or QLearningConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        if env is None:
            env = TTTEnvironment(opponent, rng=self.rng, rewards=self.config.rewards, agent=self.config.agent)
        self.env = env
        self.q_table = QTable()
        self._init_q_table()

        self.visit_counts: Counter = Counter()
        self.episode_returns: List[float] = []
        self.illegal_retries = 0
        self.episodes_run = 0

    def _init_q_table(self) -> None:
        for state in generate_all_valid_games(self.config.agent):
            for mv in get_possible_moves(state):
                self.q_table.add(state, mv, 0.0)

    def exploit(self, state: State) -> Move:
        """Greedy move for ``state``; last move seen with value >= the max wins ties."""
        best = greedy_move(self.q_table.get(state).items())
        if best is None:
            raise IllegalActionError(f"No greedy move available in {state}")
        return best

    def max_q(self, state: State) -> float:
        return self.q_table.get_value(state, self.exploit(state))

    def choose_action(self, state: State) -> Move:
        if self.rng.random() < self.config.epsilon:
            moves = list(self.q_table.get(state))
            return moves[int(self.rng.integers(len(moves)))]
        return self.exploit(state)

    def update(self, state: State, move: Move, reward: float, s_prime: State) -> float:
        cfg = self.config
        if s_prime.is_terminal:
            target = reward
        else:
            target = reward + cfg.discount * self.max_q(s_prime)
        new_q = (1.0 - cfg.alpha) * self.q_table.get_value(state, move) + cfg.alpha * target
        self.q_table.add(state, move, new_q)
        return new_q

    def run_episode(self) -> float:
        state = self.env.current_state()
        total = 0.0
        retries = 0
        while not state.is_terminal:
            move = self.choose_action(state)
            result = self.env.execute_move(move)
            if not result.is_applied:
                retries += 1
                self.illegal_retries += 1
                logging.debug("illegal move skipped: %s", result.reason)
                limit = self.config.max_illegal_retries
                if limit is not None and retries > limit:
                    raise IllegalActionError(
                        f"Environment rejected {retries} consecutive moves in {state}: {result.reason}"
                    )
                state = self.env.current_state()
                continue
            retries = 0
            o = result.outcome
            self.visit_counts[(state, move)] += 1
            self.update(state, move, o.reward, o.s_prime)
            total += o.reward
            state = o.s_prime
        return total

    def train(self) -> Policy:
        cfg = self.config
        for _ in range(cfg.episodes):
            ret = self.run_episode()
            self.episode_returns.append(ret)
            self.episodes_run += 1
            self.env.reset()
            if cfg.log_every and self.episodes_run % cfg.log_every == 0:
                recent = self.episode_returns[-cfg.log_every:]
                logging.info(
                    "Q-learning: episode %d, mean return (last %d)=%.3f",
                    self.episodes_run, len(recent), float(np.mean(recent)),
                )
        logging.info(
            "Q-learning finished: %d episodes, %d Q entries, %d illegal retries",
            self.episodes_run, self.q_table.num_entries(), self.illegal_retries,
        )
        return self.extract_policy()

    def extract_policy(self) -> Policy:
        return policy_from_q_table(self.q_table)
