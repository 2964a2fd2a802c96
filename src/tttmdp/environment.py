"""
Turn-taking environment: the agent moves, the opponent replies, and the agent
observes the state at its next decision point.

Illegal moves are reported through StepResult rather than raised, since an
exploring learner hits them as a matter of course.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .game import X, Move, State, other
from .mdp import Outcome, RewardConfig
from .opponents import Opponent, RandomOpponent


@dataclass(frozen=True)
class StepResult:
    outcome: Optional[Outcome] = None
    reason: str = ""

    @classmethod
    def applied(cls, outcome: Outcome) -> "StepResult":
        return cls(outcome=outcome)

    @classmethod
    def illegal(cls, reason: str) -> "StepResult":
        return cls(outcome=None, reason=reason)

    @property
    def is_applied(self) -> bool:
        return self.outcome is not None


class TTTEnvironment:
    def __init__(
        self,
        opponent: Optional[Opponent],
        rng: np.random.Generator,
        rewards: Optional[RewardConfig] = None,
        agent: int = X,
    ):
        self.opponent = opponent if opponent is not None else RandomOpponent()
        if rng is None:
            raise ValueError("TTTEnvironment needs a numpy Generator; build one with np.random.default_rng(seed)")
        self.rng = rng
        self.rewards = rewards or RewardConfig()
        self.agent = agent
        self._state = State.initial()
        self.reset()

    def reset(self) -> State:
        """Start a new game; the opponent opens when the agent plays O."""
        self._state = State.initial()
        if self.agent != X:
            self._state = self._state.apply(self.opponent.choose(self._state, self.rng))
        return self._state

    def current_state(self) -> State:
        return self._state

    def execute_move(self, move: Move) -> StepResult:
        s = self._state
        if move.player != self.agent or not s.is_legal(move):
            return StepResult.illegal(f"{move} is not legal in {s}")

        nxt = s.apply(move)
        if not nxt.is_terminal:
            reply = self.opponent.choose(nxt, self.rng)
            if reply.player != other(self.agent) or not nxt.is_legal(reply):
                raise RuntimeError(f"{self.opponent!r} played illegal reply {reply} in {nxt}")
            nxt = nxt.apply(reply)
        self._state = nxt
        return StepResult.applied(Outcome(s, move, self.rewards.reward_for(nxt, self.agent), nxt))
