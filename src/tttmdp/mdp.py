"""
Tic-Tac-Toe as an MDP seen from one player (the agent).

- States are the agent's decision points plus terminal states.
- Actions are the agent's legal moves.
- Transitions: the agent's move, then (if the game is not over) the opponent's
  reply, modelled as uniform over the opponent's legal replies.
- Reward depends only on the state reached: win / loss / draw for terminal
  states, a constant living reward otherwise.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from .errors import IllegalActionError, MalformedTransitionModelError
from .game import X, Move, State, get_possible_moves, other

PROB_TOLERANCE = 1e-9


@dataclass(frozen=True)
class RewardConfig:
    win: float = 10.0
    loss: float = -10.0
    living: float = 0.0
    draw: float = 0.0

    def reward_for(self, state: State, agent: int) -> float:
        w = state.winner
        if w == agent:
            return self.win
        if w == other(agent):
            return self.loss
        if state.is_terminal:
            return self.draw
        return self.living


@dataclass(frozen=True)
class Outcome:
    s: State
    action: Move
    reward: float
    s_prime: State


@dataclass(frozen=True)
class TransitionProb:
    outcome: Outcome
    prob: float


def check_transitions(transitions: Sequence[TransitionProb]) -> None:
    if not transitions:
        raise MalformedTransitionModelError("Empty transition set for a legal action")
    mass = math.fsum(t.prob for t in transitions)
    if not math.isclose(mass, 1.0, rel_tol=0.0, abs_tol=PROB_TOLERANCE):
        s = transitions[0].outcome.s
        a = transitions[0].outcome.action
        raise MalformedTransitionModelError(
            f"Transition probabilities for {s} / {a} sum to {mass!r}, expected 1.0"
        )


class TTTMDP:
    """Transition and reward model against a uniformly random opponent."""

    def __init__(self, rewards: RewardConfig | None = None, agent: int = X):
        self.rewards = rewards or RewardConfig()
        self.agent = agent
        self._cache: Dict[Tuple[State, Move], Tuple[TransitionProb, ...]] = {}

    def transitions(self, state: State, action: Move) -> Tuple[TransitionProb, ...]:
        key = (state, action)
        ts = self._cache.get(key)
        if ts is None:
            ts = self._cache[key] = self._generate(state, action)
        return ts

    def _generate(self, state: State, action: Move) -> Tuple[TransitionProb, ...]:
        if state.is_terminal:
            raise IllegalActionError(f"No actions in terminal state {state}")
        if state.to_move != self.agent or not state.is_legal(action):
            raise IllegalActionError(f"Move {action} is not legal in {state}")

        after = state.apply(action)
        if after.is_terminal:
            reward = self.rewards.reward_for(after, self.agent)
            return (TransitionProb(Outcome(state, action, reward, after), 1.0),)

        replies = get_possible_moves(after)
        p = 1.0 / len(replies)
        out = []
        for reply in replies:
            s_prime = after.apply(reply)
            reward = self.rewards.reward_for(s_prime, self.agent)
            out.append(TransitionProb(Outcome(state, action, reward, s_prime), p))
        return tuple(out)
