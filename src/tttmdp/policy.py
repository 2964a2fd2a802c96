"""
Deterministic policies and their extraction from value functions and Q-tables.

Tie-break policy (shared by every greedy choice in the package):
- Moves are scanned in enumeration order (ascending cell index).
- A move replaces the current best when its value is >= the best so far,
  so among equally valued moves the LAST one wins.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Protocol, Tuple

from .errors import UnknownStateError
from .game import Move, State, get_possible_moves
from .mdp import TTTMDP, check_transitions
from .tables import QTable, ValueTable


def greedy_move(scored: Iterable[Tuple[Move, float]]) -> Optional[Move]:
    best_move: Optional[Move] = None
    best = -math.inf
    for move, value in scored:
        if value >= best:
            best = value
            best_move = move
    return best_move


def expected_return(mdp: TTTMDP, values: ValueTable, state: State, move: Move, discount: float) -> float:
    """One-step lookahead: sum over outcomes of p * (r + discount * V(s'))."""
    ts = mdp.transitions(state, move)
    check_transitions(ts)
    return sum(t.prob * (t.outcome.reward + discount * values[t.outcome.s_prime]) for t in ts)


@dataclass(frozen=True)
class Policy:
    """State -> Move lookup produced once by a solver.

    ``unresolved`` lists states that should have had an entry but did not;
    it is empty for a complete policy.
    """

    actions: Mapping[State, Move] = field(default_factory=dict)
    unresolved: Tuple[State, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "actions", MappingProxyType(dict(self.actions)))
        object.__setattr__(self, "unresolved", tuple(self.unresolved))

    def __hash__(self) -> int:
        return hash((frozenset(self.actions.items()), self.unresolved))

    def action(self, state: State) -> Move:
        try:
            return self.actions[state]
        except KeyError:
            raise UnknownStateError(f"No policy entry for state {state}") from None

    def get(self, state: State) -> Optional[Move]:
        return self.actions.get(state)

    @property
    def is_complete(self) -> bool:
        return not self.unresolved

    def __contains__(self, state: object) -> bool:
        return state in self.actions

    def __iter__(self) -> Iterator[State]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    def items(self):
        return self.actions.items()


class Solver(Protocol):
    def train(self) -> Policy:
        ...


def policy_from_values(values: ValueTable, mdp: TTTMDP, discount: float) -> Policy:
    """Greedy one-step expectimax over every non-terminal state of the table."""
    actions: Dict[State, Move] = {}
    for state in values:
        if state.is_terminal:
            continue
        scored = (
            (mv, expected_return(mdp, values, state, mv, discount))
            for mv in get_possible_moves(state)
        )
        actions[state] = greedy_move(scored)
    return Policy(actions)


def policy_from_q_table(q_table: QTable) -> Policy:
    """Greedy action per state; states with no recorded actions are flagged, not defaulted."""
    actions: Dict[State, Move] = {}
    unresolved = []
    for state in q_table.states():
        best = greedy_move(q_table.get(state).items())
        if best is None:
            unresolved.append(state)
            continue
        actions[state] = best
    if unresolved:
        logging.warning("%d Q-table states have no recorded actions; left out of the policy", len(unresolved))
    return Policy(actions, tuple(unresolved))
