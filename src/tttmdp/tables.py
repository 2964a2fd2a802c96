"""
Value and Q tables.

Both tables refuse to invent entries: reading a state (or state/move pair)
that was never initialized raises UnknownStateError instead of returning 0.0.
Each solver instance owns its own table.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping

from .errors import UnknownStateError
from .game import Move, State


class ValueTable:
    def __init__(self, states: Iterable[State] = (), initial: float = 0.0):
        self._values: Dict[State, float] = {s: initial for s in states}

    def __getitem__(self, state: State) -> float:
        try:
            return self._values[state]
        except KeyError:
            raise UnknownStateError(f"State {state} is not in the value table") from None

    def __setitem__(self, state: State, value: float) -> None:
        if state not in self._values:
            raise UnknownStateError(f"State {state} is not in the value table")
        self._values[state] = value

    def __contains__(self, state: object) -> bool:
        return state in self._values

    def __iter__(self) -> Iterator[State]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def items(self):
        return self._values.items()

    def snapshot(self) -> Dict[State, float]:
        return dict(self._values)


class QTable:
    """Sparse Q(s, a) store: state -> {move -> value}, in insertion order."""

    def __init__(self):
        self._q: Dict[State, Dict[Move, float]] = {}

    def get(self, state: State) -> Mapping[Move, float]:
        try:
            return MappingProxyType(self._q[state])
        except KeyError:
            raise UnknownStateError(f"State {state} is not in the Q-table") from None

    def get_value(self, state: State, move: Move) -> float:
        actions = self.get(state)
        try:
            return actions[move]
        except KeyError:
            raise UnknownStateError(f"Q({state}, {move}) was never initialized") from None

    def add(self, state: State, move: Move, value: float) -> None:
        self._q.setdefault(state, {})[move] = value

    def states(self) -> Iterator[State]:
        return iter(self._q)

    def __contains__(self, state: object) -> bool:
        return state in self._q

    def __len__(self) -> int:
        return len(self._q)

    def num_entries(self) -> int:
        return sum(len(a) for a in self._q.values())

    def snapshot(self) -> Dict[State, Dict[Move, float]]:
        return {s: dict(a) for s, a in self._q.items()}
