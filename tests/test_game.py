from typing import List

import pytest

from tttmdp.game import (
    O,
    WIN_PATTERNS,
    X,
    Move,
    State,
    all_reachable_states,
    generate_all_valid_games,
    get_possible_moves,
    get_winner,
    is_valid_board,
    parse_board,
)

try:
    from hypothesis import given, strategies as st  # type: ignore
    HAS_HYP = True
except ModuleNotFoundError:  # pragma: no cover - test infra
    HAS_HYP = False


@pytest.fixture(scope="module")
def reachable():
    return all_reachable_states()


def test_reachable_counts(reachable):
    assert len(reachable) == 5478
    assert len(set(reachable)) == 5478
    assert sum(1 for s in reachable if s.is_terminal) == 958


def test_terminal_split(reachable):
    x_wins = sum(1 for s in reachable if s.winner == X)
    o_wins = sum(1 for s in reachable if s.winner == O)
    draws = sum(1 for s in reachable if s.is_terminal and s.winner == 0)
    assert (x_wins, o_wins, draws) == (626, 316, 16)


def test_generate_all_valid_games_filters_by_turn(reachable):
    xs = generate_all_valid_games(X)
    assert all(s.is_terminal or s.to_move == X for s in xs)
    assert State.initial() in xs
    expected = sum(1 for s in reachable if s.is_terminal or s.to_move == X)
    assert len(xs) == expected
    with pytest.raises(ValueError):
        generate_all_valid_games(3)


def test_moves_ascending_and_empty_for_terminal():
    s = parse_board("120000000")
    moves = get_possible_moves(s)
    assert [m.cell for m in moves] == [2, 3, 4, 5, 6, 7, 8]
    assert all(m.player == X for m in moves)
    assert get_possible_moves(parse_board("111220000")) == []


def test_state_equality_includes_turn():
    board = tuple([0] * 9)
    assert State(board, X) == State.initial()
    assert State(board, O) != State.initial()
    assert hash(State(board, X)) == hash(State.initial())


def test_apply_and_legality():
    s = State.initial()
    assert s.is_legal(Move(4, X))
    assert not s.is_legal(Move(4, O))
    assert not s.is_legal(Move(9, X))
    t = s.apply(Move(4, X))
    assert t.board[4] == X and t.to_move == O
    assert not t.is_legal(Move(4, O))
    # source state unchanged
    assert s.board[4] == 0


@pytest.mark.parametrize("bad", ["abc", "0123456789", "12345678x", "111222111", "222000000"])
def test_parse_board_rejects(bad: str):
    with pytest.raises(ValueError):
        parse_board(bad)


def test_parse_board_key_roundtrip():
    s = parse_board("100020000")
    assert s.to_move == X
    assert s.key == "100020000"
    assert str(s) == "X../.O./..."


if HAS_HYP:
    @given(st.lists(st.integers(min_value=0, max_value=2), min_size=9, max_size=9))
    def test_is_valid_board_invariants_random(board: List[int]):
        x = board.count(1)
        o = board.count(2)
        valid = is_valid_board(board)
        if not (x == o or x == o + 1):
            assert valid is False
        def count_wins(p: int) -> int:
            return sum(1 for pat in WIN_PATTERNS if all(board[i] == p for i in pat))
        if count_wins(1) > 0 and count_wins(2) > 0:
            assert valid is False
        w = get_winner(board)
        if valid and w == 1:
            assert x == o + 1
        if valid and w == 2:
            assert x == o
