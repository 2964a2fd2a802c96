import numpy as np
import pytest

from tttmdp.errors import MalformedTransitionModelError
from tttmdp.evaluation import play_policy
from tttmdp.game import O, X, Move, State, get_possible_moves, parse_board
from tttmdp.mdp import TTTMDP, TransitionProb
from tttmdp.value_iteration import ValueIterationConfig, ValueIterationSolver

CORNERS_AND_CENTER = {0, 2, 4, 6, 8}


@pytest.fixture(scope="module")
def trained():
    solver = ValueIterationSolver(ValueIterationConfig(discount=0.9, iterations=10))
    policy = solver.train()
    return solver, policy


def test_terminal_states_stay_zero():
    solver = ValueIterationSolver(ValueIterationConfig(iterations=3))
    solver.iterate()
    terminals = [s for s in solver.values if s.is_terminal]
    assert terminals
    assert all(solver.values[s] == 0.0 for s in terminals)
    assert solver.rounds_run == 3


def test_fixed_point_reached_by_nine_rounds():
    nine = ValueIterationSolver(ValueIterationConfig(iterations=9))
    nine.iterate()
    more = ValueIterationSolver(ValueIterationConfig(iterations=15))
    more.iterate()
    assert nine.values.snapshot() == more.values.snapshot()
    assert more.last_delta == 0.0


def test_too_few_rounds_has_not_converged():
    one = ValueIterationSolver(ValueIterationConfig(iterations=1))
    one.iterate()
    assert one.last_delta > 0.0
    ten = ValueIterationSolver(ValueIterationConfig(iterations=10))
    ten.iterate()
    assert one.values.snapshot() != ten.values.snapshot()


def test_values_are_bounded_by_rewards(trained):
    solver, _ = trained
    vals = np.array([v for _, v in solver.values.items()])
    assert vals.max() <= 10.0 + 1e-9
    assert vals.min() >= -10.0 - 1e-9


def test_winning_move_taken_and_valued(trained):
    solver, policy = trained
    s = parse_board("110220000")
    assert policy.action(s) == Move(2, X)
    assert solver.values[s] == pytest.approx(10.0)


def test_opening_is_center_or_corner(trained):
    _, policy = trained
    assert policy.action(State.initial()).cell in CORNERS_AND_CENTER


def test_policy_covers_every_non_terminal_state(trained):
    solver, policy = trained
    non_terminal = [s for s in solver.values if not s.is_terminal]
    assert len(policy) == len(non_terminal)
    assert policy.is_complete
    assert all(s in policy for s in non_terminal)


def test_single_legal_move_states(trained):
    solver, policy = trained
    seen = 0
    for s in solver.values:
        moves = get_possible_moves(s)
        if len(moves) == 1:
            assert policy.action(s) == moves[0]
            seen += 1
    assert seen > 0


def test_extraction_is_idempotent(trained):
    solver, policy = trained
    again = solver.extract_policy()
    assert again == policy
    assert again == solver.extract_policy()


def test_rarely_loses_to_random_opponent(trained):
    _, policy = trained
    stats = play_policy(policy, 500, rng=np.random.default_rng(7))
    assert stats.games == 500
    assert stats.loss_rate <= 0.05
    assert stats.win_rate >= 0.8


def test_agent_o_value_iteration():
    solver = ValueIterationSolver(ValueIterationConfig(iterations=9, agent=O))
    policy = solver.train()
    assert State.initial() not in policy
    s = parse_board("100000000")
    assert s in policy
    assert policy.action(s).player == O


class _LeakyMDP(TTTMDP):
    """Drops half of the probability mass."""

    def transitions(self, state, action):
        ts = super().transitions(state, action)
        return tuple(TransitionProb(t.outcome, t.prob / 2) for t in ts)


def test_malformed_model_is_fatal():
    solver = ValueIterationSolver(ValueIterationConfig(iterations=1), mdp=_LeakyMDP())
    with pytest.raises(MalformedTransitionModelError):
        solver.iterate()


def test_config_validation():
    with pytest.raises(ValueError):
        ValueIterationConfig(discount=1.5)
    with pytest.raises(ValueError):
        ValueIterationConfig(iterations=-1)
