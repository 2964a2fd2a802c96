import numpy as np
import pytest

from tttmdp.baselines import RandomSolver
from tttmdp.environment import TTTEnvironment
from tttmdp.errors import UnknownStateError
from tttmdp.evaluation import MatchStats, play_policy
from tttmdp.game import O, X, Move, State, generate_all_valid_games
from tttmdp.mdp import RewardConfig
from tttmdp.opponents import FixedOpponent, RandomOpponent
from tttmdp.policy import Policy


def test_illegal_move_leaves_game_untouched():
    env = TTTEnvironment(FixedOpponent(), rng=np.random.default_rng(0))
    res = env.execute_move(Move(4, O))
    assert not res.is_applied and res.outcome is None
    assert "not legal" in res.reason
    assert env.current_state() == State.initial()

    ok = env.execute_move(Move(4, X))
    assert ok.is_applied
    assert env.current_state().board[0] == O  # fixed opponent answers in cell 0
    again = env.execute_move(Move(4, X))
    assert not again.is_applied


def test_outcome_reports_reward_and_successor():
    rewards = RewardConfig(win=1.0, loss=-1.0, living=-0.05, draw=0.25)
    env = TTTEnvironment(FixedOpponent(), rng=np.random.default_rng(0), rewards=rewards)
    o1 = env.execute_move(Move(8, X)).outcome
    assert o1.s == State.initial() and o1.action == Move(8, X)
    assert o1.reward == -0.05
    assert o1.s_prime == env.current_state()
    env.execute_move(Move(7, X))
    final = env.execute_move(Move(6, X)).outcome
    assert final.s_prime.is_terminal and final.reward == 1.0


def test_opponent_opens_when_agent_is_o():
    env = TTTEnvironment(FixedOpponent([4, 0, 1, 2, 3, 5, 6, 7, 8]), rng=np.random.default_rng(0), agent=O)
    s = env.current_state()
    assert s.board[4] == X and s.to_move == O
    env.execute_move(Move(0, O))
    env.reset()
    assert env.current_state() == s


def test_fixed_opponent_validates_preference():
    with pytest.raises(ValueError):
        FixedOpponent([0, 1, 2])


def test_random_opponent_uses_injected_rng():
    s = State.initial().apply(Move(4, X))
    opp = RandomOpponent()
    rng_a = np.random.default_rng(3)
    a = [opp.choose(s, rng_a) for _ in range(20)]
    rng_b = np.random.default_rng(3)
    b = [opp.choose(s, rng_b) for _ in range(20)]
    assert a == b
    assert all(m.player == O and s.is_legal(m) for m in a)


def test_random_solver_is_seeded_and_complete():
    p1 = RandomSolver(seed=1).train()
    p2 = RandomSolver(seed=1).train()
    assert p1 == p2
    non_terminal = [s for s in generate_all_valid_games(X) if not s.is_terminal]
    assert len(p1) == len(non_terminal)


def test_play_policy_tallies_and_fails_on_gaps():
    policy = RandomSolver(seed=4).train()
    stats = play_policy(policy, 100, rng=np.random.default_rng(4))
    assert isinstance(stats, MatchStats)
    assert stats.wins + stats.draws + stats.losses == stats.games == 100
    d = stats.as_dict()
    assert d["win_rate"] == pytest.approx(stats.wins / 100)

    with pytest.raises(UnknownStateError):
        play_policy(Policy({}), 1, rng=np.random.default_rng(0))


def test_environment_requires_a_generator():
    with pytest.raises(TypeError):
        TTTEnvironment(RandomOpponent())
    with pytest.raises(ValueError):
        TTTEnvironment(RandomOpponent(), rng=None)
    with pytest.raises(TypeError):
        play_policy(RandomSolver(seed=0).train(), 1)


def test_same_generator_seed_same_games():
    policy = RandomSolver(seed=2).train()
    a = play_policy(policy, 50, rng=np.random.default_rng(9))
    b = play_policy(policy, 50, rng=np.random.default_rng(9))
    assert a == b
