"""tttmdp package.

Tic-tac-toe solved as a Markov Decision Process, by value iteration and by
Q-learning, with both paths ending in the same deterministic Policy.

Convenience imports are exposed for common workflows.
"""

from .baselines import RandomSolver
from .environment import StepResult, TTTEnvironment
from .errors import IllegalActionError, MalformedTransitionModelError, UnknownStateError
from .evaluation import MatchStats, play_policy
from .game import Move, State, generate_all_valid_games, get_possible_moves, is_terminal
from .mdp import TTTMDP, Outcome, RewardConfig, TransitionProb
from .opponents import FixedOpponent, RandomOpponent
from .policy import Policy, Solver, policy_from_q_table, policy_from_values
from .q_learning import QLearningConfig, QLearningSolver
from .tables import QTable, ValueTable
from .value_iteration import ValueIterationConfig, ValueIterationSolver

__all__ = [
    "State",
    "Move",
    "generate_all_valid_games",
    "get_possible_moves",
    "is_terminal",
    "RewardConfig",
    "Outcome",
    "TransitionProb",
    "TTTMDP",
    "ValueTable",
    "QTable",
    "Policy",
    "Solver",
    "policy_from_values",
    "policy_from_q_table",
    "ValueIterationConfig",
    "ValueIterationSolver",
    "QLearningConfig",
    "QLearningSolver",
    "RandomSolver",
    "TTTEnvironment",
    "StepResult",
    "RandomOpponent",
    "FixedOpponent",
    "MatchStats",
    "play_policy",
    "IllegalActionError",
    "UnknownStateError",
    "MalformedTransitionModelError",
]
