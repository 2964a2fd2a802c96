from __future__ import annotations

import argparse
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .baselines import RandomSolver
from .evaluation import play_policy
from .export import ExportArgs, run_export
from .game import O, X, State
from .mdp import RewardConfig
from .paths import runs_dir
from .policy import Solver
from .q_learning import QLearningConfig, QLearningSolver
from .tracking import log_artifact, log_metrics, log_params, maybe_mlflow_run
from .value_iteration import ValueIterationConfig, ValueIterationSolver


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--agent", choices=["X", "O"], default="X", help="Side the agent plays (default: X)")
    p.add_argument("--win", type=float, default=10.0, help="Reward for a win")
    p.add_argument("--loss", type=float, default=-10.0, help="Reward for a loss")
    p.add_argument("--living", type=float, default=0.0, help="Reward for a non-terminal step")
    p.add_argument("--draw", type=float, default=0.0, help="Reward for a draw")
    p.add_argument("--out", type=Path, default=None, help="Export policy and tables to this directory")
    p.add_argument(
        "--evaluate", type=int, default=0, metavar="N",
        help="Play N games against a random opponent after training",
    )
    p.add_argument(
        "--tracking",
        choices=["none", "mlflow"],
        default="none",
        help="Experiment tracking backend",
    )
    p.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for tracking logs (default: TTT_MDP_RUNS or <repo>/runs)",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt-mdp", description="Solve Tic-tac-toe as an MDP")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument("--seed", type=int, default=None, help="Seed for the training/evaluation RNG")

    p_vi = sub.add_parser("value-iteration", help="Offline value iteration against a random opponent")
    p_vi.add_argument("--discount", type=float, default=0.9)
    p_vi.add_argument("--iterations", "-k", type=int, default=10, help="Number of value iteration rounds")
    _add_common(p_vi)

    p_ql = sub.add_parser("q-learning", help="Q-learning by self-play against a random opponent")
    p_ql.add_argument("--alpha", type=float, default=0.1, help="Learning rate")
    p_ql.add_argument("--discount", type=float, default=0.9)
    p_ql.add_argument("--epsilon", type=float, default=0.1, help="Exploration rate")
    p_ql.add_argument("--episodes", type=int, default=60000)
    p_ql.add_argument("--log-every", type=int, default=10000, help="Progress log interval in episodes")
    _add_common(p_ql)

    p_rnd = sub.add_parser("random", help="Random baseline policy")
    _add_common(p_rnd)

    return p


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _build_solver(ns: argparse.Namespace, agent: int, rewards: RewardConfig) -> Tuple[Solver, Dict[str, Any]]:
    if ns.cmd == "value-iteration":
        cfg = ValueIterationConfig(discount=ns.discount, iterations=ns.iterations, rewards=rewards, agent=agent)
        return ValueIterationSolver(cfg), asdict(cfg)
    if ns.cmd == "q-learning":
        cfg = QLearningConfig(
            alpha=ns.alpha, discount=ns.discount, epsilon=ns.epsilon, episodes=ns.episodes,
            seed=ns.seed, rewards=rewards, agent=agent, log_every=ns.log_every,
        )
        return QLearningSolver(cfg), asdict(cfg)
    return RandomSolver(agent=agent, seed=ns.seed), {"agent": agent, "seed": ns.seed}


def _flat_params(config: Dict[str, Any]) -> Dict[str, object]:
    params: Dict[str, object] = {}
    for k, v in config.items():
        if isinstance(v, dict):
            params.update({f"{k}.{kk}": vv for kk, vv in v.items()})
        else:
            params[k] = v
    return params


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if getattr(ns, "version", False):
        try:
            from importlib.metadata import version as _ver

            print(_ver("ttt-mdp"))
        except Exception:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0
    if ns.cmd is None:
        parser.print_help()
        return 0

    try:
        agent = X if ns.agent == "X" else O
        rewards = RewardConfig(win=ns.win, loss=ns.loss, living=ns.living, draw=ns.draw)
        solver, config = _build_solver(ns, agent, rewards)
    except ValueError as e:
        logging.error("%s", e)
        return 2
    if ns.evaluate < 0:
        logging.error("--evaluate must be >= 0: %s", ns.evaluate)
        return 2

    with maybe_mlflow_run(ns.tracking == "mlflow", run_name=ns.cmd, log_dir=ns.log_dir or runs_dir()) as tracking:
        if tracking:
            log_params(_flat_params(config))
        policy = solver.train()
        first = policy.get(State.initial())
        logging.info("Policy covers %d states; opening move=%s", len(policy), first)

        evaluation: Optional[Dict[str, float]] = None
        if ns.evaluate:
            stats = play_policy(
                policy, ns.evaluate,
                rng=np.random.default_rng(ns.seed),
                rewards=rewards,
                agent=agent,
            )
            evaluation = stats.as_dict()
            logging.info(
                "Evaluation over %d games: win=%.3f draw=%.3f loss=%.3f",
                stats.games, stats.win_rate, stats.draw_rate, stats.loss_rate,
            )
            if tracking:
                log_metrics({k: float(v) for k, v in evaluation.items()})

        if ns.out is not None:
            out = run_export(
                ExportArgs(out=ns.out, solver=ns.cmd, config=config, evaluation=evaluation,
                           cli_argv=list(argv) if argv is not None else None),
                policy,
                q_table=getattr(solver, "q_table", None),
                values=getattr(solver, "values", None),
            )
            logging.info("Exported run to: %s", out)
            if tracking:
                log_artifact(out / "manifest.json")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
