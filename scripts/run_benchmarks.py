#!/usr/bin/env python3
"""Time both solvers over several seeds and report how often they agree.

Agreement is the share of X decision points where the Q-learning policy picks
the same move as value iteration.
"""
from __future__ import annotations

import argparse
import logging
import math
import statistics as stats
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import numpy as np

from tttmdp.evaluation import play_policy
from tttmdp.paths import runs_dir
from tttmdp.q_learning import QLearningConfig, QLearningSolver
from tttmdp.tracking import log_metrics, log_params, maybe_mlflow_run
from tttmdp.value_iteration import ValueIterationConfig, ValueIterationSolver


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    half = 1.96 * (s / math.sqrt(len(values)))
    return m, half


@dataclass
class Config:
    seeds: int = 5
    episodes: int = 60000
    eval_games: int = 1000
    tracking: str = "none"  # or "mlflow"
    log_dir: Path | None = None


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Benchmark value iteration against Q-learning")
    ap.add_argument("--seeds", type=int, default=Config.seeds)
    ap.add_argument("--episodes", type=int, default=Config.episodes)
    ap.add_argument("--eval-games", type=int, default=Config.eval_games)
    ap.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    ns = ap.parse_args(argv)
    cfg = Config(seeds=ns.seeds, episodes=ns.episodes, eval_games=ns.eval_games, tracking=ns.tracking)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    with maybe_mlflow_run(cfg.tracking == "mlflow", run_name="benchmarks", log_dir=cfg.log_dir or runs_dir()) as tracking:
        if tracking:
            log_params({"seeds": cfg.seeds, "episodes": cfg.episodes, "eval_games": cfg.eval_games})

        t0 = time.perf_counter()
        vi = ValueIterationSolver(ValueIterationConfig())
        vi_policy = vi.train()
        vi_time = time.perf_counter() - t0
        logging.info("value iteration: %.3fs", vi_time)

        ql_times: List[float] = []
        agreement: List[float] = []
        win_rates: List[float] = []
        for seed in range(cfg.seeds):
            t1 = time.perf_counter()
            ql = QLearningSolver(QLearningConfig(episodes=cfg.episodes, seed=seed, log_every=0))
            ql_policy = ql.train()
            ql_times.append(time.perf_counter() - t1)
            same = sum(1 for s, mv in vi_policy.items() if ql_policy.get(s) == mv)
            agreement.append(same / len(vi_policy))
            res = play_policy(ql_policy, cfg.eval_games, rng=np.random.default_rng(10_000 + seed))
            win_rates.append(res.win_rate)
            logging.info("seed=%d time=%.2fs agreement=%.3f win_rate=%.3f",
                         seed, ql_times[-1], agreement[-1], res.win_rate)

        m_t, h_t = ci95(ql_times)
        m_a, h_a = ci95(agreement)
        m_w, h_w = ci95(win_rates)
        logging.info("q-learning time: %.3fs ± %.3fs (95%% CI)", m_t, h_t)
        logging.info("agreement with value iteration: %.3f ± %.3f", m_a, h_a)
        logging.info("win rate vs random: %.3f ± %.3f", m_w, h_w)
        if tracking:
            log_metrics({
                "vi_time_s": vi_time,
                "ql_time_mean_s": m_t,
                "agreement_mean": m_a,
                "win_rate_mean": m_w,
            })
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
