"""Where trained artifacts go, and the git metadata recorded alongside them."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path


def _find_git_root(start: Path) -> Path | None:
    for cur in [start] + list(start.parents)[:5]:
        if (cur / ".git").exists():
            return cur
    return None


def repo_root() -> Path:
    """TTT_MDP_ROOT, else the nearest parent holding .git, else the CWD."""
    env = os.getenv("TTT_MDP_ROOT")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    return git_root if git_root is not None else Path.cwd()


def runs_dir() -> Path:
    p = os.getenv("TTT_MDP_RUNS")
    return Path(p) if p else repo_root() / "runs"


def get_git_commit() -> str | None:
    """Current commit hash, or None outside a git checkout."""
    try:
        out = subprocess.check_output(
            ["git", "-C", str(repo_root()), "rev-parse", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out.strip() or None
