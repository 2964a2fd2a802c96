"""
Optional MLflow tracking for training runs.

MLflow is imported only when tracking is requested, so it stays an optional
extra (``pip install .[tracking]``).
"""
from __future__ import annotations

import importlib.util
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional


def mlflow_available() -> bool:
    return importlib.util.find_spec("mlflow") is not None


@contextmanager
def maybe_mlflow_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yield True inside an active MLflow run, False when tracking is off or unavailable."""
    if not enabled:
        yield False
        return
    if not mlflow_available():
        logging.warning("mlflow is not installed; continuing without tracking")
        yield False
        return
    import mlflow  # type: ignore

    if log_dir is not None:
        mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
    with mlflow.start_run(run_name=run_name):
        yield True


def log_params(params: Dict[str, object]) -> None:
    import mlflow  # type: ignore

    mlflow.log_params(params)


def log_metrics(metrics: Dict[str, float], step: Optional[int] = None) -> None:
    import mlflow  # type: ignore

    mlflow.log_metrics(metrics, step=step)


def log_artifact(path: Path) -> None:
    import mlflow  # type: ignore

    mlflow.log_artifact(str(path))
