"""
Write a trained policy (and the table it came from) to a run directory.

Layout:
- policy.csv       state, cell
- q_table.csv      state, cell, q_value     (Q-learning runs)
- values.csv       state, value             (value-iteration runs)
- manifest.json    config, provenance, row counts and checksums

Rows are sorted by state key then cell, so equal runs give byte-identical files.
"""
from __future__ import annotations

import csv
import hashlib
import json
import logging
import platform
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .paths import get_git_commit
from .policy import Policy
from .tables import QTable, ValueTable

EXPORT_VERSION = "1.0.0"


@dataclass
class ExportArgs:
    out: Path
    solver: str
    config: Dict[str, Any] = field(default_factory=dict)
    evaluation: Optional[Dict[str, float]] = None
    cli_argv: List[str] | None = None


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _write_csv(path: Path, header: List[str], rows: List[list]) -> int:
    rows = sorted(rows, key=lambda r: tuple(r[:2]))
    with path.open('w', newline='') as f:
        w = csv.writer(f)
        w.writerow(header)
        w.writerows(rows)
    return len(rows)


def run_export(
    args: ExportArgs,
    policy: Policy,
    q_table: Optional[QTable] = None,
    values: Optional[ValueTable] = None,
) -> Path:
    args.out.mkdir(parents=True, exist_ok=True)
    files: Dict[str, Path] = {}
    row_counts: Dict[str, int] = {}

    files["policy"] = args.out / "policy.csv"
    row_counts["policy"] = _write_csv(
        files["policy"], ["state", "cell"],
        [[s.key, mv.cell] for s, mv in policy.items()],
    )
    if q_table is not None:
        files["q_table"] = args.out / "q_table.csv"
        row_counts["q_table"] = _write_csv(
            files["q_table"], ["state", "cell", "q_value"],
            [[s.key, mv.cell, q] for s, acts in q_table.snapshot().items() for mv, q in acts.items()],
        )
    if values is not None:
        files["values"] = args.out / "values.csv"
        row_counts["values"] = _write_csv(
            files["values"], ["state", "value"],
            [[s.key, v] for s, v in values.items()],
        )
    logging.info("Wrote %s to %s", ", ".join(f"{k} ({row_counts[k]} rows)" for k in files), args.out)

    manifest = {
        "export_version": EXPORT_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "solver": args.solver,
        "config": args.config,
        "cli_argv": args.cli_argv,
        "git_commit": get_git_commit(),
        "python": {
            "python_version": sys.version.split(" ")[0],
            "platform": platform.platform(),
            "numpy": np.__version__,
        },
        "row_counts": row_counts,
        "unresolved_states": [s.key for s in policy.unresolved],
        "evaluation": args.evaluation,
        "files": {k: p.name for k, p in files.items()},
        "checksums": {k: _sha256_file(p) for k, p in files.items()},
    }
    (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json")
    return args.out
