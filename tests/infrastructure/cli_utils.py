"""
Utilities for working with the CLI in tests.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[2]


def run_cli(root: Path, *args: str, stdin: str | None = None) -> subprocess.CompletedProcess:
    """
    Run `python -m embex.cli` with the given arguments inside `root`.

    The repository root is put on PYTHONPATH so the package imports
    without being installed.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(_REPO_ROOT), env.get("PYTHONPATH", "")) if p)
    env.pop("EMBEX_DEBUG", None)
    return subprocess.run(
        [sys.executable, "-m", "embex.cli", *args],
        cwd=root, env=env, input=stdin, capture_output=True, text=True, encoding="utf-8"
    )


def jload(s: str):
    return json.loads(s)
