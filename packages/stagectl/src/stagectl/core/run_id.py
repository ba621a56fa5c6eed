from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from .process import run_command


def git_short_sha(cwd: Path) -> str:
    res = run_command(["git", "rev-parse", "--short", "HEAD"], cwd)
    sha = res.stdout.strip()
    return sha if res.code == 0 and sha else "unknown"


def make_run_id(cwd: Path, prefix: str = "stagectl") -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{ts}-{git_short_sha(cwd)}"
