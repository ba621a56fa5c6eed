from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    code: int
    stdout: str
    stderr: str


def run_command(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    capture: bool = True,
) -> CommandResult:
    """Run `cmd` to completion.

    With `capture=False` the child inherits stdout/stderr, so the wrapped
    tool's own output reaches the terminal untouched.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            text=True,
            capture_output=capture,
            check=False,
        )
    except OSError as exc:
        return CommandResult(code=COMMAND_NOT_FOUND, stdout="", stderr=f"{cmd[0]}: {exc.strerror or exc}")
    return CommandResult(code=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")
