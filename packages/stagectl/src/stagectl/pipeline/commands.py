"""Command kinds a stage can run.

The runner only talks to the `Command` protocol, so tests can hand it doubles
that never spawn a process.
"""

from __future__ import annotations

import os
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Mapping, Protocol, runtime_checkable

from ..core.process import run_command
from ..exit_codes import from_returncode

if TYPE_CHECKING:
    from .registry import Pipeline

DEFAULT_SHELL: tuple[str, ...] = ("bash", "-O", "globstar", "-c")


@runtime_checkable
class Command(Protocol):
    ignore_errors: bool

    def describe(self) -> str: ...

    def execute(self, cwd: Path) -> int: ...


@dataclass(frozen=True)
class ShellCommand:
    script: str
    shell: tuple[str, ...] = DEFAULT_SHELL
    workdir: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    ignore_errors: bool = False

    def describe(self) -> str:
        prefix = "-" if self.ignore_errors else ""
        if self.workdir:
            return f"{prefix}cd {shlex.quote(self.workdir)} && {self.script}"
        return f"{prefix}{self.script}"

    def execute(self, cwd: Path) -> int:
        run_in = (cwd / self.workdir) if self.workdir else cwd
        if not run_in.is_dir():
            print(f"cd: {self.workdir or cwd}: No such file or directory", file=sys.stderr)
            return 1
        env = {**os.environ, **self.env} if self.env else None
        # the child writes straight to fd 1; earlier echoes must land first
        sys.stdout.flush()
        result = run_command([*self.shell, self.script], run_in, env=env, capture=False)
        if result.stderr:
            print(result.stderr, file=sys.stderr)
        return from_returncode(result.code)


@dataclass(frozen=True)
class EchoCommand:
    message: str
    ignore_errors: bool = False
    write: Callable[[str], None] = print

    def describe(self) -> str:
        return f"echo {shlex.quote(self.message)}"

    def execute(self, cwd: Path) -> int:
        self.write(self.message)
        return 0


@dataclass(frozen=True)
class HelpCommand:
    pipeline: Pipeline
    title: str = ""
    ignore_errors: bool = False
    write: Callable[[str], None] = print

    def describe(self) -> str:
        return "stagectl help"

    def execute(self, cwd: Path) -> int:
        from .help import render_help

        for line in render_help(self.pipeline, self.title):
            self.write(line)
        return 0
