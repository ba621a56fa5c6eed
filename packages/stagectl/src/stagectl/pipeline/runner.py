from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from .commands import Command
from .model import CommandOutcome, FailedCommand, RunResult, Stage, StageOutcome, StageStatus
from .registry import Pipeline
from .resolve import dedupe, resolve_order


@dataclass(frozen=True)
class RunnerConfig:
    cwd: Path
    verbose: bool = False
    dry_run: bool = False


@dataclass(frozen=True)
class RunnerEvent:
    seq: int
    event: str
    stage: str
    status: str
    duration_ms: int = 0
    message: str = ""


class PipelineRunner:
    def __init__(
        self,
        pipeline: Pipeline,
        config: RunnerConfig,
        echo: Callable[[str], None] = print,
        on_event: Callable[[RunnerEvent], None] | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.config = config
        self._echo = echo
        self._on_event = on_event
        self._seq = 0

    def _emit(self, event: str, stage: str, status: str, duration_ms: int = 0, message: str = "") -> None:
        if self._on_event is None:
            return
        self._seq += 1
        self._on_event(RunnerEvent(self._seq, event, stage, status, duration_ms, message))

    def _should_echo(self, stage: Stage) -> bool:
        return self.config.dry_run or self.config.verbose or not stage.verbosity_sensitive

    def run(self, targets: Iterable[str]) -> RunResult:
        requested = tuple(dedupe(targets))
        self.pipeline.validate()
        order = resolve_order(self.pipeline, requested)
        outcomes = tuple(StageOutcome(stage.name) for stage in order)
        failure: FailedCommand | None = None

        for stage, outcome in zip(order, outcomes):
            failure = self._run_stage(stage, outcome)
            if failure is not None:
                break

        return RunResult(
            targets=requested,
            order=tuple(stage.name for stage in order),
            stages=outcomes,
            failure=failure,
            dry_run=self.config.dry_run,
        )

    def _run_stage(self, stage: Stage, outcome: StageOutcome) -> FailedCommand | None:
        self._emit("stage-start", stage.name, "running")
        started = time.monotonic()
        failure: FailedCommand | None = None
        for command in stage.commands:
            failure = self._run_command(stage, command, outcome)
            if failure is not None:
                break
        outcome.duration_ms = int((time.monotonic() - started) * 1000)
        if self.config.dry_run:
            outcome.status = StageStatus.SKIP
        else:
            outcome.status = StageStatus.FAIL if failure is not None else StageStatus.PASS
        self._emit("stage-end", stage.name, outcome.status.value, outcome.duration_ms)
        return failure

    def _run_command(self, stage: Stage, command: Command, outcome: StageOutcome) -> FailedCommand | None:
        line = command.describe()
        if self._should_echo(stage):
            self._echo(line)
        if self.config.dry_run:
            outcome.commands.append(CommandOutcome(line, None, StageStatus.SKIP))
            return None

        started = time.monotonic()
        code = command.execute(self.config.cwd)
        duration_ms = int((time.monotonic() - started) * 1000)
        if code == 0:
            outcome.commands.append(CommandOutcome(line, code, StageStatus.PASS, duration_ms))
            return None
        if command.ignore_errors:
            outcome.commands.append(CommandOutcome(line, code, StageStatus.PASS, duration_ms))
            self._emit("command-ignored", stage.name, "pass", duration_ms, f"exit {code} ignored: {line}")
            return None
        outcome.commands.append(CommandOutcome(line, code, StageStatus.FAIL, duration_ms))
        self._emit("command-failed", stage.name, "fail", duration_ms, f"exit {code}: {line}")
        return FailedCommand(stage=stage.name, command=line, exit_code=code)
