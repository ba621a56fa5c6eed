from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .commands import Command


class StageStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    NOT_RUN = "not-run"


@dataclass(frozen=True)
class Stage:
    name: str
    prerequisites: tuple[str, ...] = ()
    commands: tuple[Command, ...] = ()
    verbosity_sensitive: bool = True
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "prerequisites", tuple(self.prerequisites))
        object.__setattr__(self, "commands", tuple(self.commands))


@dataclass(frozen=True)
class FailedCommand:
    stage: str
    command: str
    exit_code: int

    def to_payload(self) -> dict[str, object]:
        return {"stage": self.stage, "command": self.command, "exit_code": self.exit_code}


@dataclass(frozen=True)
class CommandOutcome:
    command: str
    exit_code: int | None
    status: StageStatus
    duration_ms: int = 0

    def to_payload(self) -> dict[str, object]:
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
        }


@dataclass
class StageOutcome:
    name: str
    status: StageStatus = StageStatus.NOT_RUN
    duration_ms: int = 0
    commands: list[CommandOutcome] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
            "commands": [c.to_payload() for c in self.commands],
        }


@dataclass(frozen=True)
class RunResult:
    targets: tuple[str, ...]
    order: tuple[str, ...]
    stages: tuple[StageOutcome, ...]
    failure: FailedCommand | None = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def exit_code(self) -> int:
        return 0 if self.failure is None else self.failure.exit_code

    def executed(self) -> list[str]:
        return [s.name for s in self.stages if s.status in {StageStatus.PASS, StageStatus.FAIL}]

    def to_payload(self, run_id: str) -> dict[str, object]:
        return {
            "schema_version": 1,
            "tool": "stagectl",
            "kind": "pipeline-run",
            "run_id": run_id,
            "status": "pass" if self.ok else "fail",
            "exit_code": self.exit_code,
            "dry_run": self.dry_run,
            "targets": list(self.targets),
            "order": list(self.order),
            "stages": [s.to_payload() for s in self.stages],
            "failure": self.failure.to_payload() if self.failure else None,
        }
