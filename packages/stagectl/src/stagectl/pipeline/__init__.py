from .commands import DEFAULT_SHELL, Command, EchoCommand, HelpCommand, ShellCommand
from .model import FailedCommand, RunResult, Stage, StageOutcome, StageStatus
from .registry import Pipeline
from .resolve import resolve_order
from .runner import PipelineRunner, RunnerConfig, RunnerEvent

__all__ = [
    "Command",
    "DEFAULT_SHELL",
    "EchoCommand",
    "FailedCommand",
    "HelpCommand",
    "Pipeline",
    "PipelineRunner",
    "RunResult",
    "RunnerConfig",
    "RunnerEvent",
    "ShellCommand",
    "Stage",
    "StageOutcome",
    "StageStatus",
    "resolve_order",
]
