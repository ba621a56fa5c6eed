from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .exit_codes import ERR_CONFIG, ERR_CYCLE, ERR_INTERNAL, ERR_UNKNOWN_STAGE


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class ConfigError(ScriptError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, "config_error")


class UnknownStageError(ScriptError):
    def __init__(self, names: Sequence[str], referenced_by: str | None = None) -> None:
        self.names = tuple(names)
        self.referenced_by = referenced_by
        joined = ", ".join(self.names)
        if referenced_by:
            message = f"stage `{referenced_by}` requires unknown stage(s): {joined}"
        else:
            message = f"unknown stage(s): {joined}"
        super().__init__(message, ERR_UNKNOWN_STAGE, "unknown_stage")


class CyclicStageError(ScriptError):
    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"cyclic stage dependency: {' -> '.join(self.cycle)}", ERR_CYCLE, "cyclic_stage")
