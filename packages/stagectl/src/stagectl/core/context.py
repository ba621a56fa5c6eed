from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .env import env_flag, getenv
from .paths import find_config, resolve_under
from .run_id import make_run_id

OutputFormat = Literal["text", "json"]

VERBOSITY_ENV = "V"
CONFIG_ENV = "STAGECTL_CONFIG"


@dataclass(frozen=True)
class RunContext:
    run_id: str
    project_root: Path
    config_path: Path | None
    output_format: OutputFormat
    verbose: bool
    quiet: bool
    log_json: bool
    echo_commands: bool = False
    overrides: tuple[tuple[str, str], ...] = ()

    @property
    def as_json(self) -> bool:
        return self.output_format == "json"

    @classmethod
    def from_args(
        cls,
        run_id: str | None = None,
        config: str | None = None,
        cwd: str | None = None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
        overrides: tuple[tuple[str, str], ...] = (),
    ) -> "RunContext":
        project_root = Path(cwd).resolve() if cwd else Path.cwd().resolve()
        configured = config or getenv(CONFIG_ENV)
        config_path = resolve_under(project_root, configured) if configured else find_config(project_root)
        if config_path is not None and not configured:
            # a discovered stagectl.yaml anchors the project, like make's Makefile directory
            project_root = config_path.parent
        # V only echoes commands; log verbosity stays with --verbose
        echo_commands = verbose or (not quiet and env_flag(VERBOSITY_ENV))
        return cls(
            run_id=run_id or getenv("RUN_ID") or make_run_id(project_root),
            project_root=project_root,
            config_path=config_path,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
            echo_commands=echo_commands,
            overrides=overrides,
        )
