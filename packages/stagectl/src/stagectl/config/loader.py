from __future__ import annotations

import re
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.schema import schema_errors
from ..errors import ConfigError
from ..pipeline.commands import DEFAULT_SHELL, Command, EchoCommand, HelpCommand, ShellCommand
from ..pipeline.model import Stage
from ..pipeline.registry import Pipeline

BUILTIN_PIPELINE = "galaxy-collection"

# upper-case only, so lower-case shell `$(cmd)` substitutions pass through untouched
VAR_RE = re.compile(r"\$\(([A-Z][A-Z0-9_]*)\)")


@dataclass(frozen=True)
class PipelineConfig:
    pipeline: Pipeline
    source: str
    name: str
    title: str = ""
    default_target: str | None = None
    variables: Mapping[str, str] = field(default_factory=dict)


def load_yaml_text(text: str, source: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{source}: invalid YAML: {exc}") from exc


def builtin_pipeline_text(name: str = BUILTIN_PIPELINE) -> str:
    ref = resources.files("stagectl").joinpath("pipelines", f"{name}.yaml")
    if not ref.is_file():
        raise ConfigError(f"unknown builtin pipeline: {name}")
    return ref.read_text(encoding="utf-8")


def expand_variables(variables: Mapping[str, object], overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    raw = {key: _scalar(value) for key, value in variables.items()}
    raw.update(overrides or {})
    resolved: dict[str, str] = {}

    def _resolve(name: str, chain: tuple[str, ...]) -> str:
        if name in resolved:
            return resolved[name]
        if name in chain:
            raise ConfigError(f"recursive variable reference: {' -> '.join((*chain, name))}")
        if name not in raw:
            raise ConfigError(f"undefined variable $({name}) referenced by $({chain[-1]})")
        value = VAR_RE.sub(lambda m: _resolve(m.group(1), (*chain, name)), raw[name])
        resolved[name] = value
        return value

    for key in raw:
        _resolve(key, ())
    return resolved


def interpolate(text: str, variables: Mapping[str, str], where: str) -> str:
    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            raise ConfigError(f"{where}: undefined variable $({name})")
        return variables[name]

    return VAR_RE.sub(_sub, text)


def _scalar(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _build_command(
    raw: Any,
    *,
    stage: str,
    pipeline: Pipeline,
    title: str,
    shell: tuple[str, ...],
    variables: Mapping[str, str],
    base_env: Mapping[str, str],
) -> Command:
    where = f"stage `{stage}`"
    if isinstance(raw, str):
        raw = {"run": raw}
    if "echo" in raw:
        return EchoCommand(interpolate(str(raw["echo"]), variables, where))
    if "builtin" in raw:
        return HelpCommand(pipeline, title)
    env = {**base_env, **{k: interpolate(_scalar(v), variables, where) for k, v in (raw.get("env") or {}).items()}}
    workdir = raw.get("cwd")
    return ShellCommand(
        script=interpolate(str(raw["run"]), variables, where),
        shell=shell,
        workdir=interpolate(str(workdir), variables, where) if workdir else None,
        env=env,
        ignore_errors=bool(raw.get("ignore_errors", False)),
    )


def build_pipeline(
    data: Any,
    source: str,
    overrides: Mapping[str, str] | None = None,
) -> PipelineConfig:
    errors = schema_errors(data, "pipeline-config")
    if errors:
        raise ConfigError(f"{source}: invalid pipeline config: " + "; ".join(errors))

    variables = expand_variables(data.get("variables") or {}, overrides)
    shell = tuple(data.get("shell") or DEFAULT_SHELL)
    base_env = {k: interpolate(_scalar(v), variables, "env") for k, v in (data.get("env") or {}).items()}
    name = str(data.get("name") or Path(source).stem)
    title = str(data.get("title") or "")

    pipeline = Pipeline(name)
    for raw_stage in data["stages"]:
        stage_name = raw_stage["name"]
        commands = tuple(
            _build_command(
                raw,
                stage=stage_name,
                pipeline=pipeline,
                title=title,
                shell=shell,
                variables=variables,
                base_env=base_env,
            )
            for raw in raw_stage.get("commands") or []
        )
        pipeline.register(
            Stage(
                name=stage_name,
                prerequisites=tuple(raw_stage.get("prerequisites") or ()),
                commands=commands,
                verbosity_sensitive=bool(raw_stage.get("verbosity_sensitive", True)),
                description=interpolate(str(raw_stage.get("description") or ""), variables, f"stage `{stage_name}`"),
            )
        )
    pipeline.validate()

    default_target = data.get("default_target")
    if default_target is not None and default_target not in pipeline:
        raise ConfigError(f"{source}: default_target `{default_target}` is not a registered stage")
    return PipelineConfig(
        pipeline=pipeline,
        source=source,
        name=name,
        title=title,
        default_target=default_target,
        variables=variables,
    )


def load_pipeline(path: Path | None, overrides: Mapping[str, str] | None = None) -> PipelineConfig:
    """Load `path`, or the bundled galaxy-collection pipeline when no file is configured."""
    if path is None:
        source = f"builtin:{BUILTIN_PIPELINE}"
        text = builtin_pipeline_text()
    else:
        source = str(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigError(f"pipeline config not found: {path}") from None
    return build_pipeline(load_yaml_text(text, source), source, overrides)
