from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path

from .. import __version__
from ..config.loader import PipelineConfig, load_pipeline
from ..core.context import RunContext
from ..core.logging import log_event
from ..core.paths import resolve_under
from ..core.schema import validate_payload
from ..core.serialize import dumps_json
from ..errors import ScriptError
from ..exit_codes import ERR_INTERRUPTED, ERR_USAGE
from ..pipeline.graph import render_tree
from ..pipeline.help import render_help
from ..pipeline.resolve import resolve_order
from ..pipeline.runner import PipelineRunner, RunnerConfig, RunnerEvent
from .output import build_base_payload, emit, print_error

_OVERRIDE_RE = re.compile(r"^([A-Z][A-Z0-9_]*)=(.*)$", re.S)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="stagectl", description="Run declared build stages in prerequisite order.")
    p.add_argument("--version", action="version", version=f"stagectl {__version__}")
    p.add_argument("--config", help="pipeline config path (default: STAGECTL_CONFIG, ./stagectl.yaml or the builtin pipeline)")
    p.add_argument("--cwd", help="project root the commands run in")
    p.add_argument("--run-id", help="run identifier for reports")
    p.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="override a pipeline variable (repeatable)",
    )
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--log-json", action="store_true", help="emit structured JSON log lines on stderr")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="echo every command before it runs (same as V=1)")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    run_p = sub.add_parser("run", help="run stages and their prerequisites")
    run_p.add_argument("targets", nargs="*", help="stage names (default: the pipeline's default_target)")
    run_p.add_argument("--dry-run", action="store_true", help="print the commands without running them")
    run_p.add_argument("--out-file", help="write the JSON run report to this path")

    sub.add_parser("list", help="list registered stages")

    graph_p = sub.add_parser("graph", help="print a stage's prerequisite tree")
    graph_p.add_argument("target")

    explain_p = sub.add_parser("explain", help="describe a stage, its resolved order and commands")
    explain_p.add_argument("target")

    sub.add_parser("validate", help="validate the pipeline config")
    sub.add_parser("version", help="print the stagectl version")
    return p


def parse_overrides(raw: list[str]) -> tuple[tuple[str, str], ...]:
    out: list[tuple[str, str]] = []
    for item in raw:
        m = _OVERRIDE_RE.match(item)
        if not m:
            raise ScriptError(f"invalid --set value `{item}`: expected NAME=VALUE with an upper-case NAME", ERR_USAGE, "usage_error")
        out.append((m.group(1), m.group(2)))
    return tuple(out)


def _load(ctx: RunContext) -> PipelineConfig:
    cfg = load_pipeline(ctx.config_path, dict(ctx.overrides))
    log_event(ctx, "debug", "config", "loaded", source=cfg.source, stages=len(cfg.pipeline))
    return cfg


def _log_runner_event(ctx: RunContext, event: RunnerEvent) -> None:
    level = {"command-failed": "error", "command-ignored": "warn"}.get(event.event, "info")
    fields: dict[str, object] = {"seq": event.seq, "stage": event.stage, "status": event.status}
    if event.duration_ms:
        fields["duration_ms"] = event.duration_ms
    if event.message:
        fields["message"] = event.message
    log_event(ctx, level, "runner", event.event, **fields)


def _write_report(ctx: RunContext, out_file: str, text: str) -> Path:
    out = resolve_under(ctx.project_root, out_file)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    return out


def run_stages(ctx: RunContext, ns: argparse.Namespace) -> int:
    cfg = _load(ctx)
    targets = list(ns.targets) or ([cfg.default_target] if cfg.default_target else [])
    if not targets:
        raise ScriptError("no target given and the pipeline declares no default_target", ERR_USAGE, "usage_error")
    runner = PipelineRunner(
        cfg.pipeline,
        RunnerConfig(cwd=ctx.project_root, verbose=ctx.echo_commands, dry_run=ns.dry_run),
        on_event=lambda event: _log_runner_event(ctx, event),
    )
    result = runner.run(targets)
    payload = result.to_payload(ctx.run_id)
    validate_payload(payload, "run-report")

    if ns.out_file:
        out = _write_report(ctx, ns.out_file, dumps_json(payload, pretty=True))
        log_event(ctx, "info", "runner", "report-written", path=str(out))
    if ctx.as_json:
        print(dumps_json(payload))
    if result.failure is not None:
        failure = result.failure
        print(
            f"stagectl: *** [{failure.stage}] command exited with {failure.exit_code}: {failure.command.splitlines()[0]}",
            file=sys.stderr,
        )
    return result.exit_code


def list_stages(ctx: RunContext) -> int:
    cfg = _load(ctx)
    if not ctx.as_json:
        for line in render_help(cfg.pipeline, cfg.title):
            print(line)
        return 0
    payload = build_base_payload(ctx, "stage-list")
    payload.update(
        {
            "pipeline": cfg.name,
            "source": cfg.source,
            "default_target": cfg.default_target,
            "stages": [
                {
                    "name": stage.name,
                    "description": stage.description,
                    "prerequisites": list(stage.prerequisites),
                    "command_count": len(stage.commands),
                    "verbosity_sensitive": stage.verbosity_sensitive,
                }
                for stage in cfg.pipeline
            ],
        }
    )
    emit(payload, as_json=True)
    return 0


def graph_stage(ctx: RunContext, target: str) -> int:
    cfg = _load(ctx)
    tree = render_tree(cfg.pipeline, target)
    if ctx.as_json:
        payload = build_base_payload(ctx, "stage-graph")
        payload.update({"target": target, "tree": tree, "order": [s.name for s in resolve_order(cfg.pipeline, [target])]})
        emit(payload, as_json=True)
        return 0
    for line in tree:
        print(line)
    return 0


def explain_stage(ctx: RunContext, target: str) -> int:
    cfg = _load(ctx)
    stage = cfg.pipeline.get(target)
    order = [s.name for s in resolve_order(cfg.pipeline, [target])]
    commands = [c.describe() for c in stage.commands]
    if ctx.as_json:
        payload = build_base_payload(ctx, "stage-explain")
        payload.update(
            {
                "target": target,
                "description": stage.description,
                "prerequisites": list(stage.prerequisites),
                "order": order,
                "commands": commands,
                "verbosity_sensitive": stage.verbosity_sensitive,
            }
        )
        emit(payload, as_json=True)
        return 0
    print(f"stage: {stage.name}")
    print(f"description: {stage.description or '-'}")
    print(f"prerequisites: {', '.join(stage.prerequisites) or '-'}")
    print(f"order: {' -> '.join(order)}")
    print("commands:")
    for line in commands or ["(none)"]:
        print(f"  {line}")
    return 0


def validate_config(ctx: RunContext) -> int:
    cfg = _load(ctx)
    payload = build_base_payload(ctx, "config-validate")
    payload.update({"source": cfg.source, "pipeline": cfg.name, "stage_count": len(cfg.pipeline)})
    if ctx.as_json:
        emit(payload, as_json=True)
    else:
        print(f"{cfg.source}: ok ({len(cfg.pipeline)} stages)")
    return 0


def dispatch(ctx: RunContext, ns: argparse.Namespace) -> int:
    if ns.cmd == "run":
        return run_stages(ctx, ns)
    if ns.cmd == "list":
        return list_stages(ctx)
    if ns.cmd == "graph":
        return graph_stage(ctx, ns.target)
    if ns.cmd == "explain":
        return explain_stage(ctx, ns.target)
    if ns.cmd == "validate":
        return validate_config(ctx)
    if ns.cmd == "version":
        print(f"stagectl {__version__}")
        return 0
    return ERR_USAGE


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    as_json = bool(ns.json)
    try:
        ctx = RunContext.from_args(
            run_id=ns.run_id,
            config=ns.config,
            cwd=ns.cwd,
            output_format="json" if as_json else "text",
            verbose=ns.verbose,
            quiet=ns.quiet,
            log_json=ns.log_json,
            overrides=parse_overrides(ns.overrides),
        )
        return dispatch(ctx, ns)
    except ScriptError as exc:
        print_error(as_json=as_json, message=exc.message, code=exc.code, kind=exc.kind)
        return exc.code
    except KeyboardInterrupt:
        print_error(as_json=as_json, message="interrupted", code=ERR_INTERRUPTED, kind="interrupted")
        return ERR_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
