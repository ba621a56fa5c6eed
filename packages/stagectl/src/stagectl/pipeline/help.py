from __future__ import annotations

from .registry import Pipeline

_OPTIONS = (
    ("V=1", "Enable verbose output (show every command before it runs)"),
    ("--verbose", "Same as V=1"),
    ("--dry-run", "Print the commands a run would execute without running them"),
    ("--quiet", "Only emit errors from stagectl itself"),
)


def render_help(pipeline: Pipeline, title: str = "") -> list[str]:
    described = [stage for stage in pipeline if stage.description]
    width = max([len(stage.name) for stage in described] + [len(flag) for flag, _ in _OPTIONS] + [0]) + 4
    lines: list[str] = []
    if title:
        lines.extend([title, ""])
    lines.append("Usage:")
    for stage in described:
        lines.append(f"  stagectl run {stage.name.ljust(width)}{stage.description}")
    lines.append("Options:")
    for flag, text in _OPTIONS:
        lines.append(f"  {flag.ljust(width + len('stagectl run '))}{text}")
    return lines
