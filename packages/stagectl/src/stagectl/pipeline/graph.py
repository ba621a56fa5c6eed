from __future__ import annotations

from .registry import Pipeline


def render_tree(pipeline: Pipeline, root: str, prefix: str = "") -> list[str]:
    lines = [f"{prefix}{root}"]
    deps = list(pipeline.get(root).prerequisites)
    child_prefix = prefix.replace("├─ ", "│  ").replace("└─ ", "   ")
    for i, dep in enumerate(deps):
        branch = "└─ " if i == len(deps) - 1 else "├─ "
        lines.extend(render_tree(pipeline, dep, child_prefix + branch))
    return lines
