from __future__ import annotations

from typing import Iterable

from ..errors import UnknownStageError
from .model import Stage
from .registry import Pipeline


def dedupe(names: Iterable[str]) -> list[str]:
    out: list[str] = []
    for name in names:
        if name not in out:
            out.append(name)
    return out


def resolve_order(pipeline: Pipeline, targets: Iterable[str]) -> list[Stage]:
    """Depth-first prerequisite closure of `targets`, each stage once."""
    requested = dedupe(targets)
    unknown = [name for name in requested if name not in pipeline]
    if unknown:
        raise UnknownStageError(unknown)

    order: list[Stage] = []
    seen: set[str] = set()

    def _visit(name: str) -> None:
        if name in seen:
            return
        seen.add(name)
        stage = pipeline.get(name)
        for dep in stage.prerequisites:
            _visit(dep)
        order.append(stage)

    for name in requested:
        _visit(name)
    return order
