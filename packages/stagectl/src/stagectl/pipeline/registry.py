from __future__ import annotations

from typing import Iterable, Iterator

from ..errors import ConfigError, CyclicStageError, UnknownStageError
from .model import Stage


class Pipeline:
    """Registered stages keyed by name, kept acyclic on every `register`."""

    def __init__(self, name: str = "pipeline") -> None:
        self.name = name
        self._stages: dict[str, Stage] = {}

    @classmethod
    def from_stages(cls, stages: Iterable[Stage], name: str = "pipeline") -> "Pipeline":
        pipeline = cls(name)
        for stage in stages:
            pipeline.register(stage)
        pipeline.validate()
        return pipeline

    def register(self, stage: Stage) -> None:
        if stage.name in self._stages:
            raise ConfigError(f"duplicate stage name: {stage.name}")
        cycle = self._cycle_through(stage)
        if cycle:
            raise CyclicStageError(cycle)
        self._stages[stage.name] = stage

    def _cycle_through(self, stage: Stage) -> list[str]:
        # the graph is acyclic before this call, so any new cycle must pass through `stage`
        path: list[str] = [stage.name]
        visited: set[str] = set()

        def _walk(name: str) -> bool:
            if name == stage.name:
                path.append(name)
                return True
            if name in visited or name not in self._stages:
                return False
            visited.add(name)
            path.append(name)
            for dep in self._stages[name].prerequisites:
                if _walk(dep):
                    return True
            path.pop()
            return False

        for dep in stage.prerequisites:
            if _walk(dep):
                return path
        return []

    def validate(self) -> None:
        for stage in self._stages.values():
            missing = [dep for dep in stage.prerequisites if dep not in self._stages]
            if missing:
                raise UnknownStageError(missing, referenced_by=stage.name)

    def get(self, name: str) -> Stage:
        try:
            return self._stages[name]
        except KeyError:
            raise UnknownStageError([name]) from None

    def names(self) -> list[str]:
        return list(self._stages)

    def __contains__(self, name: object) -> bool:
        return name in self._stages

    def __iter__(self) -> Iterator[Stage]:
        return iter(self._stages.values())

    def __len__(self) -> int:
        return len(self._stages)
