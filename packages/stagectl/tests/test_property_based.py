from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st
from stagectl.errors import CyclicStageError
from stagectl.pipeline import Pipeline, PipelineRunner, RunnerConfig, Stage, resolve_order


@dataclass
class _Recorder:
    label: str
    journal: list[str] = field(default_factory=list)
    ignore_errors: bool = False

    def describe(self) -> str:
        return self.label

    def execute(self, cwd: Path) -> int:
        self.journal.append(self.label)
        return 0


@st.composite
def dags(draw: st.DrawFn) -> tuple[list[Stage], list[str]]:
    """Stages whose prerequisites only point at lower indices, in a shuffled registration order."""
    size = draw(st.integers(min_value=1, max_value=12))
    journal: list[str] = []
    stages: list[Stage] = []
    for i in range(size):
        prereqs = draw(st.lists(st.integers(min_value=0, max_value=i - 1), unique=True, max_size=3)) if i else []
        stages.append(Stage(f"s{i}", tuple(f"s{j}" for j in prereqs), (_Recorder(f"s{i}", journal),)))
    shuffled = draw(st.permutations(stages))
    targets = draw(st.lists(st.sampled_from([s.name for s in stages]), min_size=1, max_size=4))
    return list(shuffled), targets


def _closure(stages: dict[str, Stage], targets: list[str]) -> set[str]:
    out: set[str] = set()
    todo = list(targets)
    while todo:
        name = todo.pop()
        if name not in out:
            out.add(name)
            todo.extend(stages[name].prerequisites)
    return out


@given(dags())
def test_order_is_a_topological_closure(case: tuple[list[Stage], list[str]]) -> None:
    stages, targets = case
    pipeline = Pipeline.from_stages(stages)
    order = [s.name for s in resolve_order(pipeline, targets)]
    by_name = {s.name: s for s in stages}

    assert len(order) == len(set(order))
    assert set(order) == _closure(by_name, targets)
    position = {name: i for i, name in enumerate(order)}
    for name in order:
        for dep in by_name[name].prerequisites:
            assert position[dep] < position[name]


@given(dags())
def test_runner_executes_each_stage_once(case: tuple[list[Stage], list[str]]) -> None:
    stages, targets = case
    pipeline = Pipeline.from_stages(stages)
    journal = stages[0].commands[0].journal  # type: ignore[attr-defined]
    result = PipelineRunner(pipeline, RunnerConfig(cwd=Path("."))).run(targets)

    assert result.ok
    assert journal == list(result.order)
    assert len(journal) == len(set(journal))


@given(st.integers(min_value=2, max_value=8), st.data())
def test_back_edge_is_rejected_in_any_registration_order(length: int, data: st.DataObject) -> None:
    chain = [Stage(f"c{i}", (f"c{i + 1}",) if i + 1 < length else ("c0",)) for i in range(length)]
    order = data.draw(st.permutations(chain))
    pipeline = Pipeline()
    with pytest.raises(CyclicStageError) as exc:
        for stage in order:
            pipeline.register(stage)
    cycle = exc.value.cycle
    assert cycle[0] == cycle[-1]
    assert len(cycle) == length + 1
