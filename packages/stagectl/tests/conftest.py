from __future__ import annotations

import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import pytest
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

_ROOT = Path(__file__).resolve().parents[3]
_HYPOTHESIS_DB = _ROOT / "artifacts/stagectl/.hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("stagectl", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB))
settings.load_profile("stagectl")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)


@pytest.fixture(autouse=True)
def clean_stagectl_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("V", "STAGECTL_CONFIG", "RUN_ID"):
        monkeypatch.delenv(name, raising=False)


@dataclass
class FakeCommand:
    """Command double: records its label in a shared journal instead of spawning a process."""

    label: str
    code: int = 0
    ignore_errors: bool = False
    journal: list[str] = field(default_factory=list)

    def describe(self) -> str:
        return self.label

    def execute(self, cwd: Path) -> int:
        self.journal.append(self.label)
        return self.code


@pytest.fixture
def journal() -> list[str]:
    return []


@pytest.fixture
def fake(journal: list[str]) -> Callable[..., FakeCommand]:
    def _make(label: str, code: int = 0, ignore_errors: bool = False) -> FakeCommand:
        return FakeCommand(label, code, ignore_errors, journal)

    return _make


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    def _write(text: str) -> Path:
        path = tmp_path / "stagectl.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
