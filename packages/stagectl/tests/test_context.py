from __future__ import annotations

from pathlib import Path

import pytest
from stagectl.core.context import RunContext
from stagectl.core.env import is_truthy


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1", True),
        ("yes", True),
        ("2", True),
        ("0", False),
        ("", False),
        ("off", False),
        ("False", False),
        (" no ", False),
    ],
)
def test_verbosity_values(raw: str, expected: bool) -> None:
    assert is_truthy(raw) is expected


def test_v_env_echoes_commands_without_raising_log_level(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("V", "1")
    ctx = RunContext.from_args(run_id="t", cwd=str(tmp_path))
    assert ctx.echo_commands
    assert not ctx.verbose


def test_verbose_flag_echoes_and_logs(tmp_path: Path) -> None:
    ctx = RunContext.from_args(run_id="t", cwd=str(tmp_path), verbose=True)
    assert ctx.echo_commands
    assert ctx.verbose


def test_quiet_wins_over_v(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("V", "1")
    ctx = RunContext.from_args(run_id="t", cwd=str(tmp_path), quiet=True)
    assert not ctx.echo_commands
    assert ctx.quiet


def test_defaults_to_builtin_pipeline_without_config(tmp_path: Path) -> None:
    ctx = RunContext.from_args(run_id="t", cwd=str(tmp_path))
    assert ctx.config_path is None
    assert ctx.project_root == tmp_path.resolve()
    assert not ctx.echo_commands
    assert not ctx.as_json


def test_config_discovered_from_subdirectory(tmp_path: Path, write_config) -> None:
    cfg = write_config("schema_version: 1\nstages: []\n")
    nested = tmp_path / "roles" / "docker"
    nested.mkdir(parents=True)
    ctx = RunContext.from_args(run_id="t", cwd=str(nested))
    assert ctx.config_path == cfg.resolve()
    assert ctx.project_root == tmp_path.resolve()


def test_config_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAGECTL_CONFIG", "ci/pipeline.yaml")
    ctx = RunContext.from_args(run_id="t", cwd=str(tmp_path))
    assert ctx.config_path == (tmp_path / "ci" / "pipeline.yaml").resolve()
    assert ctx.project_root == tmp_path.resolve()


def test_explicit_config_beats_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAGECTL_CONFIG", "env.yaml")
    ctx = RunContext.from_args(run_id="t", cwd=str(tmp_path), config="flag.yaml")
    assert ctx.config_path == (tmp_path / "flag.yaml").resolve()


def test_run_id_sources(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RUN_ID", "from-env")
    assert RunContext.from_args(cwd=str(tmp_path)).run_id == "from-env"
    assert RunContext.from_args(run_id="explicit", cwd=str(tmp_path)).run_id == "explicit"
    monkeypatch.delenv("RUN_ID")
    assert RunContext.from_args(cwd=str(tmp_path)).run_id.startswith("stagectl-")
