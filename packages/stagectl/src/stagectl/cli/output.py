"""CLI payload output helpers."""

from __future__ import annotations

import sys

from .. import __version__
from ..core.context import RunContext
from ..core.serialize import dumps_json


def emit(payload: dict[str, object], as_json: bool) -> None:
    print(dumps_json(payload, pretty=not as_json))


def build_base_payload(ctx: RunContext, kind: str, status: str = "ok") -> dict[str, object]:
    return {
        "schema_version": 1,
        "tool": "stagectl",
        "version": __version__,
        "kind": kind,
        "status": status,
        "run_id": ctx.run_id,
        "project_root": str(ctx.project_root),
    }


def render_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error") -> str:
    if as_json:
        return dumps_json(
            {
                "schema_version": 1,
                "tool": "stagectl",
                "status": "error",
                "errors": [{"code": code, "kind": kind, "message": message}],
            },
            pretty=False,
        )
    return f"stagectl: {message}"


def print_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error") -> None:
    print(render_error(as_json=as_json, message=message, code=code, kind=kind), file=sys.stderr)
