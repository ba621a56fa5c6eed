from __future__ import annotations

from pathlib import Path

CONFIG_FILENAME = "stagectl.yaml"


def find_config(start: Path) -> Path | None:
    cur = start.resolve()
    if cur.is_file():
        cur = cur.parent
    while True:
        candidate = cur / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            return None
        cur = cur.parent


def resolve_under(root: Path, configured: str | Path) -> Path:
    raw = Path(configured)
    return (root / raw).resolve() if not raw.is_absolute() else raw.resolve()
