"""Centralized environment variable helpers."""

from __future__ import annotations

import os

_FALSY = frozenset({"", "0", "n", "no", "false", "off"})


def getenv(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return is_truthy(raw)


def is_truthy(raw: str) -> bool:
    # mirrors make's `ifeq ($(V),0)`: anything that is not an explicit "off" turns the flag on
    return raw.strip().lower() not in _FALSY
