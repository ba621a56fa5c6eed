from __future__ import annotations

OK = 0
ERR_USAGE = 2
ERR_CONFIG = 10
ERR_UNKNOWN_STAGE = 11
ERR_CYCLE = 12
ERR_VALIDATION = 13
ERR_INTERNAL = 99
ERR_INTERRUPTED = 130


def from_returncode(returncode: int) -> int:
    """Map a subprocess return code to a shell-style exit status."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode
