from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

import jsonschema

from ..errors import ScriptError
from ..exit_codes import ERR_VALIDATION


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    text = resources.files("stagectl").joinpath("schemas", f"{name}.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


def schema_errors(payload: object, name: str) -> list[str]:
    schema = load_schema(name)
    validator = jsonschema.Draft202012Validator(schema)
    errors: list[str] = []
    for err in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path]):
        pointer = "/".join(str(p) for p in err.absolute_path)
        errors.append(f"{pointer or '<root>'}: {err.message}")
    return errors


def validate_payload(payload: object, name: str) -> None:
    try:
        jsonschema.validate(payload, load_schema(name))
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        raise ScriptError(f"schema validation failed at {loc}: {exc.message}", ERR_VALIDATION, "schema_error") from exc
