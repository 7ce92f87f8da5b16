"""Generate JSON Schema for the log record and verdict formats."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import TypeAdapter

from assertion_oracle.records import RECORD_MATCHERS, Record
from assertion_oracle.verdicts import EvaluatedAssertion

SchemaKind = Literal["input", "output"]


def _collect_refs(obj: object) -> set[str]:
    """Return all ``$defs`` names referenced via ``$ref`` inside *obj*."""
    refs: set[str] = set()
    if isinstance(obj, dict):
        if "$ref" in obj:
            ref = obj["$ref"]
            if ref.startswith("#/$defs/"):
                refs.add(ref.removeprefix("#/$defs/"))
        for v in obj.values():
            refs |= _collect_refs(v)
    elif isinstance(obj, list):
        for v in obj:
            refs |= _collect_refs(v)
    return refs


def _order_defs(defs: dict) -> dict:
    """Topologically sort ``$defs`` so referenced types precede referencing types."""
    ordered: dict[str, dict] = {}
    visited: set[str] = set()

    def _visit(name: str) -> None:
        if name in visited or name not in defs:
            return
        visited.add(name)
        for dep in _collect_refs(defs[name]):
            _visit(dep)
        ordered[name] = defs[name]

    for name in defs:
        _visit(name)
    return ordered


def generate_json_schema(kind: SchemaKind = "input") -> dict:
    if kind == "input":
        # The fallback variant accepts any single-key object, so the schema
        # documents the known envelopes plus a generic object.
        schema = TypeAdapter(Record).json_schema(by_alias=True)
        known = [{"$ref": f"#/$defs/{m.__name__}"} for m in RECORD_MATCHERS]
        schema = {
            "title": "LogRecord",
            "anyOf": known + [{"type": "object", "minProperties": 1}],
            "$defs": schema.get("$defs", {}),
        }
        schema["$defs"].pop("NamedEvent", None)
    elif kind == "output":
        schema = EvaluatedAssertion.model_json_schema(by_alias=True)
    else:
        raise ValueError(f"Unknown schema kind: '{kind}'")

    if "$defs" in schema:
        schema["$defs"] = _order_defs(schema["$defs"])
    return schema


def write_json_schema(path: Path, kind: SchemaKind = "input") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    schema = generate_json_schema(kind)
    path.write_text(json.dumps(schema, indent=2) + "\n")
