"""JSON-lines serialization of verdicts."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable

from assertion_oracle.verdicts import EvaluatedAssertion


def write_verdicts(path: Path, verdicts: Iterable[EvaluatedAssertion]) -> Path:
    """Write one compact JSON object per verdict.

    The file is written to a temporary sibling and moved into place, so a
    failure never leaves a partially written output.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        encoding="utf-8",
        delete=False,
    ) as handle:
        tmp_path = Path(handle.name)
        for verdict in verdicts:
            handle.write(verdict.to_json())
            handle.write("\n")

    try:
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
    return path


def read_verdicts(path: Path) -> list[EvaluatedAssertion]:
    verdicts = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if line.strip():
            verdicts.append(EvaluatedAssertion.model_validate_json(line))
    return verdicts
