"""Pytest configuration and fixtures."""

import json
import logging
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up assertion_oracle loggers after each test to prevent name collisions."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("assertion_oracle")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


LOCATION = {
    "begin_column": 5,
    "begin_line": 42,
    "class": "Queue",
    "file": "app/queue.py",
    "function": "push",
}


def make_assert(
    assertion_id: str,
    assert_type: str = "always",
    *,
    hit: bool = False,
    condition: bool = False,
    must_hit: bool = True,
    details=None,
) -> dict:
    """Build one ``antithesis_assert`` log record."""
    return {
        "antithesis_assert": {
            "assert_type": assert_type,
            "condition": condition,
            "display_type": assert_type.capitalize(),
            "hit": hit,
            "must_hit": must_hit,
            "id": assertion_id,
            "message": f"{assertion_id} holds",
            "location": dict(LOCATION),
            "details": details,
        }
    }


@pytest.fixture
def write_log(tmp_path):
    """Write records (dicts or raw strings) as a JSON-lines log and return its path."""

    def _write(records: list, name: str = "sdk.jsonl") -> Path:
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def example_log() -> Path:
    return Path(__file__).resolve().parents[1] / "examples" / "logs" / "sdk.jsonl"
