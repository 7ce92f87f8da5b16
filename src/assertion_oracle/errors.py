"""Errors raised while evaluating an assertion log."""

from __future__ import annotations


class OracleError(ValueError):
    """Base class for fatal evaluation errors."""


class DecodeError(OracleError):
    """A log line matches neither a known record nor the single-key fallback."""

    def __init__(self, reason: str, line_number: int | None = None):
        self.reason = reason
        self.line_number = line_number
        if line_number is not None:
            super().__init__(f"line {line_number}: {reason}")
        else:
            super().__init__(reason)


class MissingDeclarationError(OracleError):
    """An assertion id was observed at runtime but never declared."""

    def __init__(self, assertion_id: str):
        self.assertion_id = assertion_id
        super().__init__(
            f"Assertion '{assertion_id}' has no declaration (no record with hit=false)"
        )
