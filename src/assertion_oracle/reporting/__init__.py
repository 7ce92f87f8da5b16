"""Serialization of verdicts: JSON lines, JUnit XML and HTML."""

from assertion_oracle.reporting.jsonl import read_verdicts, write_verdicts
from assertion_oracle.reporting.junit import generate_report, write_junit

__all__ = ["generate_report", "read_verdicts", "write_junit", "write_verdicts"]
