"""Decoding and classification of SDK log records."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from assertion_oracle.errors import DecodeError


class AssertType(str, Enum):
    ALWAYS = "always"
    SOMETIMES = "sometimes"
    REACHABILITY = "reachability"


class Location(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, strict=True)
    begin_column: int
    begin_line: int
    class_: str = Field(alias="class")
    file: str
    function: str


class SdkInfo(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)
    language: str
    version: str


class SetupStatus(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)
    status: str
    details: Any


class AssertionInstance(BaseModel):
    """One emitted assertion record.

    ``hit=False`` marks the declaration (catalog) entry that carries the static
    metadata; ``hit=True`` marks a runtime observation whose ``condition`` was
    evaluated.
    """

    model_config = ConfigDict(frozen=True, strict=True)
    # Enum members are matched by value from decoded JSON
    assert_type: AssertType = Field(strict=False)
    condition: bool
    display_type: str
    hit: bool
    must_hit: bool
    id: str
    message: str
    location: Location
    details: Any


class SendEvent(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)
    event_name: str
    details: Any


class SdkRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)
    antithesis_sdk: SdkInfo


class SetupRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)
    antithesis_setup: SetupStatus


class AssertRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)
    antithesis_assert: AssertionInstance


class SendEventRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)
    send_event: SendEvent


class NamedEvent(BaseModel):
    """Fallback for single-key records outside the known schema."""

    model_config = ConfigDict(frozen=True)
    event_name: str
    details: Any = None


# Tried in order; the first envelope that validates wins.
RECORD_MATCHERS: tuple[type[BaseModel], ...] = (
    SdkRecord,
    AssertRecord,
    SetupRecord,
    SendEventRecord,
)

Record = Union[SdkRecord, SetupRecord, AssertRecord, SendEventRecord, NamedEvent]


def classify_record(raw: Any) -> Record:
    """Classify one decoded JSON value.

    Raises DecodeError if the value is neither a known record nor a non-empty
    mapping.
    """
    for matcher in RECORD_MATCHERS:
        try:
            return matcher.model_validate(raw)
        except ValidationError:
            continue

    if not isinstance(raw, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(raw).__name__}"
        )
    if not raw:
        raise DecodeError("empty JSON object has no event name")

    event_name = next(iter(raw))
    return NamedEvent(event_name=event_name, details=raw[event_name])


def _reject_constant(name: str) -> Any:
    raise DecodeError(f"{name} is not valid JSON")


def parse_line(line: str, line_number: int | None = None) -> Record:
    try:
        raw = json.loads(line, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise DecodeError(
            f"invalid JSON at column {exc.colno}: {exc.msg}", line_number
        ) from exc
    except DecodeError as exc:
        raise DecodeError(exc.reason, line_number) from exc

    try:
        return classify_record(raw)
    except DecodeError as exc:
        raise DecodeError(exc.reason, line_number) from exc


def parse_lines(lines: Iterable[str]) -> list[Record]:
    """Parse log lines in order, skipping blank ones.

    The first undecodable line aborts the whole batch.
    """
    records: list[Record] = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        records.append(parse_line(line, line_number))
    return records


def is_assertion(record: Record) -> bool:
    return isinstance(record, AssertRecord)


def record_kind(record: Record) -> str:
    """Short label used when logging a record."""
    if isinstance(record, SdkRecord):
        return "antithesis_sdk"
    if isinstance(record, SetupRecord):
        return "antithesis_setup"
    if isinstance(record, AssertRecord):
        return "antithesis_assert"
    if isinstance(record, SendEventRecord):
        return f"send_event:{record.send_event.event_name}"
    return f"event:{record.event_name}"
