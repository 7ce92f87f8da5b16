"""Grouping of assertion records and per-assertion verdicts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict

from assertion_oracle.errors import MissingDeclarationError
from assertion_oracle.records import (
    AssertionInstance,
    AssertRecord,
    AssertType,
    Location,
    Record,
    record_kind,
)

MissingDeclarationPolicy = Literal["fail", "report"]


class EvaluatedAssertion(BaseModel):
    """Verdict for one assertion id.

    Field order is the serialized order of an output line.
    """

    model_config = ConfigDict(frozen=True)
    display_type: str
    id: str
    message: str
    location: Location
    example_details: Any = None
    counter_details: Any = None
    passed: bool

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


@dataclass
class AssertionGroup:
    """Running summary of every record seen for one assertion id.

    Each slot keeps only the most recent matching record.
    """

    declaration: AssertionInstance | None = None
    witness_true: AssertionInstance | None = None
    witness_false: AssertionInstance | None = None

    def add(self, instance: AssertionInstance) -> None:
        if not instance.hit:
            self.declaration = instance
        elif instance.condition:
            self.witness_true = instance
        else:
            self.witness_false = instance

    @property
    def reached(self) -> bool:
        return self.witness_true is not None or self.witness_false is not None


@dataclass
class Evaluation:
    verdicts: list[EvaluatedAssertion] = field(default_factory=list)
    errors: list[MissingDeclarationError] = field(default_factory=list)
    ignored: int = 0


def _details(instance: AssertionInstance | None) -> Any:
    return instance.details if instance is not None else None


def group_assertions(
    records: Iterable[Record], logger: logging.Logger | None = None
) -> tuple[dict[str, AssertionGroup], int]:
    """Group assertion records by id, in first-seen order.

    Returns the groups and the number of non-assertion records dropped.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    groups: dict[str, AssertionGroup] = {}
    ignored = 0
    for record in records:
        if not isinstance(record, AssertRecord):
            ignored += 1
            logger.info(f"Ignoring {record_kind(record)} record")
            continue
        instance = record.antithesis_assert
        groups.setdefault(instance.id, AssertionGroup()).add(instance)
    return groups, ignored


def evaluate_group(assertion_id: str, group: AssertionGroup) -> EvaluatedAssertion:
    """Reduce one group to its verdict.

    Raises MissingDeclarationError if no declaration record was seen.
    """
    declaration = group.declaration
    if declaration is None:
        raise MissingDeclarationError(assertion_id)

    example_details = None
    counter_details = None

    if declaration.assert_type == AssertType.ALWAYS:
        if declaration.must_hit:
            passed = group.witness_true is not None and group.witness_false is None
        else:
            passed = group.witness_false is None
        example_details = _details(group.witness_true)
        counter_details = _details(group.witness_false)
    elif declaration.assert_type == AssertType.SOMETIMES:
        passed = group.witness_true is not None
        example_details = _details(group.witness_true)
        counter_details = _details(group.witness_false)
    elif declaration.assert_type == AssertType.REACHABILITY:
        witness = (
            group.witness_true
            if group.witness_true is not None
            else group.witness_false
        )
        if declaration.must_hit:
            passed = group.reached
            example_details = _details(witness)
        else:
            passed = not group.reached
            counter_details = _details(witness)
    else:
        raise ValueError(f"Unknown assertion type: '{declaration.assert_type}'")

    return EvaluatedAssertion(
        display_type=declaration.display_type,
        id=declaration.id,
        message=declaration.message,
        location=declaration.location,
        example_details=example_details,
        counter_details=counter_details,
        passed=passed,
    )


def evaluate_assertions(
    records: Iterable[Record],
    *,
    missing_declaration: MissingDeclarationPolicy = "fail",
    logger: logging.Logger | None = None,
) -> Evaluation:
    """Group records by assertion id and compute one verdict per id.

    With ``missing_declaration="fail"`` an undeclared id aborts the whole
    evaluation. With ``"report"`` it is collected in ``Evaluation.errors`` and
    every other id is still evaluated.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    groups, ignored = group_assertions(records, logger=logger)
    evaluation = Evaluation(ignored=ignored)

    while groups:
        assertion_id = next(iter(groups))
        group = groups.pop(assertion_id)
        try:
            verdict = evaluate_group(assertion_id, group)
        except MissingDeclarationError as exc:
            if missing_declaration == "fail":
                raise
            logger.error(str(exc))
            evaluation.errors.append(exc)
            continue
        logger.debug(
            f"Assertion '{verdict.id}' ({group.declaration.assert_type.value}, "
            f"must_hit={group.declaration.must_hit}): passed={verdict.passed}"
        )
        evaluation.verdicts.append(verdict)

    return evaluation
