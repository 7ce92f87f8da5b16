from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from assertion_oracle.config import OracleConfig
from assertion_oracle.errors import DecodeError
from assertion_oracle.metrics import all_passed, collect_metrics
from assertion_oracle.records import parse_lines
from assertion_oracle.reporting.jsonl import write_verdicts
from assertion_oracle.reporting.junit import generate_report, write_junit
from assertion_oracle.verdicts import Evaluation, evaluate_assertions


@dataclass
class OracleResult:
    evaluation: Evaluation
    metrics: dict[str, Any]
    output_path: Path
    junit_path: Path | None = None
    report_path: Path | None = None

    @property
    def all_passed(self) -> bool:
        return all_passed(self.evaluation)


class Oracle:
    """Evaluates one assertion log into a verdict file."""

    def __init__(
        self,
        config: OracleConfig,
        logger: logging.Logger | None = None,
    ):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def evaluate_file(self, input_path: Path) -> Evaluation:
        """Read, classify and evaluate every record in input_path."""
        self.logger.debug(f"Reading {input_path}")
        try:
            contents = input_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(
                f"invalid UTF-8 at byte {exc.start} of {input_path}"
            ) from exc
        records = parse_lines(contents.split("\n"))
        self.logger.debug(f"Parsed {len(records)} record(s)")
        return evaluate_assertions(
            records,
            missing_declaration=self.config.missing_declaration.value,
            logger=self.logger,
        )

    def execute(self, input_path: Path, output_path: Path) -> OracleResult:
        """Evaluate input_path and write verdicts (and optional reports).

        Nothing is written if the input cannot be evaluated.
        """
        evaluation = self.evaluate_file(input_path)
        metrics = collect_metrics(evaluation)
        self.logger.info(
            f"{metrics['assertion_count']} assertion(s): "
            f"{metrics['assertion_pass_count']} passed, "
            f"{metrics['assertion_fail_count']} failed, "
            f"{metrics['missing_declaration_count']} undeclared, "
            f"{metrics['ignored_record_count']} record(s) ignored"
        )

        write_verdicts(output_path, evaluation.verdicts)
        self.logger.debug(f"Wrote verdicts to {output_path}")

        result = OracleResult(
            evaluation=evaluation, metrics=metrics, output_path=output_path
        )

        if self.config.junit:
            result.junit_path = write_junit(
                Path(self.config.junit), evaluation, self.config.suite_name
            )
            self.logger.debug(f"Wrote JUnit XML to {result.junit_path}")

        if self.config.report:
            report_path = Path(self.config.report)
            if result.junit_path is not None:
                result.report_path = generate_report(result.junit_path, report_path)
            else:
                # Rendered from a throwaway JUnit file
                with tempfile.TemporaryDirectory() as tmp_dir:
                    junit_path = write_junit(
                        Path(tmp_dir) / "junit.xml", evaluation, self.config.suite_name
                    )
                    result.report_path = generate_report(junit_path, report_path)
            self.logger.debug(f"Wrote HTML report to {result.report_path}")

        return result
