from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from junitparser import Error, Failure, JUnitXml, TestCase, TestSuite

from assertion_oracle.metrics import collect_metrics
from assertion_oracle.verdicts import EvaluatedAssertion, Evaluation


def _case_name(verdict: EvaluatedAssertion) -> str:
    return f"{verdict.display_type}: {verdict.message}"


def _failure_text(verdict: EvaluatedAssertion) -> str:
    """Serialized details that explain a failed verdict."""
    if verdict.counter_details is not None:
        return json.dumps({"counter_details": verdict.counter_details}, indent=2)
    if verdict.example_details is not None:
        return json.dumps({"example_details": verdict.example_details}, indent=2)
    return ""


def write_junit(
    junit_path: Path, evaluation: Evaluation, suite_name: str = "assertions"
) -> Path:
    """Write junit.xml with one test case per verdict, return path."""
    xml = JUnitXml()
    suite = TestSuite(suite_name)

    for key, val in collect_metrics(evaluation).items():
        suite.add_property(key, str(val))

    for verdict in evaluation.verdicts:
        case = TestCase(_case_name(verdict))
        case.classname = verdict.location.file
        if not verdict.passed:
            failure = Failure(f"Assertion '{verdict.id}' failed")
            failure.text = _failure_text(verdict)
            case.result = [failure]
        suite.add_testcase(case)

    for exc in evaluation.errors:
        case = TestCase(exc.assertion_id)
        case.classname = "undeclared"
        case.result = [Error(str(exc), "MissingDeclarationError")]
        suite.add_testcase(case)

    # Use append (not +=) to preserve properties
    xml.append(suite)

    junit_path.parent.mkdir(parents=True, exist_ok=True)
    xml.write(str(junit_path), pretty=True)
    return junit_path


def _load_suites(junit_path: Path) -> list[dict[str, Any]]:
    xml = JUnitXml.fromfile(str(junit_path))
    suites = []
    for suite in xml:
        cases = []
        for case in suite:
            result = None
            if case.result:
                result = {
                    "status": type(case.result[0]).__name__,
                    "message": case.result[0].message or "",
                    "text": case.result[0].text or "",
                }
            cases.append(
                {"name": case.name, "classname": case.classname, "result": result}
            )
        # Failures and errors first, then by file
        cases.sort(key=lambda c: (c["result"] is None, c["classname"] or "", c["name"]))

        suites.append(
            {
                "name": suite.name,
                "tests": suite.tests,
                "failures": suite.failures,
                "errors": suite.errors,
                "properties": {p.name: p.value for p in suite.properties()},
                "cases": cases,
            }
        )
    return suites


def generate_report(junit_path: Path, report_path: Path | None = None) -> Path:
    """Render junit.xml → report.html using Jinja2 template, return path."""
    from jinja2 import Environment, FileSystemLoader

    if report_path is None:
        report_path = junit_path.with_name("report.html")

    suites = _load_suites(junit_path)
    total_tests = sum(s["tests"] for s in suites)
    total_failures = sum(s["failures"] for s in suites)
    total_errors = sum(s["errors"] for s in suites)

    tmpl_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(str(tmpl_dir)), autoescape=True)
    template = env.get_template("report.html.j2")

    html = template.render(
        suites=suites,
        total_tests=total_tests,
        total_failures=total_failures,
        total_errors=total_errors,
        source=str(junit_path),
    )
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(html, encoding="utf-8")
    return report_path
