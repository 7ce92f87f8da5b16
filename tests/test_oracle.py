"""Tests for the end-to-end evaluation of a log file."""

import json

import pytest
from junitparser import JUnitXml

from assertion_oracle.config import OracleConfig
from assertion_oracle.errors import DecodeError, MissingDeclarationError
from assertion_oracle.oracle import Oracle
from assertion_oracle.reporting.jsonl import read_verdicts

from conftest import make_assert


def _read_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line]


def test_always_pass_scenario(write_log, tmp_path):
    log = write_log(
        [
            make_assert("A1", "always", must_hit=True),
            make_assert("A1", "always", hit=True, condition=True, details={"v": 1}),
        ]
    )
    out = tmp_path / "verdicts.jsonl"
    result = Oracle(OracleConfig()).execute(log, out)

    assert result.all_passed is True
    lines = _read_lines(out)
    assert len(lines) == 1
    assert lines[0]["id"] == "A1"
    assert lines[0]["passed"] is True
    assert lines[0]["example_details"] == {"v": 1}
    assert lines[0]["counter_details"] is None
    assert lines[0]["location"]["class"] == "Queue"


def test_always_fail_scenario(write_log, tmp_path):
    log = write_log(
        [
            make_assert("A1", "always", must_hit=True),
            make_assert("A1", "always", hit=True, condition=True, details={"v": 1}),
            make_assert("A1", "always", hit=True, condition=False, details={"v": 0}),
        ]
    )
    out = tmp_path / "verdicts.jsonl"
    result = Oracle(OracleConfig()).execute(log, out)

    assert result.all_passed is False
    (line,) = _read_lines(out)
    assert line["passed"] is False
    assert line["counter_details"] == {"v": 0}


def test_named_events_do_not_abort(write_log, tmp_path):
    log = write_log(
        [
            {"custom_event": {"x": 1}},
            make_assert("R1", "reachability", must_hit=False),
        ]
    )
    out = tmp_path / "verdicts.jsonl"
    result = Oracle(OracleConfig()).execute(log, out)

    assert result.metrics["ignored_record_count"] == 1
    (line,) = _read_lines(out)
    assert line["id"] == "R1"
    assert line["passed"] is True


def test_undeclared_id_aborts_without_output(write_log, tmp_path):
    log = write_log(
        [
            make_assert("A1"),
            make_assert("ghost", hit=True, condition=True),
        ]
    )
    out = tmp_path / "verdicts.jsonl"
    with pytest.raises(MissingDeclarationError):
        Oracle(OracleConfig()).execute(log, out)
    assert not out.exists()


def test_decode_error_aborts_without_output(write_log, tmp_path):
    log = write_log([make_assert("A1"), "[1, 2]"])
    out = tmp_path / "verdicts.jsonl"
    with pytest.raises(DecodeError, match="line 2"):
        Oracle(OracleConfig()).execute(log, out)
    assert not out.exists()


def test_report_policy_writes_remaining_verdicts(write_log, tmp_path):
    log = write_log(
        [
            make_assert("A1"),
            make_assert("A1", hit=True, condition=True),
            make_assert("ghost", hit=True, condition=True),
        ]
    )
    out = tmp_path / "verdicts.jsonl"
    result = Oracle(OracleConfig(missing_declaration="report")).execute(log, out)

    assert [v.id for v in read_verdicts(out)] == ["A1"]
    assert result.metrics["missing_declaration_count"] == 1
    assert result.all_passed is False


def test_junit_and_report_written_when_configured(write_log, tmp_path):
    log = write_log([make_assert("A1")])
    cfg = OracleConfig(
        junit=str(tmp_path / "out" / "junit.xml"),
        report=str(tmp_path / "out" / "report.html"),
        suite_name="nightly",
    )
    result = Oracle(cfg).execute(log, tmp_path / "verdicts.jsonl")

    assert result.junit_path == tmp_path / "out" / "junit.xml"
    assert result.report_path == tmp_path / "out" / "report.html"
    xml = JUnitXml.fromfile(str(result.junit_path))
    assert [s.name for s in xml] == ["nightly"]
    assert result.report_path.read_text().startswith("<!DOCTYPE html>")


def test_report_without_junit_leaves_no_xml(write_log, tmp_path):
    log = write_log([make_assert("A1")], name="logs.jsonl")
    out_dir = tmp_path / "out"
    cfg = OracleConfig(report=str(out_dir / "report.html"))
    result = Oracle(cfg).execute(log, out_dir / "verdicts.jsonl")

    assert result.junit_path is None
    assert result.report_path.exists()
    assert sorted(p.name for p in out_dir.iterdir()) == ["report.html", "verdicts.jsonl"]


def test_rerun_produces_identical_output(write_log, tmp_path):
    log = write_log(
        [
            make_assert("A1"),
            make_assert("S1", "sometimes"),
            make_assert("A1", hit=True, condition=True, details={"n": 1}),
            make_assert("S1", "sometimes", hit=True, condition=False),
        ]
    )
    first = tmp_path / "first.jsonl"
    second = tmp_path / "second.jsonl"
    Oracle(OracleConfig()).execute(log, first)
    Oracle(OracleConfig()).execute(log, second)
    assert sorted(first.read_text().splitlines()) == sorted(
        second.read_text().splitlines()
    )


def test_example_log(example_log, tmp_path):
    out = tmp_path / "verdicts.jsonl"
    result = Oracle(OracleConfig()).execute(example_log, out)

    verdicts = {v.id: v for v in read_verdicts(out)}
    assert set(verdicts) == {
        "queue depth bounded",
        "retry succeeds",
        "corrupt frame",
        "server started",
    }
    assert all(v.passed for v in verdicts.values())
    assert verdicts["queue depth bounded"].example_details == {"depth": 7}
    assert verdicts["retry succeeds"].counter_details == {"attempt": 1}
    assert verdicts["server started"].example_details == {"port": 8080}
    assert result.metrics["ignored_record_count"] == 4


def test_mistyped_observation_is_dropped(write_log, tmp_path):
    observation = make_assert("A1", "always", hit=True, condition=False)
    observation["antithesis_assert"]["condition"] = "no"
    log = write_log([make_assert("A1", "always", must_hit=False), observation])
    out = tmp_path / "verdicts.jsonl"
    result = Oracle(OracleConfig()).execute(log, out)

    (line,) = _read_lines(out)
    assert line["passed"] is True
    assert line["counter_details"] is None
    assert result.metrics["ignored_record_count"] == 1


def test_invalid_utf8_is_decode_error(tmp_path):
    log = tmp_path / "sdk.jsonl"
    log.write_bytes(b'{"custom_event": "\xff\xfe"}\n')
    out = tmp_path / "verdicts.jsonl"
    with pytest.raises(DecodeError, match="invalid UTF-8"):
        Oracle(OracleConfig()).execute(log, out)
    assert not out.exists()
