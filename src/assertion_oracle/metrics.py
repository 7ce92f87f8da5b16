from __future__ import annotations

from typing import Any

from assertion_oracle.verdicts import Evaluation


def collect_metrics(evaluation: Evaluation) -> dict[str, Any]:
    """Summary counts for one evaluation."""
    passed = sum(1 for v in evaluation.verdicts if v.passed)
    failed = sum(1 for v in evaluation.verdicts if not v.passed)
    total = passed + failed
    pass_rate = (passed / total * 100) if total > 0 else 0.0

    return {
        "assertion_count": total,
        "assertion_pass_count": passed,
        "assertion_fail_count": failed,
        "assertion_pass_rate": round(pass_rate, 2),
        "missing_declaration_count": len(evaluation.errors),
        "ignored_record_count": evaluation.ignored,
    }


def all_passed(evaluation: Evaluation) -> bool:
    return not evaluation.errors and all(v.passed for v in evaluation.verdicts)
