"""JSON shapes for snapshots and verdicts.

Field names are camelCase to match the request parameters clients already
send (``coveredStatements``, ``baseBranch`` and so on).
"""

from __future__ import annotations

from typing import Any

from ..models import CoverageSnapshot, Verdict
from ..persistence.ledger import format_date


def snapshot_to_dict(snapshot: CoverageSnapshot) -> dict[str, Any]:
    counts = snapshot.counts
    return {
        "id": snapshot.id,
        "projectName": snapshot.project_name,
        "branch": snapshot.branch,
        "testName": snapshot.test_name,
        "baseBranch": snapshot.base_branch,
        "statements": counts.statements,
        "conditionals": counts.conditionals,
        "methods": counts.methods,
        "coveredStatements": counts.covered_statements,
        "coveredConditionals": counts.covered_conditionals,
        "coveredMethods": counts.covered_methods,
        "createdDate": format_date(snapshot.created_date),
        "ref": snapshot.ref,
        "coveragePercent": snapshot.coverage_percent,
    }


def verdict_to_dict(verdict: Verdict) -> dict[str, Any]:
    return {
        "accepted": verdict.accepted,
        "message": verdict.message,
        "newPercent": verdict.new_percent,
        "baselinePercent": verdict.baseline_percent,
        "fallbackBranch": verdict.fallback_branch,
        "baseline": snapshot_to_dict(verdict.baseline) if verdict.baseline else None,
    }
