"""Baseline resolution and the pass/fail decision for a coverage submission.

The baseline is the latest snapshot for the submission's own branch. When
that branch has no history and declares a different base branch, the latest
snapshot of the base branch is used instead and the verdict message says so.

Comparison is on the two-decimal rounded percents, so measurements that
round to the same value are equal, and equal values pass.
"""

from typing import Optional

from .logging_config import get_logger
from .models import CoverageCounts, CoverageSnapshot, Verdict, format_percent
from .persistence.ledger import CoverageLedger

logger = get_logger(__name__)

FALLBACK_NOTE = "Branch not found, trying base branch {base_branch}\n"


class Comparator:
    """Evaluates submissions against the ledger. Never writes to it."""

    def __init__(self, ledger: CoverageLedger):
        self.ledger = ledger

    def resolve_baseline(
        self, project_name: str, branch: str, test_name: str, base_branch: str
    ) -> tuple[Optional[CoverageSnapshot], Optional[str]]:
        """Return ``(baseline, fallback_branch)``.

        ``fallback_branch`` is only set when the baseline was found on the
        base branch.
        """
        baseline = self.ledger.latest(project_name, branch, test_name)
        if baseline is not None:
            return baseline, None
        if base_branch == branch:
            return None, None

        baseline = self.ledger.latest(project_name, base_branch, test_name)
        if baseline is None:
            return None, None
        logger.info(
            "No history for %s/%s/%s, comparing against base branch %s",
            project_name,
            branch,
            test_name,
            base_branch,
        )
        return baseline, base_branch

    def evaluate(
        self,
        project_name: str,
        branch: str,
        test_name: str,
        base_branch: str,
        new_counts: CoverageCounts,
    ) -> Verdict:
        """Decide whether *new_counts* may replace the current coverage.

        Raises:
            DegenerateMetricError: If *new_counts* has a zero total.
        """
        new_percent = new_counts.coverage_percent
        baseline, fallback_branch = self.resolve_baseline(
            project_name, branch, test_name, base_branch
        )

        if baseline is None:
            return Verdict(
                accepted=True,
                message=f"{format_percent(new_percent)}% >= 0",
                new_percent=new_percent,
            )

        prefix = FALLBACK_NOTE.format(base_branch=fallback_branch) if fallback_branch else ""
        baseline_percent = baseline.coverage_percent
        new_text = format_percent(new_percent)
        baseline_text = format_percent(baseline_percent)

        if new_percent >= baseline_percent:
            message = f"{prefix}{new_text}% >= {baseline_text}%"
            accepted = True
        else:
            message = (
                f"{prefix}New coverage ({new_text}%) needs to equal or exceed "
                f"current coverage ({baseline_text}%)."
            )
            accepted = False
            logger.info(
                "Rejected %s/%s/%s: %s%% < %s%%",
                project_name,
                branch,
                test_name,
                new_text,
                baseline_text,
            )

        return Verdict(
            accepted=accepted,
            message=message,
            new_percent=new_percent,
            baseline=baseline,
            fallback_branch=fallback_branch,
        )
