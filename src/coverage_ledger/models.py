"""Data models for coverage snapshots and the derived coverage-percent metric.

A snapshot is an immutable record of one coverage measurement for a
``(project_name, branch, test_name)`` triple. The triple is not unique:
the "current" value is always the snapshot with the latest ``created_date``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .exceptions import DegenerateMetricError


def round_percent(covered: int, total: int) -> float:
    """``covered / total`` as a percentage, rounded half up to two decimals.

    Rounds the exact integer ratio: 23/160 is 14.375% and gives 14.38.
    """
    hundredths = (2 * 10000 * covered + total) // (2 * total)
    return hundredths / 100


def format_percent(percent: float) -> str:
    """Render a percent the way verdict messages show it.

    >>> format_percent(100.0), format_percent(0.14), format_percent(95.5)
    ('100', '0.14', '95.5')
    """
    return f"{percent:.2f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class CoverageCounts:
    """The six externally computed counts of a coverage measurement."""

    statements: int
    conditionals: int
    methods: int
    covered_statements: int
    covered_conditionals: int
    covered_methods: int

    @property
    def total(self) -> int:
        return self.statements + self.conditionals + self.methods

    @property
    def total_covered(self) -> int:
        return self.covered_statements + self.covered_conditionals + self.covered_methods

    @property
    def coverage_percent(self) -> float:
        return coverage_percent(self)


def coverage_percent(counts: CoverageCounts) -> float:
    """Covered units over total units, as a percentage rounded to two decimals.

    Raises:
        DegenerateMetricError: If the totals sum to zero.
    """
    if counts.total == 0:
        raise DegenerateMetricError()
    return round_percent(counts.total_covered, counts.total)


@dataclass(frozen=True)
class CoverageSnapshot:
    """One stored coverage measurement."""

    id: int
    project_name: str
    branch: str
    test_name: str
    base_branch: str
    counts: CoverageCounts
    created_date: datetime
    ref: Optional[str] = None

    @property
    def coverage_percent(self) -> float:
        return self.counts.coverage_percent


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating a submission against its baseline.

    ``fallback_branch`` is set when the baseline came from the declared
    base branch because the submission's own branch had no history.
    """

    accepted: bool
    message: str
    new_percent: float
    baseline: Optional[CoverageSnapshot] = None
    fallback_branch: Optional[str] = None

    @property
    def baseline_percent(self) -> Optional[float]:
        if self.baseline is None:
            return None
        return self.baseline.coverage_percent
