"""Assemble the chronological coverage series used by the trend chart.

A branch's own snapshots come first, oldest to newest. If the earliest one
declares a different base branch, up to ``backfill_limit`` base-branch
snapshots older than it are appended in the order they were fetched
(newest first). The combined list is not re-sorted, so its tail runs
backwards in time; the chart renderer orders points by timestamp itself.
"""

from dataclasses import dataclass, field
from datetime import datetime

from .models import CoverageSnapshot
from .persistence.ledger import CoverageLedger

DEFAULT_BACKFILL_LIMIT = 10


@dataclass(frozen=True)
class TrendPoint:
    """A single point of a coverage series."""

    timestamp: datetime
    coverage_percent: float
    branch: str


@dataclass
class TrendSeries:
    """Series for one ``(project, branch, test)`` triple."""

    project_name: str
    branch: str
    test_name: str
    points: list[TrendPoint] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"Code coverage for {self.project_name} / {self.test_name}"

    def __len__(self) -> int:
        return len(self.points)

    def sorted_points(self) -> list[TrendPoint]:
        return sorted(self.points, key=lambda p: p.timestamp)


def _to_point(snapshot: CoverageSnapshot) -> TrendPoint:
    return TrendPoint(
        timestamp=snapshot.created_date,
        coverage_percent=snapshot.coverage_percent,
        branch=snapshot.branch,
    )


def collect_trend_snapshots(
    ledger: CoverageLedger,
    project_name: str,
    branch: str,
    test_name: str,
    backfill_limit: int = DEFAULT_BACKFILL_LIMIT,
) -> list[CoverageSnapshot]:
    """Branch snapshots ascending, followed by base-branch backfill descending."""
    snapshots = ledger.all_for_key(project_name, branch, test_name, order="asc")
    if not snapshots:
        return snapshots

    earliest = snapshots[0]
    if earliest.base_branch and earliest.base_branch != branch and backfill_limit > 0:
        snapshots.extend(
            ledger.prior_to(
                project_name,
                earliest.base_branch,
                test_name,
                earliest.created_date,
                backfill_limit,
            )
        )
    return snapshots


def build_trend_series(
    ledger: CoverageLedger,
    project_name: str,
    branch: str,
    test_name: str,
    backfill_limit: int = DEFAULT_BACKFILL_LIMIT,
) -> TrendSeries:
    """Build the :class:`TrendSeries` handed to the chart renderer."""
    snapshots = collect_trend_snapshots(ledger, project_name, branch, test_name, backfill_limit)
    return TrendSeries(
        project_name=project_name,
        branch=branch,
        test_name=test_name,
        points=[_to_point(s) for s in snapshots],
    )
