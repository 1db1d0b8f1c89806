"""
Coverage Ledger - per-branch coverage history and merge gating

Stores externally computed coverage counts per project, branch and test,
and decides whether a new measurement may be merged by comparing it with
the latest recorded baseline, falling back to a declared base branch.
"""

__version__ = "0.1.0"

from .comparator import Comparator
from .models import CoverageCounts, CoverageSnapshot, Verdict, coverage_percent, format_percent
from .persistence import CoverageDB, CoverageLedger
from .trend import TrendPoint, TrendSeries, build_trend_series

__all__ = [
    "Comparator",
    "CoverageCounts",
    "CoverageSnapshot",
    "Verdict",
    "coverage_percent",
    "format_percent",
    "CoverageDB",
    "CoverageLedger",
    "TrendPoint",
    "TrendSeries",
    "build_trend_series",
]
