"""Shared test fixtures for Coverage Ledger tests."""

from datetime import datetime, timedelta, timezone

import pytest

from coverage_ledger.models import CoverageCounts
from coverage_ledger.persistence import CoverageDB, CoverageLedger


class SteppingClock:
    """Deterministic clock: every call returns a time one minute later."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start
        self.step = timedelta(minutes=1)

    def __call__(self) -> datetime:
        self.now = self.now + self.step
        return self.now


def make_counts(
    covered: int = 20,
    total: int = 20,
    covered_statements=None,
    covered_conditionals=None,
    covered_methods=None,
) -> CoverageCounts:
    """Same covered/total for all three kinds unless overridden."""
    return CoverageCounts(
        statements=total,
        conditionals=total,
        methods=total,
        covered_statements=covered if covered_statements is None else covered_statements,
        covered_conditionals=covered if covered_conditionals is None else covered_conditionals,
        covered_methods=covered if covered_methods is None else covered_methods,
    )


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "coverage.db")


@pytest.fixture
def ledger(db_path, clock):
    with CoverageDB(db_path) as db:
        yield CoverageLedger(db.conn, clock=clock)


@pytest.fixture(name="make_counts")
def make_counts_fixture():
    return make_counts
