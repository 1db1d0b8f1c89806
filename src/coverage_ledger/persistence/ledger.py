"""Append-only coverage ledger: insert snapshots and query them by key.

``created_date`` is the sole ordering key. It is assigned on insert and is
strictly increasing in insertion order: when the clock has not advanced past
the newest stored date, the new row gets that date plus one microsecond.
Dates are stored as fixed-width UTC strings so SQL string comparison matches
chronological order.
"""

import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..exceptions import StorageUnavailableError
from ..logging_config import get_logger
from ..models import CoverageCounts, CoverageSnapshot

logger = get_logger(__name__)

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

_TICK = timedelta(microseconds=1)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_date(value: datetime) -> str:
    """Serialise a datetime as a sortable UTC string."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(DATE_FORMAT)


def parse_date(value: str) -> datetime:
    return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)


class CoverageLedger:
    """Storage and retrieval of :class:`CoverageSnapshot` records.

    Parameters
    ----------
    conn:
        An open ``sqlite3.Connection`` with ``row_factory = sqlite3.Row``
        (as returned by ``CoverageDB.connect()``).
    clock:
        Source of insertion times. Defaults to the current UTC time.
    """

    def __init__(self, conn: sqlite3.Connection, clock: Optional[Clock] = None):
        self.conn = conn
        self.clock = clock or _utc_now
        self._lock = threading.RLock()

    # ── insert ────────────────────────────────────────────────────────

    def append(
        self,
        project_name: str,
        branch: str,
        test_name: str,
        base_branch: str,
        counts: CoverageCounts,
        ref: Optional[str] = None,
    ) -> int:
        """Insert a new snapshot and return its id.

        The insert runs in a single transaction; on failure nothing is
        written.

        Raises
        ------
        StorageUnavailableError
            If the database rejects the write.
        """
        with self._lock:
            cur = self.conn.cursor()
            try:
                cur.execute("BEGIN IMMEDIATE")
                created = self._next_created_date(cur)
                cur.execute(
                    """
                    INSERT INTO coverage (
                        project_name, branch, test_name, base_branch,
                        statements, conditionals, methods,
                        covered_statements, covered_conditionals, covered_methods,
                        created_date, ref
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        project_name,
                        branch,
                        test_name,
                        base_branch,
                        counts.statements,
                        counts.conditionals,
                        counts.methods,
                        counts.covered_statements,
                        counts.covered_conditionals,
                        counts.covered_methods,
                        format_date(created),
                        ref,
                    ),
                )
                snapshot_id = cur.lastrowid
                self.conn.commit()
            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error("Failed to append coverage for %s/%s/%s: %s", project_name, branch, test_name, e)
                raise StorageUnavailableError("append", str(e)) from e

        logger.debug(
            "Appended snapshot %d for %s/%s/%s at %s",
            snapshot_id,
            project_name,
            branch,
            test_name,
            format_date(created),
        )
        return snapshot_id

    def _next_created_date(self, cur: sqlite3.Cursor) -> datetime:
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        row = cur.execute("SELECT MAX(created_date) AS newest FROM coverage").fetchone()
        if row is not None and row["newest"] is not None:
            newest = parse_date(row["newest"])
            if now <= newest:
                return newest + _TICK
        return now

    # ── lookups ───────────────────────────────────────────────────────

    def get(self, snapshot_id: int) -> Optional[CoverageSnapshot]:
        """Load one snapshot by primary key, or ``None``."""
        rows = self._select("SELECT * FROM coverage WHERE id = ?", (snapshot_id,))
        return _hydrate(rows[0]) if rows else None

    def latest(self, project_name: str, branch: str, test_name: str) -> Optional[CoverageSnapshot]:
        """Return the most recent snapshot for the exact key, or ``None``."""
        rows = self._select(
            """
            SELECT * FROM coverage
            WHERE project_name = ? AND branch = ? AND test_name = ?
            ORDER BY created_date DESC, id DESC
            LIMIT 1
            """,
            (project_name, branch, test_name),
        )
        return _hydrate(rows[0]) if rows else None

    def all_for_key(
        self, project_name: str, branch: str, test_name: str, order: str = "asc"
    ) -> list[CoverageSnapshot]:
        """All snapshots for the exact key, ordered by ``created_date``.

        ``order`` is ``"asc"`` (oldest first, used for trends) or ``"desc"``.
        """
        direction = _direction(order)
        rows = self._select(
            f"""
            SELECT * FROM coverage
            WHERE project_name = ? AND branch = ? AND test_name = ?
            ORDER BY created_date {direction}, id {direction}
            """,
            (project_name, branch, test_name),
        )
        return [_hydrate(r) for r in rows]

    def prior_to(
        self,
        project_name: str,
        branch: str,
        test_name: str,
        cutoff: datetime,
        limit: int,
    ) -> list[CoverageSnapshot]:
        """Snapshots created strictly before *cutoff*, newest first, at most *limit*."""
        rows = self._select(
            """
            SELECT * FROM coverage
            WHERE project_name = ? AND branch = ? AND test_name = ?
              AND created_date < ?
            ORDER BY created_date DESC, id DESC
            LIMIT ?
            """,
            (project_name, branch, test_name, format_date(cutoff), limit),
        )
        return [_hydrate(r) for r in rows]

    # ── discovery ─────────────────────────────────────────────────────

    def distinct_projects(self) -> list[str]:
        rows = self._select("SELECT DISTINCT project_name FROM coverage ORDER BY project_name")
        return [r["project_name"] for r in rows]

    def distinct_branches(self, project_name: str) -> list[str]:
        rows = self._select(
            "SELECT DISTINCT branch FROM coverage WHERE project_name = ? ORDER BY branch",
            (project_name,),
        )
        return [r["branch"] for r in rows]

    def distinct_tests(self, project_name: str, branch: str) -> list[str]:
        rows = self._select(
            "SELECT DISTINCT test_name FROM coverage "
            "WHERE project_name = ? AND branch = ? ORDER BY test_name",
            (project_name, branch),
        )
        return [r["test_name"] for r in rows]

    # ── private helpers ───────────────────────────────────────────────

    def _select(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error("Coverage query failed: %s", e)
                raise StorageUnavailableError("query", str(e)) from e


def _direction(order: str) -> str:
    if order not in ("asc", "desc"):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
    return order.upper()


def _hydrate(row: sqlite3.Row) -> CoverageSnapshot:
    return CoverageSnapshot(
        id=row["id"],
        project_name=row["project_name"],
        branch=row["branch"],
        test_name=row["test_name"],
        base_branch=row["base_branch"],
        counts=CoverageCounts(
            statements=row["statements"],
            conditionals=row["conditionals"],
            methods=row["methods"],
            covered_statements=row["covered_statements"],
            covered_conditionals=row["covered_conditionals"],
            covered_methods=row["covered_methods"],
        ),
        created_date=parse_date(row["created_date"]),
        ref=row["ref"],
    )
