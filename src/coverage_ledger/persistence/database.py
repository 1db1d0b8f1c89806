"""SQLite-backed coverage database."""

import sqlite3
from pathlib import Path
from typing import Optional

from ..exceptions import StorageUnavailableError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

MEMORY_DB = ":memory:"


class CoverageDB:
    """Manages the coverage SQLite database.

    The connection is opened with ``check_same_thread=False`` because the
    HTTP service shares one connection between the event loop and the
    threadpool; callers serialize access (see ``CoverageLedger``).

    Usage::

        with CoverageDB("coverage.db") as db:
            ledger = CoverageLedger(db.conn)
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("CoverageDB is not connected. Use as context manager or call connect().")
        return self._conn

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    # ── lifecycle ─────────────────────────────────────────────────

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        if self._conn is not None:
            return self._conn
        try:
            if self.db_path != MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            if self.db_path != MEMORY_DB:
                conn.execute("PRAGMA journal_mode=WAL")
            conn.row_factory = sqlite3.Row
            self._conn = conn
            self._migrate()
        except (sqlite3.Error, OSError) as e:
            self.close()
            logger.error("Could not open coverage database at %s: %s", self.db_path, e)
            raise StorageUnavailableError("connect", str(e)) from e
        logger.debug("Coverage DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "CoverageDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create / upgrade all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )

        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )

        # ── coverage ─────────────────────────────────────────────
        # Append-only: rows are never updated or deleted by the service.
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS coverage (
                id                   INTEGER PRIMARY KEY AUTOINCREMENT,
                project_name         TEXT    NOT NULL,
                branch               TEXT    NOT NULL,
                test_name            TEXT    NOT NULL,
                base_branch          TEXT    NOT NULL,
                statements           INTEGER NOT NULL,
                conditionals         INTEGER NOT NULL,
                methods              INTEGER NOT NULL,
                covered_statements   INTEGER NOT NULL,
                covered_conditionals INTEGER NOT NULL,
                covered_methods      INTEGER NOT NULL,
                created_date         TEXT    NOT NULL,
                ref                  TEXT
            )
            """
        )

        # ── indexes ──────────────────────────────────────────────
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_coverage_key "
            "ON coverage(project_name, branch, test_name, created_date)"
        )
        c.execute("CREATE INDEX IF NOT EXISTS idx_coverage_created ON coverage(created_date)")

        c.commit()

    def schema_version(self) -> int:
        row = self.conn.execute("SELECT version FROM schema_version").fetchone()
        return int(row["version"])
