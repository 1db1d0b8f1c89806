"""Shared ledger handle for the HTTP service."""

from __future__ import annotations

import threading
from typing import Optional

from ..exceptions import StorageUnavailableError
from ..logging_config import get_logger
from ..persistence.database import CoverageDB
from ..persistence.ledger import Clock, CoverageLedger

logger = get_logger(__name__)


class LedgerHandle:
    """Holds the one database connection every request shares.

    :meth:`open` is guarded by a lock and is a no-op once the ledger is
    open, so concurrent callers cannot race to create two connections. The
    application opens it in its lifespan, before the first request.
    """

    def __init__(self, db_path: str, clock: Optional[Clock] = None) -> None:
        self.db_path = db_path
        self._clock = clock
        self._lock = threading.Lock()
        self._db: Optional[CoverageDB] = None
        self._ledger: Optional[CoverageLedger] = None

    @property
    def is_open(self) -> bool:
        return self._ledger is not None

    def open(self) -> CoverageLedger:
        """Connect to the database if not already connected."""
        with self._lock:
            if self._ledger is None:
                db = CoverageDB(self.db_path)
                db.connect()
                self._db = db
                self._ledger = CoverageLedger(db.conn, clock=self._clock)
                logger.info("Coverage ledger opened at %s", self.db_path)
            return self._ledger

    @property
    def ledger(self) -> CoverageLedger:
        ledger = self._ledger
        if ledger is None:
            raise StorageUnavailableError("connect", "Could not connect to database")
        return ledger

    def close(self) -> None:
        with self._lock:
            if self._db is not None:
                self._db.close()
                logger.info("Coverage ledger closed")
            self._db = None
            self._ledger = None
