"""Persistence layer: the SQLite database and the append-only coverage ledger."""

from .database import CoverageDB
from .ledger import CoverageLedger

__all__ = ["CoverageDB", "CoverageLedger"]
