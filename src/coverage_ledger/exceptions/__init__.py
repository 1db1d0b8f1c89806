"""Exception hierarchy for Coverage Ledger."""

from .base import CoverageLedgerError
from .config import ConfigurationError, InvalidConfigError
from .storage import NotFoundError, StorageUnavailableError
from .validation import DegenerateMetricError, ValidationError

__all__ = [
    "CoverageLedgerError",
    "ValidationError",
    "DegenerateMetricError",
    "NotFoundError",
    "StorageUnavailableError",
    "ConfigurationError",
    "InvalidConfigError",
]
