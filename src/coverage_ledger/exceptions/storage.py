"""Ledger storage exceptions: unreachable database, failed writes, unknown keys."""

from typing import Optional

from .base import CoverageLedgerError


class StorageUnavailableError(CoverageLedgerError):
    """Raised when the backing store cannot be reached or a write fails."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Storage {operation} failed: {reason}",
            details={"operation": operation},
        )
        self.operation = operation
        self.reason = reason


class NotFoundError(CoverageLedgerError):
    """Raised when nothing is recorded under a project, branch or test key."""

    def __init__(
        self, project_name: str, branch: Optional[str] = None, test_name: Optional[str] = None
    ):
        if test_name is not None:
            message = "Project/branch and/or test does not exist."
        elif branch is not None:
            message = "Project and/or branch does not exist."
        else:
            message = "Project does not exist."
        key = "/".join(part for part in (project_name, branch, test_name) if part is not None)
        super().__init__(message, details={"key": key})
        self.project_name = project_name
        self.branch = branch
        self.test_name = test_name
