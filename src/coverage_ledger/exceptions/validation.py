"""Submission validation exceptions: missing fields, bad counts, zero totals."""

from typing import Dict, List, Optional

from .base import CoverageLedgerError


class ValidationError(CoverageLedgerError):
    """Raised when a submission is missing fields or carries malformed values.

    ``missing`` lists every absent field (never just the first one) and
    ``invalid`` maps malformed fields to the reason they were rejected.
    """

    def __init__(
        self,
        message: str,
        missing: Optional[List[str]] = None,
        invalid: Optional[Dict[str, str]] = None,
    ):
        details: Dict[str, str] = {}
        if missing:
            details["missing"] = ", ".join(missing)
        if invalid:
            details.update(invalid)
        super().__init__(message, details=details)
        self.missing = list(missing or [])
        self.invalid = dict(invalid or {})


class DegenerateMetricError(ValidationError):
    """Raised when the coverage denominator (all totals summed) is zero."""

    def __init__(self) -> None:
        super().__init__(
            "Total of statements, conditionals and methods must be greater than zero",
            invalid={"total": "0"},
        )
