"""Parse and validate coverage submissions from request parameters.

Check (query string) and save (JSON body) share the same required fields.
When any is missing, the error message lists all required fields in a fixed
order while ``ValidationError.missing`` holds exactly the absent ones.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .exceptions import DegenerateMetricError, ValidationError
from .logging_config import get_logger
from .models import CoverageCounts

logger = get_logger(__name__)

# Wire name -> CoverageCounts field
COUNT_PARAMS = {
    "coveredConditionals": "covered_conditionals",
    "coveredStatements": "covered_statements",
    "coveredMethods": "covered_methods",
    "conditionals": "conditionals",
    "statements": "statements",
    "methods": "methods",
}

REQUIRED_PARAMS = (*COUNT_PARAMS, "baseBranch")

MISSING_MESSAGE = "Missing required parameters: " + ", ".join(REQUIRED_PARAMS)


@dataclass(frozen=True)
class Submission:
    """A validated check or save request body."""

    base_branch: str
    counts: CoverageCounts
    ref: Optional[str] = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_count(value: Any) -> int:
    """Parse a non-negative integer count from a query string or JSON value."""
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected an integer, got {value}")
        parsed = int(value)
    elif isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            raise ValueError(f"expected an integer, got '{value}'")
    else:
        raise ValueError(f"expected an integer, got {type(value).__name__}")
    if parsed < 0:
        raise ValueError(f"must be non-negative, got {parsed}")
    return parsed


def parse_submission(params: Mapping[str, Any]) -> Submission:
    """Validate *params* and build a :class:`Submission`.

    Raises:
        ValidationError: Required fields missing or counts malformed.
        DegenerateMetricError: All totals are zero.
    """
    missing = [name for name in REQUIRED_PARAMS if _is_blank(params.get(name))]
    if missing:
        raise ValidationError(MISSING_MESSAGE, missing=missing)

    values: dict[str, int] = {}
    invalid: dict[str, str] = {}
    for wire_name, field_name in COUNT_PARAMS.items():
        try:
            values[field_name] = _parse_count(params[wire_name])
        except ValueError as e:
            invalid[wire_name] = str(e)

    base_branch = params["baseBranch"]
    if not isinstance(base_branch, str):
        invalid["baseBranch"] = "expected a string"

    if invalid:
        raise ValidationError(
            "Invalid parameters: " + ", ".join(invalid), invalid=invalid
        )

    counts = CoverageCounts(**values)
    if counts.total == 0:
        raise DegenerateMetricError()

    # Covered counts above their totals are stored as submitted.
    for total_name in ("statements", "conditionals", "methods"):
        covered_name = f"covered_{total_name}"
        if values[covered_name] > values[total_name]:
            logger.warning(
                "Covered %s (%d) exceeds total (%d)",
                total_name,
                values[covered_name],
                values[total_name],
            )

    ref = params.get("ref")
    if _is_blank(ref):
        ref = None
    else:
        ref = str(ref)

    return Submission(base_branch=base_branch.strip(), counts=counts, ref=ref)
