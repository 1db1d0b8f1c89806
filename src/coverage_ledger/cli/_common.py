"""Shared CLI helpers."""

import contextlib
from typing import Iterator, Optional

import typer
from rich.console import Console

from ..config import ServiceConfig
from ..exceptions import StorageUnavailableError, ValidationError
from ..persistence import CoverageDB, CoverageLedger
from ..validation import Submission, parse_submission

console = Console()


def get_config(ctx: typer.Context) -> ServiceConfig:
    obj = ctx.obj or {}
    return obj.get("config") or ServiceConfig()


@contextlib.contextmanager
def open_ledger(config: ServiceConfig) -> Iterator[CoverageLedger]:
    """Open the configured database for the duration of one command."""
    try:
        with CoverageDB(config.db_path) as db:
            yield CoverageLedger(db.conn)
    except StorageUnavailableError as e:
        console.print(f"[red]Storage error:[/red] {e.reason}")
        raise typer.Exit(1)


def build_submission(
    base_branch: str,
    statements: int,
    conditionals: int,
    methods: int,
    covered_statements: int,
    covered_conditionals: int,
    covered_methods: int,
    ref: Optional[str] = None,
) -> Submission:
    """Run CLI options through the same validation the HTTP service uses."""
    params = {
        "baseBranch": base_branch,
        "statements": statements,
        "conditionals": conditionals,
        "methods": methods,
        "coveredStatements": covered_statements,
        "coveredConditionals": covered_conditionals,
        "coveredMethods": covered_methods,
        "ref": ref,
    }
    try:
        return parse_submission(params)
    except ValidationError as e:
        console.print(f"[red]Invalid submission:[/red] {e}")
        raise typer.Exit(2)


def sparkline(values: list) -> str:
    """Generate an ASCII sparkline from a list of numeric values."""
    if not values:
        return ""
    blocks = " ▁▂▃▄▅▆▇█"
    mn, mx = min(values), max(values)
    if mx == mn:
        return blocks[4] * len(values)
    return "".join(blocks[min(8, int((v - mn) / (mx - mn) * 8))] for v in values)
