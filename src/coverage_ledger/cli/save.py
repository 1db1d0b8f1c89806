"""``coverage-ledger save`` -- append a coverage snapshot."""

from typing import Optional

import typer

from ..models import format_percent
from . import app
from ._common import build_submission, console, get_config, open_ledger


@app.command()
def save(
    ctx: typer.Context,
    project_name: str = typer.Argument(..., help="Project name"),
    branch: str = typer.Argument(..., help="Branch the coverage was measured on"),
    test_name: str = typer.Argument(..., help="Test suite name"),
    base_branch: str = typer.Option(..., "--base-branch", "-b", help="Fallback branch"),
    statements: int = typer.Option(..., "--statements", min=0),
    conditionals: int = typer.Option(..., "--conditionals", min=0),
    methods: int = typer.Option(..., "--methods", min=0),
    covered_statements: int = typer.Option(..., "--covered-statements", min=0),
    covered_conditionals: int = typer.Option(..., "--covered-conditionals", min=0),
    covered_methods: int = typer.Option(..., "--covered-methods", min=0),
    ref: Optional[str] = typer.Option(None, "--ref", help="Revision the coverage belongs to"),
):
    """Record a coverage measurement. Does not compare it with the baseline."""
    config = get_config(ctx)
    submission = build_submission(
        base_branch,
        statements,
        conditionals,
        methods,
        covered_statements,
        covered_conditionals,
        covered_methods,
        ref=ref,
    )

    with open_ledger(config) as ledger:
        snapshot_id = ledger.append(
            project_name,
            branch,
            test_name,
            submission.base_branch,
            submission.counts,
            ref=submission.ref,
        )

    percent = format_percent(submission.counts.coverage_percent)
    console.print(
        f"[green]Saved[/green] {project_name}/{branch}/{test_name} "
        f"at {percent}% (snapshot {snapshot_id})",
        highlight=False,
    )
