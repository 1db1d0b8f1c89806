"""``coverage-ledger check`` -- dry-run a submission against the local ledger."""

import json

import typer

from ..comparator import Comparator
from ..server.serializers import verdict_to_dict
from . import app
from ._common import build_submission, console, get_config, open_ledger


@app.command()
def check(
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
    json_output: bool = typer.Option(False, "--json", help="Output the verdict as JSON"),
):
    """
    Compare new coverage with the recorded baseline without saving it.

    Exits 0 when the coverage is accepted and 1 when it is lower than the
    baseline, so it can gate a CI pipeline.

    [bold cyan]Examples:[/bold cyan]

      coverage-ledger check web feature/login jest -b main \\
        --statements 120 --conditionals 40 --methods 30 \\
        --covered-statements 100 --covered-conditionals 30 --covered-methods 28
    """
    config = get_config(ctx)
    submission = build_submission(
        base_branch,
        statements,
        conditionals,
        methods,
        covered_statements,
        covered_conditionals,
        covered_methods,
    )

    with open_ledger(config) as ledger:
        verdict = Comparator(ledger).evaluate(
            project_name, branch, test_name, submission.base_branch, submission.counts
        )

    if json_output:
        print(json.dumps(verdict_to_dict(verdict), indent=2))
    elif verdict.accepted:
        console.print(f"[green]PASS[/green] {verdict.message}", highlight=False)
    else:
        console.print(f"[red]FAIL[/red] {verdict.message}", highlight=False)

    if not verdict.accepted:
        raise typer.Exit(1)
