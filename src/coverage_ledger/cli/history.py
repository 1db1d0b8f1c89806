"""History CLI command -- list recorded snapshots for one test."""

import json

import typer

from ..models import format_percent
from ..persistence.ledger import format_date
from ..server.serializers import snapshot_to_dict
from . import app
from ._common import console, get_config, open_ledger


@app.command()
def history(
    ctx: typer.Context,
    project_name: str = typer.Argument(..., help="Project name"),
    branch: str = typer.Argument(..., help="Branch name"),
    test_name: str = typer.Argument(..., help="Test suite name"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List every snapshot recorded for a project / branch / test, oldest first.

    [bold cyan]Examples:[/bold cyan]

      coverage-ledger history web main jest

      coverage-ledger history web main jest --json
    """
    config = get_config(ctx)
    with open_ledger(config) as ledger:
        snapshots = ledger.all_for_key(project_name, branch, test_name, order="asc")

    if not snapshots:
        console.print(
            f"[yellow]No coverage recorded for[/yellow] {project_name}/{branch}/{test_name}",
            highlight=False,
        )
        raise typer.Exit(1)

    if json_output:
        print(json.dumps([snapshot_to_dict(s) for s in snapshots], indent=2))
        return

    from rich.table import Table

    table = Table(
        title=f"Coverage history: {project_name} / {branch} / {test_name}",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Created", style="green")
    table.add_column("Base", style="cyan")
    table.add_column("Statements", justify="right")
    table.add_column("Conditionals", justify="right")
    table.add_column("Methods", justify="right")
    table.add_column("Coverage", justify="right", style="yellow")
    table.add_column("Ref", style="dim")

    for s in snapshots:
        c = s.counts
        table.add_row(
            str(s.id),
            format_date(s.created_date)[:19].replace("T", " "),
            s.base_branch,
            f"{c.covered_statements}/{c.statements}",
            f"{c.covered_conditionals}/{c.conditionals}",
            f"{c.covered_methods}/{c.methods}",
            f"{format_percent(s.coverage_percent)}%",
            (s.ref or "-")[:8],
        )

    console.print()
    console.print(table)
    console.print()
