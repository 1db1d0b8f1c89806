"""``coverage-ledger projects`` -- browse projects, branches and tests."""

from typing import Optional

import typer

from . import app
from ._common import console, get_config, open_ledger


@app.command()
def projects(
    ctx: typer.Context,
    project_name: Optional[str] = typer.Argument(None, help="List this project's branches"),
    branch: Optional[str] = typer.Argument(None, help="List this branch's tests"),
):
    """List known projects, a project's branches, or a branch's tests."""
    config = get_config(ctx)
    with open_ledger(config) as ledger:
        if project_name is None:
            names = ledger.distinct_projects()
            kind = "projects"
        elif branch is None:
            names = ledger.distinct_branches(project_name)
            kind = f"branches in {project_name}"
        else:
            names = ledger.distinct_tests(project_name, branch)
            kind = f"tests in {project_name}/{branch}"

    if not names:
        console.print(f"[yellow]No {kind} recorded.[/yellow]", highlight=False)
        raise typer.Exit(1 if project_name else 0)

    console.print(f"[bold]{len(names)} {kind}[/bold]", highlight=False)
    for name in names:
        console.print(f"  {name}", highlight=False)
