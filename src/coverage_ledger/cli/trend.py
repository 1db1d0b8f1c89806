"""Trend CLI command -- show how a test's coverage changes over time."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..persistence.ledger import format_date
from ..rendering import render_trend_chart
from ..trend import build_trend_series
from . import app
from ._common import console, get_config, open_ledger, sparkline


@app.command()
def trend(
    ctx: typer.Context,
    project_name: str = typer.Argument(..., help="Project name"),
    branch: str = typer.Argument(..., help="Branch name"),
    test_name: str = typer.Argument(..., help="Test suite name"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the PNG chart to this file instead of printing a table",
        dir_okay=False,
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (table) or json",
    ),
):
    """
    Show the coverage trend, back-filled from the base branch.

    [bold cyan]Examples:[/bold cyan]

      coverage-ledger trend web feature/login jest

      coverage-ledger trend web main jest --output coverage.png
    """
    config = get_config(ctx)
    with open_ledger(config) as ledger:
        series = build_trend_series(
            ledger,
            project_name,
            branch,
            test_name,
            backfill_limit=config.trend_backfill_limit,
        )

    if output is not None:
        output.write_bytes(
            render_trend_chart(series, width=config.chart_width, height=config.chart_height)
        )
        console.print(f"[green]Chart written to[/green] {output} ({len(series)} points)")
        return

    if not series.points:
        console.print(
            f"[yellow]No trend data for[/yellow] {project_name}/{branch}/{test_name}",
            highlight=False,
        )
        raise typer.Exit(0)

    points = series.sorted_points()

    # ── JSON output ───────────────────────────────────────────────────
    if fmt == "json":
        print(
            json.dumps(
                [
                    {
                        "timestamp": format_date(p.timestamp),
                        "branch": p.branch,
                        "coveragePercent": p.coverage_percent,
                    }
                    for p in points
                ],
                indent=2,
            )
        )
        return

    # ── Rich output ───────────────────────────────────────────────────
    console.print()
    console.print(f"[bold cyan]{series.title}[/bold cyan] ({branch}, {len(points)} points)")
    console.print(f"  {sparkline([p.coverage_percent for p in points])}")
    console.print()

    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Date")
    table.add_column("Branch", style="dim")
    table.add_column("Coverage", justify="right")
    table.add_column("Delta", justify="right")

    prev: Optional[float] = None
    for p in points:
        delta_str = ""
        if prev is not None:
            d = p.coverage_percent - prev
            if abs(d) >= 0.01:
                color = "green" if d > 0 else "red"
                delta_str = f"[{color}]{d:+.2f}[/{color}]"
        table.add_row(
            format_date(p.timestamp)[:19].replace("T", " "),
            p.branch,
            f"{p.coverage_percent:.2f}%",
            delta_str,
        )
        prev = p.coverage_percent

    console.print(table)
    console.print()
