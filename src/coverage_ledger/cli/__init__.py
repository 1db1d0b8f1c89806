"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..exceptions import ConfigurationError
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="coverage-ledger",
    help="Coverage Ledger - per-branch coverage history and merge gating",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None, "--db", help="SQLite database file (overrides config)"
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML format)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    """Record coverage per branch and gate merges on it."""
    try:
        settings = load_config(config_file=config, db_path=db, verbose=verbose, quiet=quiet)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)
    setup_logging(verbose=settings.verbosity == "verbose", quiet=settings.verbosity == "quiet")
    ctx.obj = {"config": settings}


# Import subcommands to register them
from .check import check as _check  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
from .projects import projects as _projects  # noqa: F401, E402
from .save import save as _save  # noqa: F401, E402
from .serve import serve as _serve  # noqa: F401, E402
from .trend import trend as _trend  # noqa: F401, E402
