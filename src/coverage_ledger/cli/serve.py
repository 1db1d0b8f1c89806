"""``coverage-ledger serve`` -- run the HTTP service."""

from typing import Optional

import typer

from . import app
from ._common import console, get_config


@app.command()
def serve(
    ctx: typer.Context,
    port: Optional[int] = typer.Option(None, help="Port to listen on (default from config)"),
    host: Optional[str] = typer.Option(None, help="Host to bind to (default from config)"),
):
    """Serve check, save, history, chart and badge endpoints over HTTP."""
    import uvicorn

    from ..server import create_app

    config = get_config(ctx)
    host = host or config.host
    port = port or config.port

    asgi_app = create_app(config)
    url = f"http://{host}:{port}"
    console.print(f"[bold]Coverage ledger[/bold] ({config.db_path}) → [link={url}]{url}[/link]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    try:
        uvicorn.run(
            asgi_app,
            host=host,
            port=port,
            log_level="info" if config.verbosity == "verbose" else "warning",
            access_log=False,
        )
    except KeyboardInterrupt:
        pass
    finally:
        console.print("\n[dim]Stopped.[/dim]")
