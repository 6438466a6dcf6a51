from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer

import mods_dev_server
from mods_dev_server.core.errors import ConfigurationError
from mods_dev_server.server.app import start_server

app = typer.Typer(
    help="Development server for mod bundles",
    no_args_is_help=True,
    add_completion=False,
)


@app.command()
def serve(
    root: Optional[Path] = typer.Option(None, help="Directory containing the mod bundle."),
    port: Optional[int] = typer.Option(None, help="Port to listen on."),
    host: Optional[str] = typer.Option(None, help="Address to bind."),
    open_path: Optional[str] = typer.Option(None, "--open", help="Path to open in the browser."),
    no_open: bool = typer.Option(False, "--no-open", help="Do not open a browser."),
    wait: Optional[int] = typer.Option(None, help="Milliseconds to wait before reloading."),
    cors: Optional[bool] = typer.Option(None, "--cors/--no-cors", help="Blanket CORS on every file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report unreadable manifests."),
) -> None:
    """Serve ROOT with live reload and the mod runtime's security headers."""
    overrides: Dict[str, Any] = {}
    if root is not None:
        overrides["root"] = str(root)
    if port is not None:
        overrides["port"] = port
    if host is not None:
        overrides["host"] = host
    if open_path is not None:
        overrides["open"] = open_path
    if no_open:
        overrides["open"] = None
    if wait is not None:
        overrides["wait"] = wait
    if cors is not None:
        overrides["cors"] = cors
    if verbose:
        overrides["verbose"] = True

    try:
        start_server(**overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(mods_dev_server.__version__)


if __name__ == "__main__":  # pragma: no cover
    app()
