"""CLI — Server commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

console = Console()


def serve(
    host: Annotated[str | None, typer.Option(help="Host to bind to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to listen on.")] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml.")
    ] = None,
    workbook: Annotated[
        Path | None,
        typer.Option("--workbook", "-w", help="Serve this .xlsx file instead of the in-memory sample."),
    ] = None,
    log_level: str = typer.Option("info", help="Log level."),
) -> None:
    """Start the SheetPilot HTTP server."""
    from sheetpilot.api.server import create_app
    from sheetpilot.config import Settings

    settings = Settings.load(config_file=config)
    if host is not None:
        settings.server.host = host
    if port is not None:
        settings.server.port = port
    if workbook is not None:
        settings.document.backend = "workbook"
        settings.document.workbook_path = workbook

    console.print(
        f"[bold green]Starting SheetPilot on {settings.server.host}:{settings.server.port}"
        f" ({settings.document.backend} document)[/bold green]"
    )

    app_instance = create_app(settings=settings)

    uvicorn.run(
        app_instance,
        host=settings.server.host,
        port=settings.server.port,
        log_level=log_level,
    )


def status(
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(3001),
) -> None:
    """Check server status."""
    import httpx

    try:
        resp = httpx.get(f"http://{host}:{port}/health", timeout=5.0)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        console.print(f"[red]Server unreachable: {exc}[/red]")
        raise typer.Exit(1)

    table = Table(title="SheetPilot Status")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in data.items():
        table.add_row(str(k), str(v))
    console.print(table)
