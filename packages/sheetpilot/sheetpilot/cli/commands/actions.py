"""CLI — Classify requests and run them against a workbook."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sheetpilot.config import Settings
from sheetpilot.protocol.models import (
    FormulaPreview,
    PreviewPayload,
    ScatterPreview,
    TablePreview,
)

console = Console()

_MAX_PREVIEW_ROWS = 20


def classify(
    text: str = typer.Argument(help="The request to classify."),
    locale: Annotated[str, typer.Option(help="Description locale (en or zh).")] = "en",
) -> None:
    """Show which action a request maps to, without touching any document."""
    from sheetpilot.classifier import classify_text, describe

    action = classify_text(text)
    console.print(f"[bold cyan]{action.kind.value}[/bold cyan]")
    console.print(describe(action, locale))


def sample(
    path: Path = typer.Argument(help="Where to write the sample workbook."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Write a small sales workbook to try the other commands on."""
    from sheetpilot.document.workbook import write_sample_workbook

    if path.exists() and not force:
        console.print(f"[red]{path} already exists (use --force to overwrite).[/red]")
        raise typer.Exit(1)
    write_sample_workbook(path)
    console.print(f"[green]Sample workbook written:[/green] {path}")


def run(
    workbook: Path = typer.Argument(help="Path to the .xlsx workbook."),
    text: str = typer.Argument(help="The request, e.g. 'sort by sales'."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply without asking."),
    sheet: Annotated[
        str | None, typer.Option(help="Worksheet holding the table. Default: the active sheet.")
    ] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml.")
    ] = None,
) -> None:
    """Preview a request against WORKBOOK, then apply it once confirmed."""
    from sheetpilot.logging import configure_logging

    if not workbook.exists():
        console.print(f"[red]File not found: {workbook}[/red]")
        raise typer.Exit(1)

    settings = Settings.load(config_file=config)
    configure_logging(level="warning", format=settings.logging.format)
    exit_code = asyncio.run(_run(settings, workbook, text, yes, sheet))
    if exit_code:
        raise typer.Exit(exit_code)


async def _run(settings: Settings, workbook: Path, text: str, yes: bool, sheet: str | None) -> int:
    from sheetpilot.classifier.factory import build_classifier
    from sheetpilot.document.workbook import WorkbookDocument
    from sheetpilot.exceptions import SheetPilotError
    from sheetpilot.pipeline.controller import PipelineController, PipelineState
    from sheetpilot.pipeline.executor import ActionExecutor

    classifier = build_classifier(settings.classifier)
    document = WorkbookDocument(workbook, sheet=sheet or settings.document.sheet)
    controller = PipelineController(
        classifier=classifier,
        document=document,
        executor=ActionExecutor.from_config(settings.document),
        locale=settings.classifier.locale,
    )

    try:
        try:
            outcome = await controller.submit(text)
        except SheetPilotError as exc:
            console.print(f"[red]{exc.message}[/red]")
            return 1

        if outcome.description:
            console.print(outcome.description)
        if outcome.error:
            console.print(f"[red]{outcome.error}[/red]")
            return 1
        if controller.state != PipelineState.PREVIEW_READY or outcome.preview is None:
            return 0

        render_preview(outcome.preview)

        if not yes and not typer.confirm("Apply this action?", default=False):
            controller.cancel()
            console.print("[yellow]Cancelled.[/yellow]")
            return 0

        result = await controller.confirm(outcome.seq)
        if not result.success:
            console.print(f"[red]Failed: {result.error}[/red]")
            return 1
        console.print(f"[green]Done:[/green] {result.action.value}")
        for key, value in result.result.items():
            console.print(f"  {key}: {value}")
        return 0
    finally:
        await classifier.close()
        await document.close()


def render_preview(preview: PreviewPayload) -> None:
    """Print *preview* to the console."""
    if isinstance(preview, TablePreview):
        table = Table(
            title=f"Current table (will be sorted by {preview.sort_column}, {preview.direction.value})"
        )
        for name in preview.header:
            table.add_column(str(name))
        for row in preview.rows[:_MAX_PREVIEW_ROWS]:
            table.add_row(*("" if v is None else str(v) for v in row))
        console.print(table)
        if len(preview.rows) > _MAX_PREVIEW_ROWS:
            console.print(f"... {len(preview.rows) - _MAX_PREVIEW_ROWS} more rows")
    elif isinstance(preview, ScatterPreview):
        table = Table(title=f"{preview.x_label} (X) vs {preview.y_label} (Y)")
        table.add_column(preview.x_label, justify="right")
        table.add_column(preview.y_label, justify="right")
        for point in preview.points[:_MAX_PREVIEW_ROWS]:
            table.add_row(f"{point.x:g}", f"{point.y:g}")
        console.print(table)
    elif isinstance(preview, FormulaPreview):
        console.print(
            Panel(f"{preview.expression}\n[dim]{preview.formula}[/dim]", title=preview.target)
        )
