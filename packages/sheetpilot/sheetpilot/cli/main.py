"""SheetPilot CLI — Entry point.

Usage:
    sheetpilot serve [--workbook book.xlsx]
    sheetpilot status
    sheetpilot classify "sort by sales"
    sheetpilot run book.xlsx "insert profits" [--yes]
    sheetpilot sample book.xlsx
"""

from __future__ import annotations

import typer
from rich.console import Console

from sheetpilot.cli.commands import actions, server

app = typer.Typer(
    name="sheetpilot",
    help="SheetPilot — Natural-language spreadsheet actions with preview and confirm.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console()

app.command("serve")(server.serve)
app.command("status")(server.status)
app.command("classify")(actions.classify)
app.command("run")(actions.run)
app.command("sample")(actions.sample)


@app.callback()
def main_callback() -> None:
    pass


if __name__ == "__main__":
    app()
