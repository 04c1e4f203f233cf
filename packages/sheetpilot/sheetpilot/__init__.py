"""SheetPilot — Natural-language spreadsheet actions with preview and confirm.

A user types a request ("sort by sales", "scatter sales vs costs", ...),
SheetPilot classifies it into one of a closed set of actions, shows a
non-destructive preview, and only mutates the workbook once the user
confirms.

Architecture layers (bottom to top):
    1. Protocol   — Action vocabulary, table snapshots, preview payloads
    2. Classifier — Text → Action strategies (rules, remote HTTP)
    3. Document   — Spreadsheet backends (openpyxl workbook, in-memory)
    4. Pipeline   — Preview builder, action executor, controller state machine
    5. API/CLI    — FastAPI HTTP server, typer command line
"""

__version__ = "0.1.0"
__author__ = "SheetPilot Contributors"
__license__ = "Apache-2.0"

from sheetpilot.protocol.actions import Action, ActionKind

__all__ = [
    "__version__",
    "Action",
    "ActionKind",
]
