"""Document layer — spreadsheet backends."""

from sheetpilot.document.base import SpreadsheetDocument, sort_rows
from sheetpilot.document.factory import build_document
from sheetpilot.document.memory import InMemoryDocument
from sheetpilot.document.workbook import WorkbookDocument, write_sample_workbook

__all__ = [
    "SpreadsheetDocument",
    "InMemoryDocument",
    "WorkbookDocument",
    "build_document",
    "sort_rows",
    "write_sample_workbook",
]
