"""Build the configured document backend."""

from __future__ import annotations

from sheetpilot.config import DocumentConfig
from sheetpilot.document.base import SpreadsheetDocument
from sheetpilot.document.memory import InMemoryDocument
from sheetpilot.document.workbook import WorkbookDocument


def build_document(cfg: DocumentConfig) -> SpreadsheetDocument:
    if cfg.backend == "workbook":
        if cfg.workbook_path is None:
            raise ValueError("document.workbook_path is required when document.backend='workbook'")
        return WorkbookDocument(cfg.workbook_path, sheet=cfg.sheet)
    return InMemoryDocument.sample()
