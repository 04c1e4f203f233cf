"""Shared pytest fixtures for the sheetpilot test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from sheetpilot.classifier.rules import RuleBasedClassifier
from sheetpilot.config import Settings, override_settings
from sheetpilot.document.memory import InMemoryDocument
from sheetpilot.document.workbook import write_sample_workbook
from sheetpilot.pipeline.controller import PipelineController
from sheetpilot.pipeline.executor import ActionExecutor


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    settings = Settings(
        logging={"level": "warning", "format": "console"},
        document={"backend": "memory"},
    )
    override_settings(settings)
    return settings


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_document() -> InMemoryDocument:
    return InMemoryDocument(
        header=["Region", "Sales", "Costs"],
        rows=[
            ["North", 1200, 800],
            ["South", 950, 700],
            ["East", "$1,430.50", "$910.25"],
            ["West", 610, "n/a"],
        ],
    )


@pytest.fixture
def sales_workbook(tmp_path: Path) -> Path:
    return write_sample_workbook(tmp_path / "sales.xlsx")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@pytest.fixture
def executor() -> ActionExecutor:
    return ActionExecutor()


@pytest.fixture
def controller(memory_document: InMemoryDocument, executor: ActionExecutor) -> PipelineController:
    return PipelineController(
        classifier=RuleBasedClassifier(),
        document=memory_document,
        executor=executor,
    )
