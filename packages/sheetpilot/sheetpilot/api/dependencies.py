"""API layer — FastAPI dependency injection.

The classifier, document and pipeline controller are created once by
``create_app()`` and injected via FastAPI's dependency system.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.config import Settings
from sheetpilot.document.base import SpreadsheetDocument
from sheetpilot.pipeline.controller import PipelineController


def get_config(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def get_classifier(request: Request) -> IntentClassifier:
    return request.app.state.classifier  # type: ignore[no-any-return]


def get_document(request: Request) -> SpreadsheetDocument:
    return request.app.state.document  # type: ignore[no-any-return]


def get_controller(request: Request) -> PipelineController:
    return request.app.state.controller  # type: ignore[no-any-return]


# Shorthand type aliases for route signatures.
ConfigDep = Annotated[Settings, Depends(get_config)]
ClassifierDep = Annotated[IntentClassifier, Depends(get_classifier)]
DocumentDep = Annotated[SpreadsheetDocument, Depends(get_document)]
ControllerDep = Annotated[PipelineController, Depends(get_controller)]
