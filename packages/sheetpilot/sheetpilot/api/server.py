"""API layer — FastAPI application factory.

``create_app()`` is the single entry point for building the FastAPI app.
All dependencies are wired here so that tests can override them by
calling ``create_app()`` with custom objects.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sheetpilot import __version__
from sheetpilot.api.middleware import (
    AccessLogMiddleware,
    RequestIDMiddleware,
    build_error_handler,
)
from sheetpilot.api.routes import analyze, health, pipeline
from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.classifier.factory import build_classifier
from sheetpilot.config import Settings, get_settings
from sheetpilot.document.base import SpreadsheetDocument
from sheetpilot.document.factory import build_document
from sheetpilot.exceptions import SheetPilotError
from sheetpilot.logging import configure_logging, get_logger
from sheetpilot.pipeline.controller import PipelineController
from sheetpilot.pipeline.executor import ActionExecutor

log = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    document: SpreadsheetDocument | None = None,
    classifier: IntentClassifier | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings:   Optional settings override (used in tests).
        document:   Document handle to operate on.  None = build from
                    ``settings.document``.
        classifier: Classifier strategy.  None = build from
                    ``settings.classifier``.

    Returns:
        A fully configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
        log_file=str(settings.logging.file) if settings.logging.file else None,
    )

    app = FastAPI(
        title="SheetPilot",
        description="Natural-language spreadsheet actions with preview and explicit confirmation.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (outermost is added last)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(SheetPilotError, build_error_handler())  # type: ignore[arg-type]

    # Routers
    app.include_router(health.router)
    app.include_router(analyze.router)
    app.include_router(pipeline.router)

    # Wiring
    document = document if document is not None else build_document(settings.document)
    classifier = classifier if classifier is not None else build_classifier(settings.classifier)
    controller = PipelineController(
        classifier=classifier,
        document=document,
        executor=ActionExecutor.from_config(settings.document),
        locale=settings.classifier.locale,
    )

    app.state.settings = settings
    app.state.document = document
    app.state.classifier = classifier
    app.state.controller = controller

    # Startup / shutdown lifecycle
    @app.on_event("startup")
    async def startup() -> None:
        log.info(
            "server_ready",
            version=__version__,
            host=settings.server.host,
            port=settings.server.port,
            classifier=classifier.name,
            document_backend=document.backend,
        )

    @app.on_event("shutdown")
    async def shutdown() -> None:
        log.info("server_stopping")
        await classifier.close()
        await document.close()

    return app
