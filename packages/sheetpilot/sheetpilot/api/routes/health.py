"""GET /health — liveness plus the wiring the server is running with."""

from __future__ import annotations

import time

from fastapi import APIRouter

from sheetpilot import __version__
from sheetpilot.api.dependencies import ClassifierDep, ControllerDep, DocumentDep
from sheetpilot.api.schemas import HealthResponse

router = APIRouter(tags=["health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Server health check")
async def health(
    classifier: ClassifierDep,
    document: DocumentDep,
    controller: ControllerDep,
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        classifier=classifier.name,
        document_backend=document.backend,
        pipeline_state=controller.state.value,
    )
