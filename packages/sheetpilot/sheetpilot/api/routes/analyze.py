"""POST /analyze — the classifier transport.

Answers with the keyword rules in-process, whatever classifier backend the
pipeline itself is configured with, so a server never calls itself.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Union

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from sheetpilot.api.dependencies import ConfigDep
from sheetpilot.api.schemas import AnalyzeRequest, AnalyzeResponse
from sheetpilot.classifier.descriptions import describe
from sheetpilot.classifier.rules import classify_text
from sheetpilot.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["classifier"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"description": "The message is missing or empty."}},
    summary="Classify a natural-language request",
)
async def analyze(
    config: ConfigDep,
    payload: Annotated[Union[AnalyzeRequest, None], Body()] = None,
) -> Union[AnalyzeResponse, JSONResponse]:
    message = payload.message if payload is not None else None
    if not message or not message.strip():
        return JSONResponse(status_code=400, content={"error": "missing message"})

    latency = config.classifier.simulated_latency_seconds
    if latency > 0:
        await asyncio.sleep(latency)

    action = classify_text(message)
    log.info("analyze_answered", action=action.kind.value)
    return AnalyzeResponse(
        action=action.kind.value,
        description=describe(action, config.classifier.locale),
    )
