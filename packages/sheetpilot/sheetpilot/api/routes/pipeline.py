"""Pipeline routes — submit, confirm, cancel, inspect.

State errors (nothing pending, stale or double confirm) surface as 409
through the global SheetPilotError handler.  Preview and execution
failures are not HTTP errors: they come back in the body's ``error`` field.
"""

from __future__ import annotations

from typing import Annotated, Union

from fastapi import APIRouter, Body

from sheetpilot.api.dependencies import ControllerDep
from sheetpilot.api.schemas import (
    CancelResponse,
    ConfirmRequest,
    ConfirmResponse,
    PipelineStatusResponse,
    SubmitRequest,
    SubmitResponse,
)

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


@router.get("", response_model=PipelineStatusResponse, summary="Current pipeline state")
async def get_pipeline(controller: ControllerDep) -> PipelineStatusResponse:
    return PipelineStatusResponse(**controller.snapshot())


@router.post(
    "/submit",
    response_model=SubmitResponse,
    summary="Classify a request and build its preview",
)
async def submit(body: SubmitRequest, controller: ControllerDep) -> SubmitResponse:
    outcome = await controller.submit(body.message)
    return SubmitResponse(**outcome.to_dict())


@router.post(
    "/confirm",
    response_model=ConfirmResponse,
    summary="Apply the pending action",
)
async def confirm(
    controller: ControllerDep,
    body: Annotated[Union[ConfirmRequest, None], Body()] = None,
) -> ConfirmResponse:
    outcome = await controller.confirm(seq=body.seq if body is not None else None)
    return ConfirmResponse(**outcome.to_dict())


@router.post("/cancel", response_model=CancelResponse, summary="Drop the pending action")
async def cancel(controller: ControllerDep) -> CancelResponse:
    state = controller.cancel()
    return CancelResponse(state=state.value)
