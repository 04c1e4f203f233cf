"""Pipeline layer — preview builder, action executor, controller."""

from sheetpilot.pipeline.controller import (
    ExecutionOutcome,
    PendingAction,
    PipelineController,
    PipelineState,
    SubmissionOutcome,
)
from sheetpilot.pipeline.executor import ActionExecutor
from sheetpilot.pipeline.numbers import coerce_number
from sheetpilot.pipeline.preview import build_preview
from sheetpilot.pipeline.scratch import ScratchSheet

__all__ = [
    "ActionExecutor",
    "ExecutionOutcome",
    "PendingAction",
    "PipelineController",
    "PipelineState",
    "ScratchSheet",
    "SubmissionOutcome",
    "build_preview",
    "coerce_number",
]
