"""API layer — Request and response schemas.

These are the external API contracts.  They are kept separate from the
pipeline's dataclasses so the wire format can evolve independently.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Classifier transport
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    """POST /analyze — classify one message."""

    message: str | None = Field(default=None, description="The user's request text.")


class AnalyzeResponse(BaseModel):
    action: str = Field(description="Wire identifier of the classified action.")
    description: str


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class SubmitRequest(BaseModel):
    """POST /pipeline/submit"""

    message: str = ""


class SubmitResponse(BaseModel):
    seq: int
    state: str
    action: str | None = None
    description: str | None = None
    preview: dict[str, Any] | None = None
    error: str | None = None
    superseded: bool = False


class ConfirmRequest(BaseModel):
    """POST /pipeline/confirm"""

    seq: int | None = Field(
        default=None,
        description="Sequence number of the preview being confirmed. Omit to confirm whatever is pending.",
    )


class ConfirmResponse(BaseModel):
    seq: int
    action: str
    success: bool
    state: str
    result: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class CancelResponse(BaseModel):
    state: str


class PipelineStatusResponse(BaseModel):
    state: str
    seq: int
    pending_seq: int | None = None
    pending_action: str | None = None
    description: str | None = None
    last_error: str | None = None


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float
    classifier: str
    document_backend: str
    pipeline_state: str


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: Any | None = None
    request_id: str | None = None
