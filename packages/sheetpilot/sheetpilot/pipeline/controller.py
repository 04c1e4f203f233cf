"""Pipeline — Controller.

The PipelineController is the only component holding cross-step state.  It
drives one request through classify → preview → (confirm) → execute and
enforces single flight: at most one pending action and at most one
execution in progress.

State machine::

    idle ──submit──▶ classifying ──▶ preview_ready ──confirm──▶ executing ──▶ idle
      ▲                  │                 │                        │
      └──── Unsupported ─┘      cancel / resubmit                failed ──▶ idle

Every ``submit()`` takes a new, strictly increasing sequence number.  When
an older submission's awaits resolve after a newer one has started, its
result is dropped (``SubmissionOutcome.superseded``) and the controller is
left exactly as the newer submission set it.

Preview and execution failures are caught here and reported through the
outcome's ``error`` field; they never leave the controller stuck in an
intermediate state.  Protocol misuse (empty input, confirming with nothing
pending, double confirm) raises typed ``SheetPilotError`` subclasses.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sheetpilot.classifier.base import IntentClassifier
from sheetpilot.classifier.descriptions import DEFAULT_LOCALE, describe
from sheetpilot.document.base import SpreadsheetDocument
from sheetpilot.exceptions import (
    EmptyInputError,
    NoPendingActionError,
    PipelineBusyError,
    SheetPilotError,
    StaleConfirmationError,
)
from sheetpilot.logging import bind_request_context, clear_request_context, get_logger
from sheetpilot.pipeline.executor import ActionExecutor
from sheetpilot.pipeline.preview import build_preview, needs_snapshot
from sheetpilot.protocol.actions import Action, ActionKind
from sheetpilot.protocol.models import PreviewPayload

log = get_logger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    PREVIEW_READY = "preview_ready"
    EXECUTING = "executing"
    FAILED = "failed"


@dataclass
class PendingAction:
    """The single action waiting for user confirmation."""

    seq: int
    action: Action
    description: str
    preview: PreviewPayload


@dataclass
class SubmissionOutcome:
    seq: int
    state: PipelineState
    action: Action | None = None
    description: str | None = None
    preview: PreviewPayload | None = None
    error: str | None = None
    superseded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "state": self.state.value,
            "action": self.action.kind.value if self.action is not None else None,
            "description": self.description,
            "preview": self.preview.model_dump(mode="json") if self.preview is not None else None,
            "error": self.error,
            "superseded": self.superseded,
        }


@dataclass
class ExecutionOutcome:
    seq: int
    action: ActionKind
    success: bool
    state: PipelineState
    result: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "action": self.action.value,
            "success": self.success,
            "state": self.state.value,
            "result": self.result,
            "error": self.error,
        }


def _user_message(exc: Exception) -> str:
    if isinstance(exc, SheetPilotError):
        return exc.message
    return str(exc) or exc.__class__.__name__


class PipelineController:
    """Coordinates classifier, preview builder and executor for one document.

    Thread-safety: single event loop only.  State checks and transitions
    happen without an intervening ``await``, which is what makes the
    single-flight guarantees hold.

    Args:
        classifier: Intent classification strategy.
        document:   The live document handle.
        executor:   Applies confirmed actions.  Defaults to ``ActionExecutor()``.
        locale:     Display locale of action descriptions.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        document: SpreadsheetDocument,
        executor: ActionExecutor | None = None,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._classifier = classifier
        self._document = document
        self._executor = executor or ActionExecutor()
        self._locale = locale
        self._state = PipelineState.IDLE
        self._seq = 0
        self._pending: PendingAction | None = None
        self._executing_seq: int | None = None
        # Submissions up to this seq were cancelled while in flight.
        self._cancelled_through = 0
        self.last_error: str | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def pending(self) -> PendingAction | None:
        return self._pending

    @property
    def seq(self) -> int:
        """Sequence number of the most recent submission."""
        return self._seq

    def snapshot(self) -> dict[str, Any]:
        pending = self._pending
        return {
            "state": self._state.value,
            "seq": self._seq,
            "pending_seq": pending.seq if pending else None,
            "pending_action": pending.action.kind.value if pending else None,
            "description": pending.description if pending else None,
            "last_error": self.last_error,
        }

    def _is_superseded(self, seq: int) -> bool:
        return seq != self._seq or seq <= self._cancelled_through

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit(self, text: str) -> SubmissionOutcome:
        """Classify *text* and build the preview of the resulting action.

        Raises:
            EmptyInputError:   *text* is empty after trimming.
            PipelineBusyError: An action is executing.
        """
        if not text or not text.strip():
            raise EmptyInputError()
        if self._state == PipelineState.EXECUTING:
            raise PipelineBusyError(self._executing_seq or self._seq)

        self._seq += 1
        seq = self._seq
        self._pending = None
        self._state = PipelineState.CLASSIFYING
        clear_request_context()
        bind_request_context(seq=seq)
        log.info("submission_received", length=len(text))

        try:
            return await self._classify_and_preview(seq, text)
        except asyncio.CancelledError:
            if not self._is_superseded(seq):
                self._pending = None
                self._state = PipelineState.IDLE
                log.info("submission_interrupted")
            raise

    async def _classify_and_preview(self, seq: int, text: str) -> SubmissionOutcome:
        try:
            action = await self._classifier.classify(text)
        except Exception as exc:
            if self._is_superseded(seq):
                return self._superseded(seq)
            log.warning("classification_failed", error=str(exc))
            return self._submission_failed(seq, None, exc)

        if self._is_superseded(seq):
            return self._superseded(seq)

        bind_request_context(action=action.kind.value)
        description = describe(action, self._locale)

        if action.kind == ActionKind.UNSUPPORTED:
            self._state = PipelineState.IDLE
            log.info("submission_unsupported")
            return SubmissionOutcome(
                seq=seq, state=self._state, action=action, description=description
            )

        try:
            snapshot = await self._document.read_table() if needs_snapshot(action) else None
            if self._is_superseded(seq):
                return self._superseded(seq)
            preview = build_preview(action, snapshot)
        except Exception as exc:
            if self._is_superseded(seq):
                return self._superseded(seq)
            log.warning("preview_failed", error=str(exc))
            return self._submission_failed(seq, action, exc, description)

        self._pending = PendingAction(
            seq=seq, action=action, description=description, preview=preview
        )
        self._state = PipelineState.PREVIEW_READY
        self.last_error = None
        log.info("preview_ready", preview=preview.kind)
        return SubmissionOutcome(
            seq=seq,
            state=self._state,
            action=action,
            description=description,
            preview=preview,
        )

    def _superseded(self, seq: int) -> SubmissionOutcome:
        log.info("submission_superseded", superseded_by=self._seq)
        return SubmissionOutcome(seq=seq, state=self._state, superseded=True)

    def _submission_failed(
        self,
        seq: int,
        action: Action | None,
        exc: Exception,
        description: str | None = None,
    ) -> SubmissionOutcome:
        message = _user_message(exc)
        self.last_error = message
        self._state = PipelineState.IDLE
        return SubmissionOutcome(
            seq=seq,
            state=PipelineState.FAILED, action=action, description=description, error=message
        )

    # ------------------------------------------------------------------
    # Confirm / cancel
    # ------------------------------------------------------------------

    async def confirm(self, seq: int | None = None) -> ExecutionOutcome:
        """Execute the pending action.

        Args:
            seq: Sequence number the caller believes is pending.  None skips
                 the staleness check.

        Raises:
            PipelineBusyError:      An execution is already in progress.
            NoPendingActionError:   No preview is waiting for confirmation.
            StaleConfirmationError: *seq* does not match the pending action.
        """
        if self._state == PipelineState.EXECUTING:
            raise PipelineBusyError(self._executing_seq or self._seq)
        pending = self._pending
        if self._state != PipelineState.PREVIEW_READY or pending is None:
            raise NoPendingActionError(self._state.value)
        if seq is not None and seq != pending.seq:
            raise StaleConfirmationError(requested=seq, pending=pending.seq)

        self._state = PipelineState.EXECUTING
        self._executing_seq = pending.seq
        bind_request_context(seq=pending.seq, action=pending.action.kind.value)
        log.info("execution_started")

        try:
            result = await self._executor.execute(pending.action, self._document)
        except Exception as exc:
            message = _user_message(exc)
            self.last_error = message
            log.warning("execution_failed", error=message, error_type=type(exc).__name__)
            outcome_state = PipelineState.FAILED
            result = {}
        else:
            message = None
            self.last_error = None
            outcome_state = PipelineState.IDLE
            log.info("execution_succeeded")
        finally:
            # Also runs when the confirming task is cancelled mid-execution.
            self._pending = None
            self._executing_seq = None
            self._state = PipelineState.IDLE

        return ExecutionOutcome(
            seq=pending.seq,
            action=pending.action.kind,
            success=outcome_state == PipelineState.IDLE,
            state=outcome_state,
            result=result,
            error=message,
        )

    def cancel(self) -> PipelineState:
        """Drop the pending action, if any, and return to idle.

        A submission still classifying is reported as superseded when its
        awaits resolve.

        Raises:
            PipelineBusyError: An execution is in progress.
        """
        if self._state == PipelineState.EXECUTING:
            raise PipelineBusyError(self._executing_seq or self._seq)
        if self._pending is not None:
            log.info("pending_action_cancelled", seq=self._pending.seq)
        self._pending = None
        self._cancelled_through = self._seq
        self._state = PipelineState.IDLE
        return self._state
