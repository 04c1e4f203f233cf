"""SheetPilot — Exception hierarchy.

All exceptions raised by SheetPilot inherit from SheetPilotError so that
callers can catch the full family with a single except clause when needed.

Hierarchy:
    SheetPilotError
    ├── InputError
    │   └── EmptyInputError
    ├── ClassifierError
    │   └── ClassifierTransportError
    ├── DocumentError
    │   ├── MissingColumnError
    │   ├── InconsistentColumnLengthError
    │   ├── EmptyTableError
    │   ├── SheetNotFoundError
    │   └── TableNotFoundError
    ├── ExecutionError
    │   ├── ExecutionFailedError
    │   └── UnsupportedActionError
    └── PipelineError
        ├── PipelineBusyError
        ├── NoPendingActionError
        └── StaleConfirmationError
"""

from __future__ import annotations

from typing import Any


class SheetPilotError(Exception):
    """Base exception for all SheetPilot errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class InputError(SheetPilotError):
    """Base for errors caused by the user's request itself."""


class EmptyInputError(InputError):
    """The submitted text is empty after trimming."""

    def __init__(self) -> None:
        super().__init__("Input text is empty", context={})


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class ClassifierError(SheetPilotError):
    """Base for intent classifier errors."""


class ClassifierTransportError(ClassifierError):
    """The remote classifier could not be reached or answered garbage."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            f"Classifier request to '{url}' failed: {reason}",
            context={"url": url, "reason": reason},
        )
        self.url = url
        self.reason = reason


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class DocumentError(SheetPilotError):
    """Base for errors about the shape or content of the live document."""


class MissingColumnError(DocumentError):
    """One or more required named columns are absent from the table."""

    def __init__(self, columns: list[str]) -> None:
        names = ", ".join(f"'{c}'" for c in columns)
        super().__init__(
            f"Table is missing required column(s): {names}",
            context={"missing_columns": list(columns)},
        )
        self.columns = list(columns)


class InconsistentColumnLengthError(DocumentError):
    """Two columns that must line up row-for-row have different lengths."""

    def __init__(self, lengths: dict[str, int]) -> None:
        detail = ", ".join(f"{name}={count}" for name, count in lengths.items())
        super().__init__(
            f"Column row counts differ: {detail}",
            context={"lengths": dict(lengths)},
        )
        self.lengths = dict(lengths)


class EmptyTableError(DocumentError):
    """The table has no data rows."""

    def __init__(self, table: str = "") -> None:
        super().__init__(
            f"Table '{table}' has no data rows" if table else "Table has no data rows",
            context={"table": table},
        )


class SheetNotFoundError(DocumentError):
    """A worksheet referenced by name does not exist."""

    def __init__(self, sheet: str) -> None:
        super().__init__(f"Sheet '{sheet}' not found", context={"sheet": sheet})
        self.sheet = sheet


class TableNotFoundError(DocumentError):
    """The worksheet holds no table to operate on."""

    def __init__(self, sheet: str) -> None:
        super().__init__(f"Sheet '{sheet}' contains no table", context={"sheet": sheet})
        self.sheet = sheet


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class ExecutionError(SheetPilotError):
    """Base for action execution errors."""


class ExecutionFailedError(ExecutionError):
    """The document API raised an unexpected error while executing an action."""

    def __init__(self, action: str, cause: Exception) -> None:
        super().__init__(
            f"Action '{action}' failed: {cause}",
            context={"action": action, "cause": str(cause)},
        )
        self.action = action
        self.cause = cause


class UnsupportedActionError(ExecutionError):
    """No executor exists for the given action kind."""

    def __init__(self, action: str) -> None:
        super().__init__(
            f"Action '{action}' cannot be executed",
            context={"action": action},
        )
        self.action = action


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class PipelineError(SheetPilotError):
    """Base for pipeline controller state errors."""


class PipelineBusyError(PipelineError):
    """An action is already executing; a second confirm was refused."""

    def __init__(self, seq: int) -> None:
        super().__init__(
            f"Request #{seq} is still executing",
            context={"seq": seq},
        )
        self.seq = seq


class NoPendingActionError(PipelineError):
    """Confirm was called without a preview waiting for confirmation."""

    def __init__(self, state: str) -> None:
        super().__init__(
            f"No action is waiting for confirmation (state: {state})",
            context={"state": state},
        )
        self.state = state


class StaleConfirmationError(PipelineError):
    """Confirm referenced a request that has since been replaced."""

    def __init__(self, requested: int, pending: int) -> None:
        super().__init__(
            f"Request #{requested} is no longer pending (current: #{pending})",
            context={"requested_seq": requested, "pending_seq": pending},
        )
        self.requested = requested
        self.pending = pending
