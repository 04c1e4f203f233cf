"""SheetPilot — Structured logging configuration.

Uses structlog for structured, levelled logging with consistent key names
across all layers.  All log entries include:
    - timestamp (ISO-8601)
    - level
    - logger (Python logger name)
    - seq / action (bound via context variables while a request is in flight)
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

# Context variables, automatically injected into log records when set.
_ctx_seq: ContextVar[int | None] = ContextVar("seq", default=None)
_ctx_action: ContextVar[str | None] = ContextVar("action", default=None)


def bind_request_context(seq: int | None = None, action: str | None = None) -> None:
    """Bind pipeline request context to the current async task."""
    if seq is not None:
        _ctx_seq.set(seq)
    if action is not None:
        _ctx_action.set(action)


def clear_request_context() -> None:
    _ctx_seq.set(None)
    _ctx_action.set(None)


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


def _inject_context_vars(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Add ContextVar values to every log record."""
    if (seq := _ctx_seq.get()) is not None:
        event_dict["seq"] = seq
    if (action := _ctx_action.get()) is not None:
        event_dict["action"] = action
    return event_dict


def _drop_color_message(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Remove uvicorn's ``color_message`` duplicate field."""
    event_dict.pop("color_message", None)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Call once at startup, before any log statements.

    Args:
        level:    One of debug, info, warning, error, critical.
        format:   ``"console"`` for human-readable output, ``"json"`` for
                  machine-readable structured logs.
        log_file: Optional path to write logs to in addition to stderr.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _drop_color_message,
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = []

    # stderr keeps stdout free for CLI output.
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(level.upper())

    # Silence noisy third-party loggers.
    for noisy in ("uvicorn.access", "httpx", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.info("preview_ready", seq=3, action="sort_sales_desc")
    """
    return structlog.get_logger(name)
