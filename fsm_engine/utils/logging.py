"""Structured logging for the engine and CLI."""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog

# Identifies one CLI run (or any caller-defined unit of work) in log output
run_id_var: ContextVar[str] = ContextVar("run_id", default="")


def new_run_id() -> str:
    return str(uuid.uuid4())[:8]


def set_run_context(run_id: str) -> None:
    """Set the run id attached to every log event in this context."""
    run_id_var.set(run_id)


def get_run_id() -> str:
    return run_id_var.get()


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add run context to log events."""
    run_id = run_id_var.get()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def add_timestamp(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _renderer(format_type: str) -> structlog.types.Processor:
    if format_type.lower() == "text":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(
    level: str = "info",
    format_type: str = "json",
    stream: Any = None,
) -> None:
    """
    Route structlog output for the CLI or a test run.

    Importing the package never calls this, so applications embedding the
    engine keep their own structlog setup. Unknown levels fall back to info.

    Args:
        level: One of ``LEVELS``
        format_type: 'json' or 'text'
        stream: Output stream (default: sys.stderr)
    """
    threshold = LEVELS.get(level.lower(), logging.INFO)

    # Loggers are module-level proxies; caching would pin the first config
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            add_timestamp,
            add_context_info,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(format_type),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a lazy logger; ``name`` is attached as ``logger_name``."""
    # Initial values keep the proxy lazy; bind() would freeze the current config
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
