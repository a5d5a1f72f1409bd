"""Utility modules for fsm-engine."""

from fsm_engine.utils.emitter import Emitter, Notifier
from fsm_engine.utils.logging import (
    configure_logging,
    get_logger,
    get_run_id,
    new_run_id,
    set_run_context,
)
from fsm_engine.utils.result import (
    ConfigError,
    DefinitionError,
    Err,
    ExitCode,
    Ok,
    Result,
    ResultError,
)

__all__ = [
    # Notifications
    "Emitter",
    "Notifier",
    # Logging
    "configure_logging",
    "get_logger",
    "get_run_id",
    "new_run_id",
    "set_run_context",
    # Result
    "Ok",
    "Err",
    "Result",
    "ResultError",
    "ConfigError",
    "DefinitionError",
    "ExitCode",
]
