"""CLI entry point for fsm-engine."""

from __future__ import annotations

import json
import shlex
import sys
from pathlib import Path
from typing import Any, Optional

import click

from fsm_engine import __version__
from fsm_engine.config.settings import MachineConfig, load_config
from fsm_engine.errors import FSMError
from fsm_engine.machine import StateMachine, load_definitions
from fsm_engine.machine.loader import LoadedDefinitions
from fsm_engine.utils.logging import (
    configure_logging,
    get_logger,
    new_run_id,
    set_run_context,
)
from fsm_engine.utils.result import ExitCode


class Context:
    """CLI context for sharing state between commands."""

    def __init__(self, config: MachineConfig, log_level: str, log_format: str) -> None:
        self.config = config
        self.log_level = log_level
        self.log_format = log_format
        self.logger = get_logger("cli")


pass_context = click.make_pass_decorator(Context)


def output_json(data: dict) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


def _load_or_exit(ctx: Context, path: Path) -> LoadedDefinitions:
    result = load_definitions(path, package=ctx.config.handlers_package)
    if result.is_ok():
        return result.unwrap()

    error = result.unwrap_err()
    ctx.logger.warning("definitions_rejected", source=error.source, error=str(error))
    output_json({
        "status": "error",
        "valid": False,
        "message": str(error),
    })
    code = (
        ExitCode.DEFINITION_INVALID
        if error.kind == "invalid"
        else ExitCode.DEFINITION_LOAD_FAILED
    )
    sys.exit(code)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to YAML config file (default: $FSM_ENGINE_CONFIG or ./fsm-engine.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default=None,
    help="Logging level (overrides config)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default=None,
    help="Log format (overrides config)",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """
    fsm-engine - validate, inspect and exercise state machine definitions.

    Definition files are YAML documents with a 'states' mapping whose
    actions and event handlers are import paths to Python callables.
    """
    result = load_config(config_path)
    if result.is_err():
        configure_logging(level=log_level or "info", format_type=log_format or "json")
        output_json({
            "status": "error",
            "message": str(result.unwrap_err()),
        })
        sys.exit(ExitCode.CONFIG_INVALID)

    config = result.unwrap()
    log_level = log_level or config.logging.level
    log_format = log_format or config.logging.format

    configure_logging(level=log_level, format_type=log_format)

    ctx.obj = Context(config=config, log_level=log_level, log_format=log_format)


@cli.command()
@click.argument("definitions", type=click.Path(exists=False, path_type=Path))
@pass_context
def validate(ctx: Context, definitions: Path) -> None:
    """Check that a definition file loads and is well formed."""
    loaded = _load_or_exit(ctx, definitions)

    ctx.logger.info("definitions_valid", source=loaded.source, states=len(loaded.states))
    output_json({
        "status": "success",
        "valid": True,
        "states": list(loaded.states),
        "initial": loaded.initial,
    })


@cli.command()
@click.argument("definitions", type=click.Path(exists=False, path_type=Path))
@pass_context
def describe(ctx: Context, definitions: Path) -> None:
    """Show the states, actions and events of a definition file."""
    loaded = _load_or_exit(ctx, definitions)

    output_json({
        "initial": loaded.initial,
        "states": [
            {
                "key": key,
                "name": entry["name"],
                "enter": "enter" in entry,
                "exit": "exit" in entry,
                "events": sorted(entry.get("events", {})),
            }
            for key, entry in loaded.states.items()
        ],
    })


@cli.command()
@click.argument("definitions", type=click.Path(exists=False, path_type=Path))
@click.option(
    "--start",
    default=None,
    help="State key to enter first (default: the document's initial state)",
)
@click.option(
    "--event",
    "events",
    multiple=True,
    help='Event to dispatch, with arguments, e.g. "connect localhost 8080" (can be repeated)',
)
@pass_context
def run(
    ctx: Context,
    definitions: Path,
    start: Optional[str],
    events: tuple[str, ...],
) -> None:
    """Enter a start state, dispatch events in order, and print the notifications."""
    run_id = new_run_id()
    set_run_context(run_id)

    loaded = _load_or_exit(ctx, definitions)

    start = start or loaded.initial
    if start is None:
        output_json({
            "status": "error",
            "message": "No start state: pass --start or set 'initial' in the document",
        })
        sys.exit(ExitCode.NO_START_STATE)

    if start not in loaded.states:
        output_json({
            "status": "error",
            "message": f"Unknown start state: {start}",
        })
        sys.exit(ExitCode.UNKNOWN_STATE)

    machine = StateMachine(loaded.states, config=ctx.config)
    notifications: list[dict[str, Any]] = []

    def on_debug(message: str) -> None:
        notifications.append({"channel": "debug", "message": message})

    def on_transition(old_state: Any, new_state: Any) -> None:
        notifications.append({
            "channel": "transition",
            "from": old_state.key if old_state is not None else None,
            "to": new_state.key,
        })

    def on_error(error: Exception) -> None:
        notifications.append({"channel": "error", "message": str(error)})

    machine.subscribe("debug", on_debug)
    machine.subscribe("transition", on_transition)
    machine.subscribe("error", on_error)

    ctx.logger.info("run_started", start=start, events=len(events))

    try:
        machine.transition_to(start)
        for raw_event in events:
            parts = shlex.split(raw_event)
            if not parts:
                continue
            machine.dispatch_event(parts[0], *parts[1:])
    except FSMError as e:
        ctx.logger.warning("run_failed", error=str(e))
        output_json({
            "status": "error",
            "message": str(e),
            "notifications": notifications,
        })
        sys.exit(ExitCode.UNKNOWN_STATE)
    except Exception as e:
        ctx.logger.warning("handler_failed", error=str(e), error_type=type(e).__name__)
        output_json({
            "status": "error",
            "message": f"Handler failed: {e}",
            "notifications": notifications,
        })
        sys.exit(ExitCode.HANDLER_FAILED)

    final_state = machine.current_state
    output_json({
        "status": "success",
        "run_id": run_id,
        "final_state": final_state.key if final_state is not None else None,
        "notifications": notifications,
    })


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
