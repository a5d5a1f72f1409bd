"""Load state definitions from YAML documents.

Handlers are referenced by import path::

    initial: IDLE
    states:
      IDLE:
        name: Idle
        enter: myapp.handlers:on_idle
        events:
          connect: myapp.handlers:connect

References use ``module.path:function`` (preferred) or
``module.path.function``. Bare names are looked up in ``package`` when one
is given.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from fsm_engine.errors import ValidationError
from fsm_engine.machine.states import DEFINITION_FIELDS, validate
from fsm_engine.utils.logging import get_logger
from fsm_engine.utils.result import DefinitionError, Err, Ok, Result

logger = get_logger("machine.loader")


@dataclass
class LoadedDefinitions:
    """State definitions ready to pass to StateMachine."""

    states: dict[str, dict[str, Any]]
    initial: Optional[str] = None
    source: str = "<dict>"


def resolve_callable(ref: str, package: Optional[str] = None) -> Callable[..., Any]:
    """
    Resolve a handler reference string to a callable.

    Args:
        ref: ``module.path:function``, ``module.path.function``, or a bare
            name when ``package`` is given
        package: Module searched for bare names

    Returns:
        The resolved callable

    Raises:
        ValueError: If the reference is malformed or not callable
        ImportError: If the module cannot be imported
        AttributeError: If the module has no such attribute
    """
    if not isinstance(ref, str):
        raise ValueError(
            f"Handler reference must be a string, got {type(ref).__name__}: {ref!r}"
        )
    if not ref.strip():
        raise ValueError(f"Empty handler reference: {ref!r}")

    ref = ref.strip()

    if ":" in ref:
        module_path, _, attr = ref.partition(":")
    elif "." in ref:
        module_path, _, attr = ref.rpartition(".")
    elif package:
        module_path, attr = package, ref
    else:
        raise ValueError(
            f"Invalid handler reference: '{ref}'. "
            f"Expected 'module.path:function' or 'module.path.function'"
        )

    if not module_path or not attr:
        raise ValueError(
            f"Invalid handler reference: '{ref}'. "
            f"Expected 'module.path:function'"
        )

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ImportError(
            f"Cannot import module '{module_path}' from reference '{ref}': {e}"
        ) from e

    if not hasattr(module, attr):
        raise AttributeError(f"'{attr}' not found in module '{module_path}'")

    fn = getattr(module, attr)
    if not callable(fn):
        raise ValueError(
            f"'{attr}' in module '{module_path}' is not callable "
            f"(got {type(fn).__name__})"
        )
    return fn


def _resolve_entry(
    key: str,
    entry: Any,
    package: Optional[str],
) -> dict[str, Any]:
    if not isinstance(entry, Mapping):
        raise ValidationError("State must be a mapping", state_key=key)

    unknown = sorted(set(entry) - set(DEFINITION_FIELDS), key=str)
    if unknown:
        raise ValidationError(
            f"Unknown field(s): {', '.join(map(str, unknown))}",
            state_key=key,
        )

    resolved: dict[str, Any] = {"name": entry.get("name")}

    for action in ("enter", "exit"):
        ref = entry.get(action)
        if ref is not None:
            resolved[action] = ref if callable(ref) else resolve_callable(ref, package)

    events = entry.get("events")
    if events is not None:
        if not isinstance(events, Mapping):
            raise ValidationError(
                "events must be a mapping if provided",
                state_key=key,
                field="events",
            )
        resolved["events"] = {
            event_name: ref if callable(ref) else resolve_callable(ref, package)
            for event_name, ref in events.items()
        }

    return resolved


def definitions_from_dict(
    data: Any,
    package: Optional[str] = None,
    source: str = "<dict>",
) -> Result[LoadedDefinitions, DefinitionError]:
    """
    Build state definitions from a parsed document.

    Args:
        data: Document with a ``states`` mapping and optional ``initial`` key
        package: Module searched for bare handler names
        source: Label used in error messages

    Returns:
        Result with definitions or error
    """
    if not isinstance(data, Mapping):
        return Err(DefinitionError(
            source=source,
            message=f"Expected a mapping, got {type(data).__name__}",
            kind="invalid",
        ))

    raw_states = data.get("states")
    if not isinstance(raw_states, Mapping) or not raw_states:
        return Err(DefinitionError(
            source=source,
            message="Document must contain a non-empty 'states' mapping",
            kind="invalid",
        ))

    try:
        states = {
            key: _resolve_entry(key, entry, package)
            for key, entry in raw_states.items()
        }
        validate(states)
    except ValidationError as e:
        return Err(DefinitionError(
            source=source,
            message=str(e),
            kind="invalid",
            cause=e,
        ))
    except (ImportError, AttributeError, ValueError) as e:
        return Err(DefinitionError(
            source=source,
            message="Failed to resolve handler",
            kind="load",
            cause=e,
        ))

    initial = data.get("initial")
    if initial is not None and initial not in states:
        return Err(DefinitionError(
            source=source,
            message=f"Initial state {initial!r} is not defined",
            kind="invalid",
        ))

    logger.debug("definitions_loaded", source=source, states=len(states))
    return Ok(LoadedDefinitions(states=states, initial=initial, source=source))


def load_definitions(
    path: Path,
    package: Optional[str] = None,
) -> Result[LoadedDefinitions, DefinitionError]:
    """
    Load state definitions from a YAML file.

    Args:
        path: Path to the definition document
        package: Module searched for bare handler names

    Returns:
        Result with definitions or error
    """
    path = Path(path)
    source = str(path)

    if not path.exists():
        return Err(DefinitionError(
            source=source,
            message="Definition file not found",
        ))

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return Err(DefinitionError(
            source=source,
            message="Failed to parse YAML",
            cause=e,
        ))
    except OSError as e:
        return Err(DefinitionError(
            source=source,
            message="Failed to read definition file",
            cause=e,
        ))

    return definitions_from_dict(data, package=package, source=source)
