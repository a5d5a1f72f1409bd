"""State definitions, validation, and machine-bound states."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Optional

from fsm_engine.errors import ValidationError

if TYPE_CHECKING:
    from fsm_engine.machine.machine import StateMachine


Action = Callable[["StateMachine"], Any]
EventHandler = Callable[..., Any]

# Fields read from a definition entry, in validation order
DEFINITION_FIELDS = ("name", "enter", "exit", "events")


@dataclass
class StateDefinition:
    """Typed form of a state definition entry.

    Plain mappings with the same keys are accepted everywhere a
    ``StateDefinition`` is.
    """

    name: str
    enter: Optional[Action] = None
    exit: Optional[Action] = None
    events: dict[str, EventHandler] = field(default_factory=dict)


def definition_field(entry: Any, name: str) -> Any:
    """Read a field from a mapping or ``StateDefinition`` entry (None if absent)."""
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def validate(defs: Any) -> bool:
    """
    Check the structure of a state definition map.

    Args:
        defs: Mapping of state key to definition entry

    Returns:
        True if every entry is well formed

    Raises:
        ValidationError: On the first malformed entry
    """
    if not isinstance(defs, Mapping):
        raise ValidationError(
            f"State definitions must be a mapping, got {type(defs).__name__}"
        )

    for key, entry in defs.items():
        if not isinstance(key, str):
            raise ValidationError(f"State key must be a string, got {key!r}")

        if not isinstance(entry, (Mapping, StateDefinition)):
            raise ValidationError(
                "State must be a mapping or StateDefinition",
                state_key=key,
            )

        name = definition_field(entry, "name")
        if not isinstance(name, str) or not name:
            raise ValidationError(
                "State must have a non-empty string name",
                state_key=key,
                field="name",
            )

        for action in ("enter", "exit"):
            fn = definition_field(entry, action)
            if fn is not None and not callable(fn):
                raise ValidationError(
                    f"{action} must be callable if provided",
                    state_key=key,
                    field=action,
                )

        events = definition_field(entry, "events")
        if events is None:
            continue

        if not isinstance(events, Mapping):
            raise ValidationError(
                "events must be a mapping if provided",
                state_key=key,
                field="events",
            )

        for event_name, handler in events.items():
            if not isinstance(event_name, str):
                raise ValidationError(
                    f"Event name must be a string, got {event_name!r}",
                    state_key=key,
                    field="events",
                )
            if not callable(handler):
                raise ValidationError(
                    f"Event handler {event_name!r} must be callable",
                    state_key=key,
                    field=f"events.{event_name}",
                )

    return True


@dataclass(frozen=True, eq=False)
class State:
    """A state definition bound to one machine.

    ``enter``, ``exit`` and every ``events`` handler already carry the owning
    machine as their first argument. States compare by identity.
    """

    key: str
    name: str
    enter: Optional[Callable[[], Any]] = None
    exit: Optional[Callable[[], Any]] = None
    events: Mapping[str, Callable[..., Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    definition: Any = None

    @classmethod
    def bind(cls, key: str, definition: Any, machine: StateMachine) -> State:
        """Build a State whose callables act on ``machine``."""
        enter = definition_field(definition, "enter")
        exit_ = definition_field(definition, "exit")
        events = definition_field(definition, "events") or {}

        return cls(
            key=key,
            name=definition_field(definition, "name"),
            enter=partial(enter, machine) if enter is not None else None,
            exit=partial(exit_, machine) if exit_ is not None else None,
            events=MappingProxyType({
                event_name: partial(handler, machine)
                for event_name, handler in events.items()
            }),
            definition=definition,
        )

    def handles(self, event_name: str) -> bool:
        """Check if this state defines a handler for ``event_name``."""
        return event_name in self.events

    def __repr__(self) -> str:
        return f"State({self.key!r}, name={self.name!r})"
