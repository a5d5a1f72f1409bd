"""Finite state machine engine.

A machine is built from a declarative map of states. Each state has a
name, optional ``enter``/``exit`` actions and an ``events`` table:

    machine = StateMachine({
        "IDLE": {"name": "Idle", "events": {"connect": on_connect}},
        "CONNECTED": {"name": "Connected", "enter": on_connected},
    })
    machine.transition_to(machine.states["IDLE"])
    machine.dispatch_event("connect", host)

Every action and handler is called with the machine as its first argument.
Lifecycle notifications go out on the ``debug``, ``transition`` and
``error`` channels of the machine's notifier.
"""

from fsm_engine.machine.loader import (
    LoadedDefinitions,
    definitions_from_dict,
    load_definitions,
    resolve_callable,
)
from fsm_engine.machine.machine import DEBUG, ERROR, TRANSITION, StateMachine
from fsm_engine.machine.states import State, StateDefinition, validate

__all__ = [
    # States
    "State",
    "StateDefinition",
    "validate",
    # Machine
    "StateMachine",
    "DEBUG",
    "TRANSITION",
    "ERROR",
    # Loading
    "LoadedDefinitions",
    "definitions_from_dict",
    "load_definitions",
    "resolve_callable",
]
