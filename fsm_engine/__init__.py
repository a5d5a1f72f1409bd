"""fsm-engine: a small, embeddable finite state machine."""

__version__ = "0.1.0"

from fsm_engine.errors import (
    DispatchError,
    FSMError,
    NoActiveStateError,
    UnhandledErrorNotification,
    UnknownStateError,
    ValidationError,
)
from fsm_engine.machine import (
    State,
    StateDefinition,
    StateMachine,
    load_definitions,
    validate,
)
from fsm_engine.utils.emitter import Emitter, Notifier

__all__ = [
    "__version__",
    "StateMachine",
    "State",
    "StateDefinition",
    "validate",
    "load_definitions",
    "Emitter",
    "Notifier",
    "FSMError",
    "ValidationError",
    "DispatchError",
    "NoActiveStateError",
    "UnknownStateError",
    "UnhandledErrorNotification",
]
