"""Error kinds raised or published by the state machine."""

from __future__ import annotations

from typing import Any, Optional


class FSMError(Exception):
    """Base class for state machine errors."""

    pass


class ValidationError(FSMError, ValueError):
    """Malformed state definitions."""

    def __init__(
        self,
        message: str,
        state_key: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        self.state_key = state_key
        self.field = field
        if state_key is not None:
            message = f"State {state_key!r}: {message}"
        super().__init__(message)


class DispatchError(FSMError):
    """Event name not handled by the current state."""

    def __init__(self, event_name: str, state_name: str) -> None:
        self.event_name = event_name
        self.state_name = state_name
        super().__init__(f"No event '{event_name}' in state '{state_name}'")


class NoActiveStateError(FSMError, RuntimeError):
    """Operation requires a current state but none has been entered yet."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: machine has no current state "
            f"(call transition_to first)"
        )


class UnknownStateError(FSMError, LookupError):
    """Transition target does not belong to this machine."""

    def __init__(self, target: Any) -> None:
        self.target = target
        super().__init__(f"Unknown state for this machine: {target!r}")


class UnhandledErrorNotification(FSMError):
    """Raised for a non-exception payload published on an unobserved error channel."""

    def __init__(self, payload: tuple[Any, ...]) -> None:
        self.payload = payload
        super().__init__(f"Unhandled error notification: {payload!r}")
