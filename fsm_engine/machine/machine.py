"""State machine engine: transitions and event dispatch."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Optional, Union

from fsm_engine.config.settings import MachineConfig
from fsm_engine.errors import (
    DispatchError,
    NoActiveStateError,
    UnknownStateError,
)
from fsm_engine.machine.states import State, validate
from fsm_engine.utils.emitter import Emitter, Notifier
from fsm_engine.utils.logging import get_logger

logger = get_logger("machine")

DEBUG = "debug"
TRANSITION = "transition"
ERROR = "error"


class StateMachine:
    """
    Finite state machine over a declarative state map.

    Each state may define ``enter`` and ``exit`` actions and an ``events``
    table. Actions and handlers receive the machine as their first argument
    and may call ``transition_to`` or ``dispatch_event`` themselves.

    Notifications are published on the ``debug``, ``transition`` and
    ``error`` channels of ``notifier``.
    """

    validate = staticmethod(validate)

    def __init__(
        self,
        definitions: Mapping[str, Any],
        notifier: Optional[Notifier] = None,
        config: Optional[MachineConfig] = None,
    ) -> None:
        """
        Initialize the machine.

        Args:
            definitions: Mapping of state key to definition entry
            notifier: Notification channel (defaults to a new Emitter)
            config: Machine configuration

        Raises:
            ValidationError: If definitions are malformed
        """
        validate(definitions)

        self.config = config or MachineConfig()
        self.definitions = definitions

        if notifier is None:
            notifier = Emitter(
                raise_unhandled_errors=self.config.notifier.raise_unhandled_errors,
            )
        self.notifier = notifier

        self.states: Mapping[str, State] = MappingProxyType({
            key: State.bind(key, definition, self)
            for key, definition in definitions.items()
        })
        self._keys_by_definition = {
            id(definition): key for key, definition in definitions.items()
        }

        self.state: Optional[State] = None

    @property
    def current_state(self) -> Optional[State]:
        return self.state

    def subscribe(self, channel: str, handler: Callable[..., Any]) -> None:
        """Subscribe ``handler`` to a notification channel."""
        self.notifier.subscribe(channel, handler)

    on = subscribe

    def unsubscribe(self, channel: str, handler: Callable[..., Any]) -> None:
        self.notifier.unsubscribe(channel, handler)

    def publish(self, channel: str, *args: Any) -> Any:
        """Publish on the machine's notifier. Handlers use this for custom channels."""
        return self.notifier.publish(channel, *args)

    def transition_to(
        self,
        new_state: Union[State, str, Mapping[str, Any]],
    ) -> bool:
        """
        Make ``new_state`` the current state.

        Runs the current state's ``exit``, publishes ``debug`` and
        ``transition`` notifications, updates the state and runs the new
        state's ``enter``.

        Args:
            new_state: A state of this machine, its key, or its entry in
                ``definitions``

        Returns:
            False if already in ``new_state`` (nothing happens), else True

        Raises:
            UnknownStateError: If ``new_state`` does not belong to this machine
        """
        new_state = self._resolve(new_state)
        old_state = self.state

        if old_state is not None:
            if old_state is new_state:
                self.publish(DEBUG, f"State is already {new_state.name}")
                return False

            if old_state.exit is not None:
                old_state.exit()

        old_name = old_state.name if old_state is not None else None
        self.publish(DEBUG, f"State change: {old_name} -> {new_state.name}")
        self.publish(TRANSITION, old_state, new_state)

        self.state = new_state

        logger.debug(
            "state_transition",
            from_state=old_state.key if old_state is not None else None,
            to_state=new_state.key,
        )

        if new_state.enter is not None:
            new_state.enter()

        return True

    def dispatch_event(self, event_name: str, *args: Any) -> None:
        """
        Call the current state's handler for ``event_name`` with ``args``.

        A missing handler is reported on the ``error`` channel as a
        DispatchError; the machine stays usable.

        Raises:
            NoActiveStateError: If no state has been entered yet
        """
        state = self.state
        if state is None:
            raise NoActiveStateError(f"dispatch event {event_name!r}")

        handler = state.events.get(event_name)
        if handler is None:
            logger.warning(
                "event_not_handled",
                event_name=event_name,
                state=state.key,
            )
            self.publish(ERROR, DispatchError(event_name, state.name))
            return

        handler(*args)

    def can_handle(self, event_name: str) -> bool:
        """Check if the current state defines ``event_name``."""
        return self.state is not None and self.state.handles(event_name)

    def is_in(self, key: str) -> bool:
        """Check if the current state is ``states[key]``."""
        return self.state is not None and self.state is self.states.get(key)

    def _resolve(self, target: Union[State, str, Mapping[str, Any]]) -> State:
        if isinstance(target, str):
            state = self.states.get(target)
            if state is None:
                raise UnknownStateError(target)
            return state

        if isinstance(target, State) and self.states.get(target.key) is target:
            return target

        # Entries of the bound definition map resolve to their bound state.
        key = self._keys_by_definition.get(id(target))
        if key is not None and self.definitions.get(key) is target:
            return self.states[key]

        raise UnknownStateError(target)

    def __repr__(self) -> str:
        current = self.state.key if self.state is not None else None
        return f"StateMachine(states={list(self.states)!r}, state={current!r})"
