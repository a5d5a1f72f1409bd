"""Synchronous in-process publish/subscribe channel."""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from fsm_engine.errors import UnhandledErrorNotification
from fsm_engine.utils.logging import get_logger

logger = get_logger("utils.emitter")

ERROR_CHANNEL = "error"

Handler = Callable[..., Any]


class Notifier(Protocol):
    """Anything the state machine can publish notifications through."""

    def subscribe(self, channel: str, handler: Handler) -> None: ...

    def publish(self, channel: str, *args: Any) -> Any: ...


class Emitter:
    """
    Named-channel event emitter.

    Handlers run immediately, in subscription order, with the published
    arguments. Publishing on ``error`` with no subscribers either raises the
    error value or logs it, depending on ``raise_unhandled_errors``.
    """

    def __init__(self, raise_unhandled_errors: bool = True) -> None:
        """
        Initialize the emitter.

        Args:
            raise_unhandled_errors: Raise unobserved error notifications
                instead of logging them
        """
        self.raise_unhandled_errors = raise_unhandled_errors
        self._subscribers: dict[str, list[Handler]] = {}

    def subscribe(self, channel: str, handler: Handler) -> None:
        self._subscribers.setdefault(channel, []).append(handler)

    on = subscribe

    def once(self, channel: str, handler: Handler) -> None:
        """Subscribe a handler that is removed after its first call."""

        def wrapper(*args: Any) -> Any:
            self.unsubscribe(channel, wrapper)
            return handler(*args)

        wrapper.listener = handler  # type: ignore[attr-defined]
        self.subscribe(channel, wrapper)

    def unsubscribe(self, channel: str, handler: Handler) -> None:
        handlers = self._subscribers.get(channel)
        if not handlers:
            return
        for registered in handlers:
            if registered == handler or getattr(registered, "listener", None) == handler:
                handlers.remove(registered)
                break
        if not handlers:
            del self._subscribers[channel]

    def publish(self, channel: str, *args: Any) -> bool:
        """
        Deliver ``args`` to every handler of ``channel``.

        Returns:
            True if at least one handler was called

        Raises:
            Exception: The published error (or UnhandledErrorNotification) when
                ``error`` has no subscribers and raising is enabled
        """
        # Snapshot so handlers may (un)subscribe while being called
        handlers = list(self._subscribers.get(channel, ()))

        if not handlers:
            if channel == ERROR_CHANNEL:
                self._unhandled_error(args)
            return False

        for handler in handlers:
            handler(*args)
        return True

    emit = publish

    def listeners(self, channel: str) -> list[Handler]:
        return [
            getattr(handler, "listener", handler)
            for handler in self._subscribers.get(channel, ())
        ]

    def listener_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, ()))

    def clear(self, channel: Optional[str] = None) -> None:
        """Remove all handlers, or only those of ``channel``."""
        if channel is None:
            self._subscribers.clear()
        else:
            self._subscribers.pop(channel, None)

    def _unhandled_error(self, args: tuple[Any, ...]) -> None:
        error = args[0] if args and isinstance(args[0], BaseException) else None

        if self.raise_unhandled_errors:
            if error is not None:
                raise error
            raise UnhandledErrorNotification(args)

        logger.error(
            "unhandled_error_notification",
            error=str(error) if error is not None else repr(args),
            error_type=type(error).__name__ if error is not None else None,
        )
