"""Result type for loaders that report failures instead of raising.

Configuration and definition-file loading return ``Ok``/``Err`` so callers
(the CLI in particular) handle every failure path explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Mapped type


class ResultError(Exception):
    """Raised when unwrapping the wrong side of a Result."""

    pass


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ResultError(f"Called unwrap_err on Ok value: {self.value}")

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(fn(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed result."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ResultError(f"Called unwrap on Err value: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, fn: Callable[[T], U]) -> "Err[E]":
        """No-op for Err."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


@dataclass(frozen=True)
class ConfigError:
    """Error in configuration."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"Config error in '{self.field}': {self.message}"


@dataclass(frozen=True)
class DefinitionError:
    """Error loading or validating a state definition document."""

    source: str
    message: str
    # "load" (file, YAML, references) or "invalid" (structure)
    kind: str = "load"
    cause: Exception | None = None

    def __str__(self) -> str:
        if self.cause:
            return f"{self.source}: {self.message} ({self.cause})"
        return f"{self.source}: {self.message}"


class ExitCode:
    """Exit codes for CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1

    # Configuration errors (10-19)
    CONFIG_INVALID = 10

    # Definition errors (20-29)
    DEFINITION_LOAD_FAILED = 20
    DEFINITION_INVALID = 21

    # Run errors (30-39)
    NO_START_STATE = 30
    UNKNOWN_STATE = 31
    HANDLER_FAILED = 32
