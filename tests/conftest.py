"""Shared fixtures."""
from __future__ import annotations

import sys

import pytest

from fsm_engine.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def debug_logging():
    """Log everything to the (captured) stderr of the current test."""
    configure_logging(level="debug", format_type="json", stream=sys.stderr)
    yield


@pytest.fixture
def recorder():
    """Callable that records every call's positional arguments."""

    class Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, *args):
            self.calls.append(args)

        @property
        def count(self):
            return len(self.calls)

    return Recorder
