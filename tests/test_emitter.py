"""Unit tests for Emitter."""
from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from fsm_engine import Emitter, UnhandledErrorNotification


def test_subscribe_and_publish():
    """Handler receives the published arguments immediately."""
    emitter = Emitter()
    received = []

    emitter.subscribe("test_signal", lambda *args: received.append(args))
    delivered = emitter.publish("test_signal", 42, "x")

    assert delivered is True
    assert received == [(42, "x")]


def test_publish_without_subscribers():
    """Publishing on a non-error channel with no subscribers is a no-op."""
    emitter = Emitter()
    assert emitter.publish("no_subscribers", 123) is False


def test_handlers_called_in_subscription_order():
    emitter = Emitter()
    order = []

    emitter.subscribe("event", lambda: order.append("a"))
    emitter.subscribe("event", lambda: order.append("b"))
    emitter.subscribe("event", lambda: order.append("c"))
    emitter.publish("event")

    assert order == ["a", "b", "c"]


def test_channels_are_independent():
    emitter = Emitter()
    alpha, beta = [], []

    emitter.subscribe("alpha", alpha.append)
    emitter.subscribe("beta", beta.append)
    emitter.publish("alpha", 1)
    emitter.publish("beta", 2)

    assert alpha == [1]
    assert beta == [2]


def test_unsubscribe():
    emitter = Emitter()
    received = []
    handler = received.append

    emitter.subscribe("event", handler)
    emitter.unsubscribe("event", handler)
    emitter.publish("event", 1)

    assert received == []
    assert emitter.listener_count("event") == 0


def test_unsubscribe_unknown_handler_is_ignored():
    emitter = Emitter()
    emitter.unsubscribe("event", print)
    emitter.subscribe("event", len)
    emitter.unsubscribe("event", print)
    assert emitter.listeners("event") == [len]


def test_once_handler_runs_a_single_time():
    emitter = Emitter()
    received = []

    emitter.once("event", received.append)
    emitter.publish("event", 1)
    emitter.publish("event", 2)

    assert received == [1]
    assert emitter.listener_count("event") == 0


def test_once_handler_can_be_unsubscribed_by_original():
    emitter = Emitter()
    received = []

    emitter.once("event", received.append)
    assert emitter.listeners("event") == [received.append]
    emitter.unsubscribe("event", received.append)
    emitter.publish("event", 1)

    assert received == []


def test_handler_unsubscribing_during_publish():
    """Delivery uses the listener list as it was when publish started."""
    emitter = Emitter()
    received = []

    def first():
        received.append("first")
        emitter.unsubscribe("event", second)

    def second():
        received.append("second")

    emitter.subscribe("event", first)
    emitter.subscribe("event", second)
    emitter.publish("event")
    emitter.publish("event")

    assert received == ["first", "second", "first"]


def test_clear():
    emitter = Emitter()
    emitter.subscribe("a", len)
    emitter.subscribe("b", len)

    emitter.clear("a")
    assert emitter.listener_count("a") == 0
    assert emitter.listener_count("b") == 1

    emitter.clear()
    assert emitter.listener_count("b") == 0


def test_unobserved_error_is_raised():
    emitter = Emitter()
    with pytest.raises(ValueError, match="bad"):
        emitter.publish("error", ValueError("bad"))


def test_unobserved_non_exception_error_is_wrapped():
    emitter = Emitter()
    with pytest.raises(UnhandledErrorNotification) as exc_info:
        emitter.publish("error", "something broke")
    assert exc_info.value.payload == ("something broke",)


def test_observed_error_is_delivered():
    emitter = Emitter()
    received = []
    error = ValueError("bad")

    emitter.subscribe("error", received.append)
    emitter.publish("error", error)

    assert received == [error]


def test_unobserved_error_can_be_logged_instead():
    emitter = Emitter(raise_unhandled_errors=False)

    with capture_logs() as logs:
        assert emitter.publish("error", ValueError("bad")) is False

    assert len(logs) == 1
    assert logs[0]["event"] == "unhandled_error_notification"
    assert logs[0]["log_level"] == "error"
    assert logs[0]["error"] == "bad"
    assert logs[0]["error_type"] == "ValueError"


def test_on_and_emit_aliases():
    emitter = Emitter()
    received = []
    emitter.on("event", received.append)
    emitter.emit("event", 1)
    assert received == [1]
