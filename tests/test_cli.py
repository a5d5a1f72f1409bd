"""Tests for the fsm-engine CLI."""
from __future__ import annotations

import json
import textwrap

import pytest
from click.testing import CliRunner

from fsm_engine import __version__
from fsm_engine.cli import cli
from fsm_engine.config.settings import CONFIG_ENV_VAR
from fsm_engine.utils.result import ExitCode

HANDLERS = '''
def connect(machine, host, port="80"):
    machine.publish("debug", f"connecting to {host}:{port}")
    machine.transition_to("CONNECTED")


def disconnect(machine):
    machine.transition_to("IDLE")


def explode(machine):
    raise RuntimeError("boom")
'''

MACHINE = """
initial: IDLE
states:
  IDLE:
    name: Idle
    events:
      connect: fsm_cli_handlers:connect
      explode: fsm_cli_handlers:explode
  CONNECTED:
    name: Connected
    events:
      disconnect: fsm_cli_handlers:disconnect
"""


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture
def machine_file(tmp_path, monkeypatch):
    (tmp_path / "fsm_cli_handlers.py").write_text(HANDLERS)
    monkeypatch.syspath_prepend(str(tmp_path))
    path = tmp_path / "machine.yaml"
    path.write_text(MACHINE)
    return path


def invoke(runner, *args):
    result = runner.invoke(cli, ["--log-level", "error", *args])
    data = json.loads(result.stdout) if result.stdout.strip() else None
    return result, data


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_validate(runner, machine_file):
    result, data = invoke(runner, "validate", str(machine_file))

    assert result.exit_code == 0
    assert data["valid"] is True
    assert data["states"] == ["IDLE", "CONNECTED"]
    assert data["initial"] == "IDLE"


def test_validate_invalid_definitions(runner, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(textwrap.dedent("""
        states:
          IDLE:
            events: {}
    """))

    result, data = invoke(runner, "validate", str(path))

    assert result.exit_code == ExitCode.DEFINITION_INVALID
    assert data["valid"] is False
    assert "IDLE" in data["message"]


def test_validate_missing_file(runner, tmp_path):
    result, data = invoke(runner, "validate", str(tmp_path / "missing.yaml"))

    assert result.exit_code == ExitCode.DEFINITION_LOAD_FAILED
    assert data["status"] == "error"


def test_describe(runner, machine_file):
    result, data = invoke(runner, "describe", str(machine_file))

    assert result.exit_code == 0
    assert data["initial"] == "IDLE"
    assert data["states"][0] == {
        "key": "IDLE",
        "name": "Idle",
        "enter": False,
        "exit": False,
        "events": ["connect", "explode"],
    }


def test_run(runner, machine_file):
    result, data = invoke(
        runner, "run", str(machine_file),
        "--event", "connect example.org 8080",
        "--event", "ping",
    )

    assert result.exit_code == 0
    assert data["status"] == "success"
    assert data["final_state"] == "CONNECTED"
    assert data["notifications"] == [
        {"channel": "debug", "message": "State change: None -> Idle"},
        {"channel": "transition", "from": None, "to": "IDLE"},
        {"channel": "debug", "message": "connecting to example.org:8080"},
        {"channel": "debug", "message": "State change: Idle -> Connected"},
        {"channel": "transition", "from": "IDLE", "to": "CONNECTED"},
        {"channel": "error", "message": "No event 'ping' in state 'Connected'"},
    ]


def test_run_with_start_state(runner, machine_file):
    result, data = invoke(
        runner, "run", str(machine_file), "--start", "CONNECTED",
        "--event", "disconnect",
    )

    assert result.exit_code == 0
    assert data["final_state"] == "IDLE"


def test_run_unknown_start_state(runner, machine_file):
    result, data = invoke(runner, "run", str(machine_file), "--start", "NOPE")

    assert result.exit_code == ExitCode.UNKNOWN_STATE
    assert "NOPE" in data["message"]


def test_run_without_start_state(runner, tmp_path):
    path = tmp_path / "no_initial.yaml"
    path.write_text("states:\n  IDLE:\n    name: Idle\n")

    result, data = invoke(runner, "run", str(path))

    assert result.exit_code == ExitCode.NO_START_STATE
    assert data["status"] == "error"


def test_run_handler_failure(runner, machine_file):
    result, data = invoke(runner, "run", str(machine_file), "--event", "explode")

    assert result.exit_code == ExitCode.HANDLER_FAILED
    assert "boom" in data["message"]
    assert data["notifications"][-1] == {"channel": "transition", "from": None, "to": "IDLE"}


def test_invalid_config(runner, tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("logging:\n  format: xml\n")

    result, data = invoke(runner, "--config", str(config), "validate", "whatever.yaml")

    assert result.exit_code == ExitCode.CONFIG_INVALID
    assert "logging.format" in data["message"]
