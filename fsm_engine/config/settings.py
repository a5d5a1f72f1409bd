"""Centralized configuration for state machines and tooling.

Configuration can be loaded from YAML files and validated at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from fsm_engine.utils.result import ConfigError, Err, Ok, Result


CONFIG_ENV_VAR = "FSM_ENGINE_CONFIG"
DEFAULT_CONFIG_FILE = "fsm-engine.yaml"

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")
LOG_FORMATS = ("json", "text")


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class NotifierConfig:
    """Settings for the default notification channel."""

    # Unobserved 'error' notifications raise instead of being logged
    raise_unhandled_errors: bool = True


@dataclass
class MachineConfig:
    """
    Complete engine configuration.

    Defaults are usable as-is; a YAML file only needs the keys it changes.
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    notifier: NotifierConfig = field(default_factory=NotifierConfig)

    # Module used to resolve bare handler names in definition files
    handlers_package: Optional[str] = None

    @classmethod
    def from_yaml(cls, path: Path) -> Result["MachineConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field="root",
                message=f"Expected a mapping, got {type(data).__name__}",
            ))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["MachineConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        try:
            logging_data = data.get("logging") or {}
            logging_config = LoggingConfig(
                level=str(logging_data.get("level", "info")),
                format=str(logging_data.get("format", "json")),
            )

            notifier_data = data.get("notifier") or {}
            raise_unhandled = notifier_data.get("raise_unhandled_errors", True)
            if not isinstance(raise_unhandled, bool):
                return Err(ConfigError(
                    field="notifier.raise_unhandled_errors",
                    message=f"Must be true or false, got {raise_unhandled!r}",
                ))
            notifier = NotifierConfig(raise_unhandled_errors=raise_unhandled)

            config = cls(
                logging=logging_config,
                notifier=notifier,
                handlers_package=data.get("handlers_package"),
            )

            return Ok(config)

        except (AttributeError, TypeError, ValueError) as e:
            return Err(ConfigError(
                field="unknown",
                message=f"Failed to parse configuration: {e}",
            ))

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        if self.logging.level.lower() not in LOG_LEVELS:
            return Err(ConfigError(
                field="logging.level",
                message=f"Must be one of {', '.join(LOG_LEVELS)}, got {self.logging.level}",
            ))

        if self.logging.format.lower() not in LOG_FORMATS:
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be one of {', '.join(LOG_FORMATS)}, got {self.logging.format}",
            ))

        if self.handlers_package is not None and (
            not isinstance(self.handlers_package, str) or not self.handlers_package.strip()
        ):
            return Err(ConfigError(
                field="handlers_package",
                message="Must be a non-empty module path",
            ))

        return Ok(None)


def load_config(path: Optional[Path] = None) -> Result[MachineConfig, ConfigError]:
    """
    Load configuration from the standard location.

    Uses ``path`` if given, then ``$FSM_ENGINE_CONFIG``, then
    ``./fsm-engine.yaml``. Falls back to defaults when no file is found.

    Args:
        path: Explicit configuration file

    Returns:
        Result with loaded config or error
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)

    if path is not None:
        result = MachineConfig.from_yaml(Path(path))
        if result.is_err():
            return result
        config = result.unwrap()
    elif Path(DEFAULT_CONFIG_FILE).exists():
        result = MachineConfig.from_yaml(Path(DEFAULT_CONFIG_FILE))
        if result.is_err():
            return result
        config = result.unwrap()
    else:
        config = MachineConfig()

    # Validate final config
    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config)
