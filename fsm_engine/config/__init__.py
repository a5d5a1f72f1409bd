"""Configuration module for fsm-engine."""

from fsm_engine.config.settings import (
    LoggingConfig,
    MachineConfig,
    NotifierConfig,
    load_config,
)

__all__ = ["LoggingConfig", "MachineConfig", "NotifierConfig", "load_config"]
