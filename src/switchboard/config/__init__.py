"""Configuration models and parser for switchboard.yaml."""

from switchboard.config.models import AgentSettings, BackendName, SwitchboardConfig
from switchboard.config.parser import ConfigError, load_config

__all__ = [
    "AgentSettings",
    "BackendName",
    "ConfigError",
    "SwitchboardConfig",
    "load_config",
]
