"""Core uptimectl functionality."""

from uptimectl.core.config import Config, ConfigError, load_config, validate_config
from uptimectl.core.context import Context
from uptimectl.core.controller import RunController, RunResult, build_controller
from uptimectl.core.escalation import SHUTDOWN_COUNTDOWNS, Condition, classify
from uptimectl.core.logging import RunLogger, get_log_path

__all__ = [
    "Condition",
    "Config",
    "ConfigError",
    "Context",
    "RunController",
    "RunLogger",
    "RunResult",
    "SHUTDOWN_COUNTDOWNS",
    "build_controller",
    "classify",
    "get_log_path",
    "load_config",
    "validate_config",
]
