"""Configuration loading with layered overrides."""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """Error loading or validating configuration."""

    pass


DEFAULT_CONFIG_PATH = Path("/etc/uptimectl/config.yaml")

# Keys holding durations in seconds
DURATION_KEYS = (
    "initial_notification",
    "max_uptime",
    "increase_urgency",
    "check_frequency",
    "accelerated_check_frequency",
)

VALID_SCHEDULERS = {"auto", "launchd", "systemd"}
VALID_NOTIFIERS = {"auto", "cocoadialog", "libnotify", "none"}


@dataclass(frozen=True)
class Config:
    """Thresholds and host settings for one run."""

    # 4 days
    initial_notification: int = 345600
    # 7 days
    max_uptime: int = 604800
    # 1 day before max_uptime the warnings become urgent
    increase_urgency: int = 86400
    # 4 hours
    check_frequency: int = 14400
    # 1 hour, only while an urgent warning is pending
    accelerated_check_frequency: int = 3600

    log_dir: str = "/var/log/uptimectl"
    scheduler: str = "auto"
    notifier: str = "auto"
    label_prefix: str = "com.uptimectl"
    program: str = "/usr/local/bin/uptimectl"
    restart_command: tuple[str, ...] = ("shutdown", "-r", "now")
    cocoadialog_path: str = "/private/var/CocoaDialog.app/Contents/MacOS/CocoaDialog"
    launchd_dir: str = "/Library/LaunchDaemons"
    systemd_dir: str = "/etc/systemd/system"

    @property
    def urgent_threshold(self) -> int:
        """Uptime at which warnings become urgent."""
        return self.max_uptime - self.increase_urgency


def validate_config(config: Config) -> None:
    """
    Check threshold ordering and setting values.

    Args:
        config: Config to check

    Raises:
        ConfigError: If any value is invalid
    """
    for key in DURATION_KEYS:
        value = getattr(config, key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"'{key}' must be an integer number of seconds")

    if config.check_frequency <= 0:
        raise ConfigError("'check_frequency' must be positive")
    if config.accelerated_check_frequency <= 0:
        raise ConfigError("'accelerated_check_frequency' must be positive")

    urgent = config.urgent_threshold
    if not 0 < urgent < config.max_uptime:
        raise ConfigError(
            f"max_uptime - increase_urgency must lie between 0 and max_uptime "
            f"(got {urgent}, max_uptime={config.max_uptime})"
        )
    if config.initial_notification >= urgent:
        raise ConfigError(
            f"initial_notification ({config.initial_notification}) must be "
            f"less than max_uptime - increase_urgency ({urgent})"
        )

    if config.scheduler not in VALID_SCHEDULERS:
        raise ConfigError(
            f"Scheduler '{config.scheduler}' is not valid. "
            f"Use one of: {', '.join(sorted(VALID_SCHEDULERS))}"
        )
    if config.notifier not in VALID_NOTIFIERS:
        raise ConfigError(
            f"Notifier '{config.notifier}' is not valid. "
            f"Use one of: {', '.join(sorted(VALID_NOTIFIERS))}"
        )

    command = config.restart_command
    if not isinstance(command, tuple) or not command or not all(
        isinstance(part, str) for part in command
    ):
        raise ConfigError("'restart_command' must be a non-empty list of strings")


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML config file.

    Args:
        path: Path to the config file

    Returns:
        Parsed mapping (empty for an empty file)

    Raises:
        ConfigError: If the file is unreadable or not a YAML mapping
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping: {path}")

    return data


def load_config(path: Path | None = None) -> Config:
    """
    Build the run configuration.

    Compiled-in defaults are overridden by the system config file when it
    exists, or by an explicitly given file, which must exist.

    Args:
        path: Explicit config file (default: /etc/uptimectl/config.yaml if present)

    Returns:
        Validated Config

    Raises:
        ConfigError: If the file or any value is invalid
    """
    if path is None:
        data = load_config_file(DEFAULT_CONFIG_PATH) if DEFAULT_CONFIG_PATH.exists() else {}
    elif not path.exists():
        raise ConfigError(f"Config not found: {path}")
    else:
        data = load_config_file(path)

    known = {f.name for f in fields(Config)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    if isinstance(data.get("restart_command"), list):
        data["restart_command"] = tuple(data["restart_command"])

    config = replace(Config(), **data)
    validate_config(config)
    return config
