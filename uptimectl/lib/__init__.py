"""Host adapters used by the uptime check."""

from uptimectl.lib.host import UptimeError, console_user, read_uptime
from uptimectl.lib.notify import Countdown, NotifierError, create_notifiers
from uptimectl.lib.restart import Restarter, RestartError
from uptimectl.lib.timefmt import format_restart_time, format_seconds
from uptimectl.lib.triggers import (
    ACCELERATED,
    STANDARD,
    TriggerError,
    TriggerRegistry,
    create_registry,
)

__all__ = [
    "ACCELERATED",
    "Countdown",
    "NotifierError",
    "RestartError",
    "Restarter",
    "STANDARD",
    "TriggerError",
    "TriggerRegistry",
    "UptimeError",
    "console_user",
    "create_notifiers",
    "create_registry",
    "format_restart_time",
    "format_seconds",
    "read_uptime",
]
