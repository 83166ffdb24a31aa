"""Uptime escalation conditions."""

from dataclasses import dataclass
from enum import Enum

from uptimectl.core.config import Config


class Condition(Enum):
    """Escalation level for a single run."""

    NORMAL = "normal"
    SOFT_WARNING = "soft_warning"
    URGENT_WARNING = "urgent_warning"
    FORCED_SHUTDOWN = "forced_shutdown"
    INITIAL_GRACE_SHUTDOWN = "initial_grace_shutdown"

    @property
    def terminal(self) -> bool:
        """True if this condition ends in a restart."""
        return self in SHUTDOWN_COUNTDOWNS


@dataclass(frozen=True)
class ShutdownCountdown:
    """Countdown shown before a restart."""

    seconds: int
    title: str
    message: str


SHUTDOWN_COUNTDOWNS = {
    Condition.FORCED_SHUTDOWN: ShutdownCountdown(
        seconds=300,
        title="Maximum Uptime Approaching!",
        message="until automatic restart!",
    ),
    # Machines first seen far past the limit get a longer, one-time warning
    Condition.INITIAL_GRACE_SHUTDOWN: ShutdownCountdown(
        seconds=7200,
        title="Maximum Uptime Exceeded!",
        message="until automatic restart.",
    ),
}


def classify(uptime: int, config: Config, first_run: bool) -> Condition:
    """
    Map an uptime sample to its escalation condition.

    Args:
        uptime: Seconds since boot
        config: Thresholds
        first_run: True if the standard registration did not exist yet

    Returns:
        The first matching condition, highest threshold first
    """
    if uptime >= config.max_uptime:
        if first_run:
            return Condition.INITIAL_GRACE_SHUTDOWN
        return Condition.FORCED_SHUTDOWN
    if uptime >= config.urgent_threshold:
        return Condition.URGENT_WARNING
    if uptime >= config.initial_notification:
        return Condition.SOFT_WARNING
    return Condition.NORMAL
