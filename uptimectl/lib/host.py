"""Host facts: uptime and console user."""

import re
import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uptimectl.core.context import Context


class UptimeError(Exception):
    """Error sampling uptime."""

    pass


# sysctl -n kern.boottime: "{ sec = 1426700000, usec = 0 } Wed Mar 18 ..."
BOOTTIME_PATTERN = re.compile(r"sec\s*=\s*(\d+)")


def parse_proc_uptime(content: str) -> int:
    """Parse /proc/uptime content into whole seconds."""
    try:
        return int(float(content.split()[0]))
    except (IndexError, ValueError):
        raise UptimeError(f"Unexpected /proc/uptime content: {content!r}")


def parse_boottime(output: str, now: float) -> int:
    """Parse kern.boottime output into seconds elapsed since boot."""
    match = BOOTTIME_PATTERN.search(output)
    if match is None:
        raise UptimeError(f"Unexpected kern.boottime output: {output!r}")
    return int(now) - int(match.group(1))


def read_uptime(context: "Context") -> int:
    """
    Sample the current uptime.

    Args:
        context: Execution context

    Returns:
        Seconds since boot

    Raises:
        UptimeError: If uptime cannot be determined
    """
    if context.file_exists("/proc/uptime"):
        try:
            return parse_proc_uptime(context.read_file("/proc/uptime"))
        except OSError as e:
            raise UptimeError(f"Unable to read /proc/uptime: {e}")

    try:
        result = context.run(["sysctl", "-n", "kern.boottime"])
    except (OSError, subprocess.TimeoutExpired) as e:
        raise UptimeError(f"Unable to run sysctl: {e}")
    if result.returncode != 0:
        raise UptimeError(f"sysctl failed: {result.stderr.strip()}")

    uptime = parse_boottime(result.stdout, context.time())
    if uptime < 0:
        raise UptimeError("Boot time is in the future")
    return uptime


def console_user(context: "Context") -> str | None:
    """
    Find the user logged in at the console.

    Returns:
        User name, or None if nobody is logged in or `who` is unavailable
    """
    try:
        result = context.run(["who"])
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None

    for line in result.stdout.splitlines():
        parts = line.split()
        # macOS: "alice console ...", Linux: "alice seat0 ..." or "alice :0 ..."
        if len(parts) >= 2 and parts[1] in ("console", "seat0", ":0"):
            return parts[0]
    return None
