"""Human-readable durations and times."""

from datetime import datetime, timedelta


def format_unit(value: int, label: str) -> str:
    """Format a count with a singular or plural label."""
    if value == 1:
        return f"{value} {label}"
    return f"{value} {label}s"


def format_seconds(seconds: int) -> str:
    """
    Format a duration as hours, minutes and seconds.

    Lower units are kept once a higher unit is non-zero, so 3601 becomes
    "1 hour 0 minutes 1 second". Hours are not folded into days.
    """
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return (
            f"{format_unit(hours, 'hour')} {format_unit(minutes, 'minute')} "
            f"{format_unit(secs, 'second')}"
        )
    if minutes:
        return f"{format_unit(minutes, 'minute')} {format_unit(secs, 'second')}"
    return format_unit(secs, "second")


def format_restart_time(now: datetime, remaining: int) -> str:
    """Format the wall-clock time `remaining` seconds after `now`."""
    return (now + timedelta(seconds=remaining)).strftime("%A at %I:%M:%S %p")
