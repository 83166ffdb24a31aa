"""uptimectl - enforce a maximum uptime with warnings and an automatic restart."""

__version__ = "0.1.0"
